"""Pydantic request and response schemas."""

from notifications.schemas.base_schema_model import BaseSchemaModel
from notifications.schemas.envelope import SuccessEnvelope

__all__ = ["BaseSchemaModel", "SuccessEnvelope"]
