"""Uniform response envelope."""

from typing import Any

from notifications.schemas.base_schema_model import BaseSchemaModel


class SuccessEnvelope(BaseSchemaModel):
    """Successful API response: ``{"success": true, "data": ...}``.

    Failures use the same shape with ``success: false`` and an ``error``
    object; those are built by the DRF exception handler.
    """

    success: bool = True
    data: Any = None

    @classmethod
    def wrap(cls, payload: BaseSchemaModel | dict[str, Any] | None) -> dict[str, Any]:
        """Wrap a response schema into a JSON ready envelope.

        Args:
            payload: Response schema or plain dict to put under ``data``.

        Returns:
            JSON compatible dict with camelCase keys.
        """
        if isinstance(payload, BaseSchemaModel):
            payload = payload.model_dump(by_alias=True, mode="json")
        return cls(data=payload).model_dump(by_alias=True, mode="json")
