"""The authenticated caller of the current request.

OAuth2Authentication binds the caller when DRF authenticates a request;
SecurityContextMiddleware unbinds it when the request ends. Services read
the caller from here instead of accepting a user id from the client.
"""

import threading
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from rest_framework.exceptions import AuthenticationFailed

if TYPE_CHECKING:
    from notifications.auth.oauth2 import OAuth2User

logger = structlog.get_logger(__name__)

_security_context = threading.local()


def set_current_user(user: "OAuth2User") -> None:
    """Bind the authenticated caller to the current thread."""
    _security_context.user = user


def get_current_user() -> "OAuth2User | None":
    """Return the caller bound to the current thread, if any."""
    return getattr(_security_context, "user", None)


def clear_current_user() -> None:
    """Unbind the caller once the request has been processed."""
    if hasattr(_security_context, "user"):
        delattr(_security_context, "user")


def require_current_user() -> "OAuth2User":
    """Return the bound caller.

    Raises:
        AuthenticationFailed: If no caller is bound.
    """
    user = get_current_user()
    if user is None:
        raise AuthenticationFailed("Authentication required")
    return user


def require_caller_id() -> UUID:
    """Return the bound caller's user id as the UUID notifications are keyed by.

    Raises:
        AuthenticationFailed: If no caller is bound, or the token subject
            is not a user id (e.g. a service client token).
    """
    user = require_current_user()
    try:
        return UUID(str(user.user_id))
    except ValueError as e:
        logger.warning("invalid_caller_id", user_id=user.user_id)
        raise AuthenticationFailed("Token subject is not a valid user id") from e
