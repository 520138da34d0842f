"""OAuth2 bearer token authentication for Django REST Framework.

Access tokens are JWTs issued by the auth service and validated locally
with the shared signing secret.
"""

from typing import Any

from django.conf import settings

import jwt
import structlog
from rest_framework import authentication, exceptions

from notifications.auth.context import set_current_user
from notifications.constants import ADMIN_SCOPE, USER_SCOPE

logger = structlog.get_logger(__name__)


class OAuth2User:
    """Simple user object for OAuth2 authenticated requests.

    This is not a Django User model, just a container for token claims.
    The ``user_id`` is the only identity the notification engines trust.
    """

    def __init__(self, user_id: str, client_id: str, scopes: list[str]):
        """Initialize OAuth2 user.

        Args:
            user_id: User ID from the token subject.
            client_id: OAuth2 client ID.
            scopes: List of granted scopes.
        """
        self.id = user_id
        self.user_id = user_id
        self.client_id = client_id
        self.scopes = scopes
        self.is_authenticated = True

    def has_scope(self, scope: str) -> bool:
        """Check if user has a specific scope."""
        return scope in self.scopes

    @property
    def is_admin(self) -> bool:
        """Whether the caller may act as a notification producer."""
        return self.has_scope(ADMIN_SCOPE)

    @property
    def can_read_own(self) -> bool:
        """Whether the caller may read and mutate its own notifications."""
        return self.has_scope(USER_SCOPE) or self.has_scope(ADMIN_SCOPE)

    def __str__(self):
        """String representation."""
        return f"OAuth2User(user_id={self.user_id}, client_id={self.client_id})"


class OAuth2Authentication(authentication.BaseAuthentication):
    """OAuth2 Bearer token authentication.

    Extracts the Bearer token from the Authorization header, validates it
    and publishes the caller to the thread-local security context.
    """

    def authenticate(self, request):
        """Authenticate the request using OAuth2 Bearer token.

        Args:
            request: Django request object

        Returns:
            Tuple of (user, token) or None if authentication not attempted

        Raises:
            AuthenticationFailed: If authentication fails
        """
        if not settings.OAUTH2_SERVICE_ENABLED:
            return None

        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise exceptions.AuthenticationFailed("Invalid authorization header format")

        token = parts[1]
        token_data = self._validate_via_jwt(token)

        subject = token_data.get("sub") or token_data.get("user_id")
        if not subject:
            logger.warning("token_missing_subject")
            raise exceptions.AuthenticationFailed("Token has no subject")

        user = OAuth2User(
            user_id=str(subject),
            client_id=token_data.get("client_id") or "unknown",
            scopes=token_data["scopes"],
        )
        set_current_user(user)

        return (user, token)

    def _validate_via_jwt(self, token: str) -> dict[str, Any]:
        """Validate token locally by verifying the JWT signature.

        Args:
            token: JWT access token to validate

        Returns:
            Token claims with ``scopes`` normalized to a list

        Raises:
            AuthenticationFailed: If token is invalid
        """
        if not settings.JWT_SECRET:
            logger.error("jwt_secret_not_configured")
            raise exceptions.AuthenticationFailed("JWT validation not configured")

        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=["HS256", "HS384", "HS512"],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_nbf": True,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("jwt_expired")
            raise exceptions.AuthenticationFailed("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning("jwt_invalid", error=str(e))
            raise exceptions.AuthenticationFailed("Invalid token") from e

        token_type = payload.get("type")
        if token_type != "access_token":
            logger.warning("jwt_invalid_type", token_type=token_type)
            raise exceptions.AuthenticationFailed(f"Invalid token type: {token_type}")

        scopes = payload.get("scopes")
        if scopes is None:
            # RFC 8693 style space separated "scope" claim
            scopes = (payload.get("scope") or "").split()

        return {
            "sub": payload.get("sub"),
            "user_id": payload.get("user_id"),
            "client_id": payload.get("client_id"),
            "scopes": list(scopes),
        }

    def authenticate_header(self, _request):
        """Return WWW-Authenticate header value for 401 responses."""
        return "Bearer"
