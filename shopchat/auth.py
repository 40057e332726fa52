from typing import Any

from fastapi.security.utils import get_authorization_scheme_param
from jwcrypto.common import JWException
from jwcrypto.jwt import JWTExpired
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
)
from starlette.authentication import (
    AuthenticationError as StarletteAuthenticationError,
)
from starlette.requests import HTTPConnection

from shopchat.logging import logger
from shopchat.managers.token_manager import TokenManager
from shopchat.schemas.user import ClaimedUser


class AuthenticationError(StarletteAuthenticationError):  # type: ignore[misc]
    """
    Custom exception for credential failures.

    Subclasses Starlette's AuthenticationError so AuthenticationMiddleware
    rejects the request (or closes the WebSocket) before any endpoint runs.

    Attributes:
        reason: A machine-readable error code (e.g., 'token_expired')
        detail: Human-readable error details
    """

    def __init__(self, reason: str, detail: str) -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}")


def extract_bearer_token(conn: HTTPConnection) -> str:
    """
    Get the raw token presented by a client.

    The ``authorization`` header is read first; WebSocket clients that
    cannot set headers may pass an ``Authorization`` query parameter
    instead. Both ``Bearer <token>`` and a bare token are accepted.

    Args:
        conn: The HTTP request or WebSocket handshake.

    Returns:
        str: The token, or an empty string when none was presented.
    """
    value = conn.headers.get("authorization", "")
    if not value and conn.scope["type"] == "websocket":
        value = conn.query_params.get("Authorization", "")

    scheme, param = get_authorization_scheme_param(value)
    if scheme.lower() == "bearer":
        return param.strip()
    return value.strip()


class AuthBackend(AuthenticationBackend):  # type: ignore[misc]
    """
    Authentication backend verifying shop bearer tokens.

    A request without a token stays anonymous (endpoints decide whether
    that is acceptable; the messages gateway closes such connections).
    A request with an invalid or expired token is rejected outright.

    Raises:
        AuthenticationError: When a presented token fails verification:
            - Expired JWT tokens (reason='token_expired')
            - Bad signature or malformed token (reason='token_decode_error')
            - Missing ``id`` claim (reason='invalid_claims')
    """

    def __init__(
        self, token_manager: TokenManager | None = None, *args: Any, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.token_manager = token_manager or TokenManager()

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, ClaimedUser] | None:
        """
        Verify the token presented on a request or WebSocket handshake.

        Args:
            conn: The incoming request or WebSocket handshake.

        Returns:
            Tuple of (AuthCredentials, ClaimedUser) on success, None when
            no token was presented.

        Raises:
            AuthenticationError: When the token fails verification.
        """
        logger.debug(f"Request type -> {conn.scope['type']}")

        token = extract_bearer_token(conn)
        if not token:
            return None

        try:
            claims = self.token_manager.verify(token)
        except JWTExpired as ex:
            logger.error(f"JWT token expired: {ex}")
            raise AuthenticationError("token_expired", str(ex))
        except (JWException, ValueError) as ex:
            logger.error(f"Error occurred while decode auth token: {ex}")
            raise AuthenticationError("token_decode_error", str(ex))

        user_id = claims.get("id")
        if not user_id:
            logger.error("Auth token has no id claim")
            raise AuthenticationError("invalid_claims", "Missing id claim")

        user = ClaimedUser(id=str(user_id), expires_at=claims.get("exp"))
        return AuthCredentials(["authenticated"]), user
