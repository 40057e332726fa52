import json
import time
from typing import Any

from jwcrypto import jwk, jwt

from shopchat.settings import app_settings

JWT_ALGORITHM = "HS256"


class TokenManager:
    """
    Issues and verifies the bearer tokens presented by shop clients.

    Tokens are HS256-signed JWTs carrying the user's id in the ``id`` claim.
    """

    def __init__(
        self, secret: str | None = None, expires_in: int | None = None
    ) -> None:
        self.key = jwk.JWK.from_password(secret or app_settings.JWT_SECRET)
        self.expires_in = (
            expires_in
            if expires_in is not None
            else app_settings.JWT_EXPIRES_IN
        )

    def issue(self, user_id: str) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: Value of the ``id`` claim.

        Returns:
            str: Compact serialized JWT.
        """
        now = int(time.time())
        token = jwt.JWT(
            header={"alg": JWT_ALGORITHM, "typ": "JWT"},
            claims={"id": str(user_id), "iat": now, "exp": now + self.expires_in},
        )
        token.make_signed_token(self.key)
        return token.serialize()

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a token's signature and expiry.

        Args:
            token: Compact serialized JWT.

        Returns:
            dict[str, Any]: The token claims.

        Raises:
            jwcrypto.jwt.JWTExpired: The token has expired.
            jwcrypto.common.JWException: Bad signature or malformed token.
            ValueError: The token could not be decoded.
        """
        verified = jwt.JWT(jwt=token, key=self.key, algs=[JWT_ALGORITHM])
        return json.loads(verified.claims)
