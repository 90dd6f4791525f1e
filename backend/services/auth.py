"""
Bearer token resolution for the conversation endpoint.

Access tokens are HS256 JWTs issued by the auth provider; the user id is the
``sub`` claim. Resolution never rejects a request: a missing, malformed or
expired token is logged and the caller proceeds anonymously.
"""

import logging
from typing import Optional

import jwt

from errors import AuthError

logger = logging.getLogger(__name__)

JWT_ALGORITHMS = ["HS256"]


class TokenResolver:
    """Decodes bearer tokens into user ids."""

    def __init__(self, secret: str, audience: Optional[str] = "authenticated"):
        self.secret = secret
        self.audience = audience or None

    def decode(self, token: str) -> str:
        """Return the user id for ``token``.

        Raises:
            AuthError: Token invalid, expired, missing ``sub``, or no secret configured
        """
        if not self.secret:
            raise AuthError("Token resolution is not configured", not_configured=True)

        options = {"verify_aud": self.audience is not None}
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=JWT_ALGORITHMS,
                audience=self.audience,
                options=options,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthError("Token invalid", details=str(e)) from e

        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Token has no subject")
        return str(user_id)

    def resolve(self, authorization: Optional[str]) -> Optional[str]:
        """Resolve an ``Authorization`` header value to a user id, or None."""
        if not authorization:
            return None

        token = authorization
        if authorization.lower().startswith("bearer "):
            token = authorization[7:]
        token = token.strip()
        if not token:
            return None

        try:
            return self.decode(token)
        except AuthError as e:
            logger.warning(f"Auth resolution failed, continuing anonymously: {e}")
            return None


_resolver: Optional[TokenResolver] = None


def get_token_resolver() -> TokenResolver:
    """Get or create the resolver configured from runtime config."""
    global _resolver
    if _resolver is None:
        from config import runtime_config

        _resolver = TokenResolver(runtime_config.auth_jwt_secret, runtime_config.auth_jwt_audience)
    return _resolver
