"""Bearer token verification for Supabase-issued access tokens."""

from __future__ import annotations

from typing import Any

from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from app.config.settings import IdentityConfig, settings


class IdentityError(Exception):
    """Raised when a bearer token cannot be decoded or is otherwise invalid."""


class TokenPayload(BaseModel):
    """Minimal claims required from an access token."""

    sub: str
    role: str | None = None
    email: str | None = None


class JwtIdentityProvider:
    """Resolve an access token to the user id carried in its ``sub`` claim."""

    def __init__(self, config: IdentityConfig | None = None) -> None:
        self._config = config or settings.identity

    def decode(self, token: str) -> TokenPayload:
        if self._config.jwt_secret is None:
            raise IdentityError("No JWT secret configured")

        options: dict[str, Any] = {"verify_aud": self._config.jwt_audience is not None}
        try:
            payload = jwt.decode(
                token,
                self._config.jwt_secret.get_secret_value(),
                algorithms=[self._config.jwt_algorithm],
                audience=self._config.jwt_audience,
                options=options,
            )
            return TokenPayload.model_validate(payload)
        except (JWTError, ValidationError) as exc:
            raise IdentityError("Invalid authentication token") from exc

    async def resolve_user_id(self, token: str) -> str | None:
        return self.decode(token).sub or None


__all__ = ["IdentityError", "JwtIdentityProvider", "TokenPayload"]
