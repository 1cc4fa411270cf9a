"""Caller identity resolution (Stage 04) of the voice pipeline."""

from __future__ import annotations

import logging

from app.telemetry import increment_identity_fallback

from .collaborators import IdentityProvider
from .errors import IdentityResolutionFailed
from .types import CallerIdentity

logger = logging.getLogger("app.services.voice_pipeline")


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""

    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None

    return token.strip() or None


async def resolve_caller_identity(
    authorization: str | None,
    provider: IdentityProvider,
) -> CallerIdentity:
    """Resolve the caller, degrading to anonymous instead of failing.

    Without a credential the provider is never called. A credential that
    cannot be resolved is attributed to anonymous and flagged with
    ``resolution_failed`` for logs and metrics only.
    """

    token = extract_bearer_token(authorization)
    if token is None:
        return CallerIdentity()

    try:
        user_id = await provider.resolve_user_id(token)
        if not user_id:
            raise IdentityResolutionFailed("Identity provider returned no user")
    except Exception as exc:
        failure = (
            exc
            if isinstance(exc, IdentityResolutionFailed)
            else IdentityResolutionFailed(str(exc) or type(exc).__name__)
        )
        logger.warning("Identity resolution failed; continuing as anonymous: %s", failure)
        increment_identity_fallback()
        return CallerIdentity(resolution_failed=True, resolution_error=str(failure))

    return CallerIdentity(id=str(user_id))


__all__ = ["extract_bearer_token", "resolve_caller_identity"]
