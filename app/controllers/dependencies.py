"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from app.pipelines.voice import VoiceCollaborators


def get_collaborators(request: Request) -> VoiceCollaborators:
    """Return the collaborator clients built at application startup."""

    collaborators = getattr(request.app.state, "collaborators", None)
    if collaborators is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Voice services are not initialised",
        )
    return collaborators


CollaboratorsDep = Annotated[VoiceCollaborators, Depends(get_collaborators)]


__all__ = ["CollaboratorsDep", "get_collaborators"]
