"""Service layer clients for the voice pipeline's external collaborators.

Submodules are imported directly (``app.services.llm_client`` and so on) so
that importing the shared errors does not pull in the database engine.
"""

from .errors import CollaboratorRateLimited

__all__ = ["CollaboratorRateLimited"]
