"""Errors shared by the external service clients."""


class CollaboratorRateLimited(RuntimeError):
    """Raised when an upstream service rejects a call with a rate limit."""

    def __init__(self, service: str, detail: str | None = None) -> None:
        super().__init__(f"{service} rate limited the request: {detail or 'no detail'}")
        self.service = service


__all__ = ["CollaboratorRateLimited"]
