"""Domain errors raised by the workflow engine and the purchase store.

Each error carries a stable ``code`` and an HTTP status so the API layer can
render it as ``{"error": {"code": ..., "message": ...}}`` without knowing the
individual exception types.
"""

from typing import Optional


class PortalError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


class ValidationError(PortalError):
    """Malformed purchase draft; nothing was persisted."""

    status_code = 422
    code = "VALIDATION_ERROR"


class AuthorizationError(PortalError):
    """Actor role or request state does not permit the transition."""

    status_code = 403
    code = "TRANSITION_NOT_ALLOWED"


class NotFoundError(PortalError):
    status_code = 404
    code = "PURCHASE_NOT_FOUND"


class ConflictError(PortalError):
    """Persisted state changed between the decision and the write."""

    status_code = 409
    code = "PURCHASE_STATE_CHANGED"


class StoreError(PortalError):
    """Underlying persistence failure. Not retried."""

    status_code = 503
    code = "STORE_UNAVAILABLE"
