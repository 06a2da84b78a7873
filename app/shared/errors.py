"""
Error taxonomy for lifecycle operations.

Every failure surfaced to API callers is one of these kinds and is rendered as
{"kind": ..., "message": ...} with a fixed HTTP status.
"""

from typing import Optional


class LifecycleError(Exception):
    """Base class; subclasses set kind and status_code"""

    kind = "Error"
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(LifecycleError):
    kind = "ValidationError"
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(LifecycleError):
    kind = "Unauthorized"
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(LifecycleError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Access denied"


class NotFound(LifecycleError):
    kind = "NotFound"
    status_code = 404
    default_message = "Resource not found"


class DocumentNotReady(LifecycleError):
    kind = "DocumentNotReady"
    status_code = 409
    default_message = "Proposal document has not been generated yet"


class AlreadyAccepted(LifecycleError):
    kind = "AlreadyAccepted"
    status_code = 409
    default_message = "Proposal has already been accepted"


class InvalidTransition(LifecycleError):
    kind = "InvalidTransition"
    status_code = 409
    default_message = "Operation not allowed in the current status"


class TransactionFailed(LifecycleError):
    kind = "TransactionFailed"
    status_code = 500
    default_message = "Database transaction failed; no changes were saved"


class NotificationFailed(LifecycleError):
    kind = "NotificationFailed"
    status_code = 502
    default_message = "Notification could not be delivered; nothing was changed"


class DocumentGenerationFailed(LifecycleError):
    kind = "DocumentGenerationFailed"
    status_code = 502
    default_message = "Proposal document could not be generated"
