"""Service-layer exception taxonomy.

Every error carries the HTTP status the API layer reports for it, so routers
never need to know which service raised it.
"""


class ServiceError(RuntimeError):
    """Base exception for contest service errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Raised when input is malformed or missing."""

    status_code = 400


class NotFoundError(ServiceError):
    """Raised when a referenced contest or participant does not exist."""

    status_code = 404


class ConflictError(ServiceError):
    """Raised on uniqueness violations and forbidden state transitions."""

    status_code = 409


class MediaError(ServiceError):
    """Raised when the media host fails a request."""

    status_code = 502


class MediaUploadError(MediaError):
    """Raised when the media host rejects an upload."""


class PaymentError(ServiceError):
    """Raised when a payment cannot be initiated or verified."""

    status_code = 402
