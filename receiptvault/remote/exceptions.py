class RemoteError(Exception):
    """Base exception for all remote store errors."""


class AuthFailureError(RemoteError):
    """Credential missing or rejected. Surfaced for re-authentication, never retried."""


class NotAuthenticatedError(AuthFailureError):
    """Raised when no valid credential is available."""


class NotAuthorizedError(AuthFailureError):
    """Raised when the store rejects the credential for a resource."""


class RequestFailedError(RemoteError):
    """Raised when the backing store answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientNetworkError(RequestFailedError):
    """Timeouts, connection faults, 5xx and 429. Safe to retry."""


class ResourceConflictError(RequestFailedError):
    """Raised on 409 when a resource was created concurrently."""


class MalformedResponseError(RemoteError):
    """Raised when a response body cannot be parsed or lacks required keys."""


class UploadInitiationFailedError(RemoteError):
    """Raised when a resumable upload session cannot be opened."""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class UploadFailedError(RemoteError):
    """Raised when the payload transfer to an upload session fails."""


class AppendFailedError(RemoteError):
    """Raised when a ledger row cannot be appended."""
