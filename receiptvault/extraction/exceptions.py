class ExtractionError(Exception):
    """Base exception for all field-extraction errors."""


class ExtractionFailedError(ExtractionError):
    """Raised when submission retries are exhausted or the service reports failure."""


class InvalidResponseError(ExtractionError):
    """Raised when the analysis service returns a malformed payload."""


class ExtractionTimedOutError(ExtractionError):
    """Raised when polling exceeds the wall-clock budget without a verdict."""


class AuthenticationError(ExtractionError):
    """Raised when the analysis service rejects the credential. Never retried."""
