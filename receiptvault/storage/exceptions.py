class StorageError(Exception):
    """Base exception for all local storage errors."""


class LocalPersistenceError(StorageError):
    """Raised when a receipt document cannot be written to local storage."""


class ImageLoadError(StorageError):
    """Raised when a receipt image cannot be read or decoded."""
