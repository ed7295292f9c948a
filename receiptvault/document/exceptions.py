class DocumentBuildError(Exception):
    """Raised when a receipt image cannot be rendered into a PDF."""
