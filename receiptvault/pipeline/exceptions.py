class PipelineError(Exception):
    """Base exception for orchestration errors."""


class PipelineCancelledError(PipelineError):
    """Raised between stages when the caller requested cancellation."""
