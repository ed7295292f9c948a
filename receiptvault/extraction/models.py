from dataclasses import dataclass, field

from receiptvault.domain.models import ExtractedFields

STATUS_NOT_STARTED = "notStarted"
STATUS_RUNNING = "running"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"

PENDING_STATUSES = frozenset({STATUS_NOT_STARTED, STATUS_RUNNING})


@dataclass
class ExtractionResult:
    """Extracted fields plus diagnostic notes that are not part of the record."""

    fields: ExtractedFields
    notes: list[str] = field(default_factory=list)
