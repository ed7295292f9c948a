from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from receiptvault.domain.models import ExtractedFields
from receiptvault.remote.models import RemoteLocation


class PipelineStage(str, Enum):
    PREPARING = "preparing"
    EXTRACTING = "extracting"
    BUILDING_DOCUMENT = "building_document"
    PROVISIONING = "provisioning"
    UPLOADING = "uploading"
    APPENDING_LEDGER = "appending_ledger"
    COMPLETE = "complete"
    FAILED = "failed"


STAGE_PROGRESS: dict[PipelineStage, float] = {
    PipelineStage.PREPARING: 0.0,
    PipelineStage.EXTRACTING: 0.1,
    PipelineStage.BUILDING_DOCUMENT: 0.4,
    PipelineStage.PROVISIONING: 0.6,
    PipelineStage.UPLOADING: 0.75,
    PipelineStage.APPENDING_LEDGER: 0.9,
    PipelineStage.COMPLETE: 1.0,
}


class SyncOutcome(str, Enum):
    LOCAL_ONLY = "local_only"
    LOCAL_AND_REMOTE = "local_and_remote"
    LOCAL_WITH_REMOTE_WARNING = "local_with_remote_warning"


ProgressObserver = Callable[[PipelineStage, float], None]


@dataclass
class PipelineResult:
    """Terminal state of one receipt run."""

    stage: PipelineStage
    outcome: SyncOutcome | None = None
    fields: ExtractedFields = field(default_factory=dict)
    local_path: Path | None = None
    remote_location: RemoteLocation | None = None
    remote_file_name: str = ""
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is PipelineStage.COMPLETE
