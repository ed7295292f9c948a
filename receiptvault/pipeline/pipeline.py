from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from receiptvault.domain.models import ExtractedFields, ReceiptDocument, ReceiptImage
from receiptvault.remote.models import RemoteLocation


@dataclass(slots=True)
class PipelineContext:
    image: ReceiptImage
    started_at: datetime
    fields: ExtractedFields = field(default_factory=dict)
    document: ReceiptDocument | None = None
    period: date | None = None
    local_path: Path | None = None
    remote_location: RemoteLocation | None = None
    remote_file_name: str = ""
    warnings: list[str] = field(default_factory=list)


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
