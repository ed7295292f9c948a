from collections.abc import Iterable

from receiptvault.domain.models import ReceiptImage
from receiptvault.logging.logger import Log
from receiptvault.pipeline.cancellation import CancellationToken
from receiptvault.pipeline.models import PipelineResult, ProgressObserver
from receiptvault.pipeline.orchestrator import Orchestrator


class BatchRunner:
    """Feed scanned pages through one orchestrator, strictly one at a time."""

    def __init__(self, orchestrator: Orchestrator) -> None:
        self._orchestrator = orchestrator

    def run(
        self,
        images: Iterable[ReceiptImage],
        observer: ProgressObserver | None = None,
        cancellation: CancellationToken | None = None,
    ) -> list[PipelineResult]:
        """Process pages in order; stop before the next page once cancelled."""
        results: list[PipelineResult] = []
        for page, image in enumerate(images, start=1):
            if cancellation is not None and cancellation.cancelled:
                Log.info(f"Batch cancelled before page {page}")
                break
            Log.info(f"Processing page {page}")
            result = self._orchestrator.run(image, observer=observer, cancellation=cancellation)
            if result.succeeded:
                Log.info(f"Page {page} done: {result.outcome.value}", path=result.local_path)
            else:
                Log.error(f"Page {page} failed: {result.error}")
            results.append(result)
        return results
