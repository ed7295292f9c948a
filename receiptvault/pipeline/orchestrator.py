"""Sequences one receipt through extraction, local save and remote sync.

State machine:
    Preparing -> Extracting -> BuildingDocument -> Provisioning -> Uploading
    -> AppendingLedger -> Complete, with Failed reachable before the local
    save. Once the document is on disk every later problem ends the run as
    Complete with a partial-success outcome instead of Failed.
"""

from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

import httpx

from receiptvault.auth.base import BaseTokenProvider
from receiptvault.auth.factory import TokenProviderFactory
from receiptvault.config.settings import Settings
from receiptvault.document.exceptions import DocumentBuildError
from receiptvault.document.factory import DocumentBuilderFactory
from receiptvault.domain.models import ReceiptImage
from receiptvault.extraction.factory import ExtractorFactory
from receiptvault.logging.logger import Log
from receiptvault.pipeline.cancellation import CancellationToken
from receiptvault.pipeline.exceptions import PipelineCancelledError
from receiptvault.pipeline.models import (
    STAGE_PROGRESS,
    PipelineResult,
    PipelineStage,
    ProgressObserver,
    SyncOutcome,
)
from receiptvault.pipeline.pipeline import PipelineContext, PipelineStep
from receiptvault.pipeline.steps import (
    AppendLedgerStep,
    BuildDocumentStep,
    ExtractFieldsStep,
    ProvisionStep,
    SaveLocallyStep,
    UploadStep,
)
from receiptvault.remote.drive import DriveClient
from receiptvault.remote.exceptions import RemoteError
from receiptvault.remote.ledger import LedgerAppender
from receiptvault.remote.provisioner import ResourceProvisioner
from receiptvault.remote.sheets import SheetsClient
from receiptvault.remote.uploader import UploadTransport
from receiptvault.storage.exceptions import StorageError
from receiptvault.storage.local_store import LocalReceiptStore
from receiptvault.storage.location_cache import LocationCache


class _ProgressTracker:
    """Emits (stage, fraction) events with a non-decreasing fraction."""

    def __init__(self, observer: ProgressObserver | None) -> None:
        self._observer = observer
        self.stage = PipelineStage.PREPARING
        self.fraction = 0.0

    def advance(self, stage: PipelineStage) -> None:
        self.stage = stage
        self.fraction = max(self.fraction, STAGE_PROGRESS.get(stage, self.fraction))
        Log.debug(f"Stage {stage.value} ({self.fraction:.0%})")
        if self._observer is not None:
            self._observer(stage, self.fraction)


class Orchestrator:
    """Runs the receipt pipeline; one instance is reused across pages."""

    def __init__(
        self,
        *,
        extract_step: PipelineStep,
        build_step: PipelineStep,
        save_step: PipelineStep,
        provision_step: PipelineStep,
        upload_step: PipelineStep,
        ledger_step: PipelineStep,
        token_provider: BaseTokenProvider,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._extract_step = extract_step
        self._build_step = build_step
        self._save_step = save_step
        self._remote_steps: tuple[tuple[PipelineStage, PipelineStep], ...] = (
            (PipelineStage.PROVISIONING, provision_step),
            (PipelineStage.UPLOADING, upload_step),
            (PipelineStage.APPENDING_LEDGER, ledger_step),
        )
        self._token_provider = token_provider
        self._now = now

    def run(
        self,
        image: ReceiptImage,
        observer: ProgressObserver | None = None,
        cancellation: CancellationToken | None = None,
    ) -> PipelineResult:
        """Process one receipt image. Never raises for expected failures."""
        tracker = _ProgressTracker(observer)
        context = PipelineContext(image=image, started_at=self._now())
        token = cancellation or CancellationToken()

        tracker.advance(PipelineStage.PREPARING)
        try:
            token.raise_if_cancelled()
            tracker.advance(PipelineStage.EXTRACTING)
            self._extract_step.run(context)

            token.raise_if_cancelled()
            tracker.advance(PipelineStage.BUILDING_DOCUMENT)
            self._build_step.run(context)
            self._save_step.run(context)
        except (PipelineCancelledError, DocumentBuildError, StorageError) as exc:
            Log.error(f"Receipt run failed at {tracker.stage.value}: {exc}")
            return self._fail(tracker, context, exc)
        except Exception as exc:
            self._fail(tracker, context, exc)
            raise

        if not self._token_provider.is_valid():
            Log.info("No valid remote credential; receipt saved locally only")
            return self._complete(tracker, context, SyncOutcome.LOCAL_ONLY)

        for stage, step in self._remote_steps:
            if token.cancelled:
                context.warnings.append("Run cancelled before remote sync finished")
                outcome = (
                    SyncOutcome.LOCAL_WITH_REMOTE_WARNING
                    if stage is PipelineStage.APPENDING_LEDGER
                    else SyncOutcome.LOCAL_ONLY
                )
                return self._complete(tracker, context, outcome)
            tracker.advance(stage)
            try:
                step.run(context)
            except (RemoteError, StorageError) as exc:
                warning = f"Saved locally; remote sync stopped at {stage.value}: {exc}"
                Log.warning(warning, error_type=type(exc).__name__)
                context.warnings.append(warning)
                return self._complete(tracker, context, SyncOutcome.LOCAL_WITH_REMOTE_WARNING)

        return self._complete(tracker, context, SyncOutcome.LOCAL_AND_REMOTE)

    @staticmethod
    def _complete(
        tracker: _ProgressTracker,
        context: PipelineContext,
        outcome: SyncOutcome,
    ) -> PipelineResult:
        tracker.advance(PipelineStage.COMPLETE)
        Log.info(f"Receipt run complete: {outcome.value}", path=context.local_path)
        return PipelineResult(
            stage=PipelineStage.COMPLETE,
            outcome=outcome,
            fields=context.fields,
            local_path=context.local_path,
            remote_location=context.remote_location,
            remote_file_name=context.remote_file_name,
            warnings=list(context.warnings),
        )

    @staticmethod
    def _fail(
        tracker: _ProgressTracker,
        context: PipelineContext,
        exc: Exception,
    ) -> PipelineResult:
        tracker.advance(PipelineStage.FAILED)
        return PipelineResult(
            stage=PipelineStage.FAILED,
            fields=context.fields,
            local_path=context.local_path,
            warnings=list(context.warnings),
            error=str(exc),
        )


def build_orchestrator(
    settings: Settings,
    http_client: httpx.Client | None = None,
    token_provider: BaseTokenProvider | None = None,
    today: Callable[[], date] = date.today,
) -> Orchestrator:
    """Build an Orchestrator with all adapters wired from settings."""
    http = http_client or httpx.Client()
    tokens = token_provider or TokenProviderFactory.create(settings)
    store = LocalReceiptStore(Path(settings.local_storage_dir))
    cache = LocationCache(Path(settings.location_cache_path))
    timeout = settings.remote_timeout_seconds

    drive = DriveClient(http_client=http, token_provider=tokens, timeout_seconds=timeout)
    sheets = SheetsClient(http_client=http, token_provider=tokens, timeout_seconds=timeout)
    provisioner = ResourceProvisioner(
        drive=drive,
        sheets=sheets,
        cache=cache,
        root_folder_name=settings.drive_root_folder_name,
        currency_symbol=settings.currency_symbol,
    )
    uploader = UploadTransport(http_client=http, token_provider=tokens, timeout_seconds=timeout)

    return Orchestrator(
        extract_step=ExtractFieldsStep(ExtractorFactory.create(settings, http), today=today),
        build_step=BuildDocumentStep(DocumentBuilderFactory.create(settings)),
        save_step=SaveLocallyStep(store, settings.month_name_locale, today=today),
        provision_step=ProvisionStep(provisioner, settings.month_name_locale),
        upload_step=UploadStep(uploader, store, attempts=settings.upload_attempts),
        ledger_step=AppendLedgerStep(LedgerAppender(sheets)),
        token_provider=tokens,
    )
