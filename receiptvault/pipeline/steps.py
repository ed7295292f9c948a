import re
import time
from collections.abc import Callable
from datetime import date

from receiptvault.document.base import BaseDocumentBuilder
from receiptvault.domain.dates import bucket_date, format_date, month_name, parse_date, period_key
from receiptvault.domain.models import FIELD_DATE, FIELD_MERCHANT, build_fields
from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.exceptions import ExtractionError
from receiptvault.logging.logger import Log
from receiptvault.pipeline.pipeline import PipelineContext, PipelineStep
from receiptvault.remote.exceptions import UploadInitiationFailedError
from receiptvault.remote.ledger import LedgerAppender
from receiptvault.remote.provisioner import ResourceProvisioner
from receiptvault.remote.uploader import UploadTransport
from receiptvault.storage.local_store import LocalReceiptStore, receipt_file_name

_UNSAFE_NAME_CHARS = re.compile(r'[\\/:*?"<>|\n\r\t]+')


def remote_file_name(merchant: str, receipt_date: date) -> str:
    """Remote name: ``<merchant or Receipt>_DD-MM-YYYY.pdf``."""
    prefix = _UNSAFE_NAME_CHARS.sub(" ", merchant).strip() or "Receipt"
    return f"{prefix}_{receipt_date.strftime('%d-%m-%Y')}.pdf"


class ExtractFieldsStep(PipelineStep):
    """Runs the field extractor; failures degrade to a date-only field map."""

    def __init__(
        self,
        extractor: BaseFieldExtractor,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._extractor = extractor
        self._today = today

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            result = self._extractor.extract(context.image)
        except ExtractionError as exc:
            warning = f"Field extraction failed, continuing without metadata: {exc}"
            Log.warning(warning, error_type=type(exc).__name__)
            context.warnings.append(warning)
            context.fields = build_fields({FIELD_DATE: format_date(self._today())})
            return context
        context.fields = result.fields
        context.warnings.extend(result.notes)
        return context


class BuildDocumentStep(PipelineStep):
    def __init__(self, builder: BaseDocumentBuilder) -> None:
        self._builder = builder

    def run(self, context: PipelineContext) -> PipelineContext:
        context.document = self._builder.build(context.image)
        Log.info(f"Built receipt document ({context.document.size} bytes)")
        return context


class SaveLocallyStep(PipelineStep):
    """Persists the document under the month derived from the receipt date."""

    def __init__(
        self,
        store: LocalReceiptStore,
        month_name_locale: str = "en",
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._locale = month_name_locale
        self._today = today

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.document is None:
            raise ValueError("PipelineContext.document must be set before local save")
        raw_date = context.fields.get(FIELD_DATE, "")
        if raw_date and parse_date(raw_date) is None:
            warning = f"Unparseable receipt date {raw_date!r}; filing under the current month"
            Log.warning(warning)
            context.warnings.append(warning)
        context.period = bucket_date(raw_date, self._today())
        context.local_path = self._store.save(
            context.document,
            receipt_file_name(context.started_at),
            month_name(context.period, self._locale),
        )
        return context


class ProvisionStep(PipelineStep):
    def __init__(self, provisioner: ResourceProvisioner, month_name_locale: str = "en") -> None:
        self._provisioner = provisioner
        self._locale = month_name_locale

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.period is None:
            raise ValueError("PipelineContext.period must be set before provisioning")
        context.remote_location = self._provisioner.ensure_location(
            period_key(context.period),
            month_name(context.period, self._locale),
        )
        return context


class UploadStep(PipelineStep):
    """Uploads the locally saved bytes; retries only transient session-open failures."""

    def __init__(
        self,
        uploader: UploadTransport,
        store: LocalReceiptStore,
        attempts: int = 2,
        retry_delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._uploader = uploader
        self._store = store
        self._attempts = max(1, attempts)
        self._retry_delay = retry_delay_seconds
        self._sleep = sleep

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.remote_location is None or context.local_path is None or context.period is None:
            raise ValueError("PipelineContext must be provisioned and saved before upload")
        payload = self._store.read(context.local_path)
        name = remote_file_name(context.fields.get(FIELD_MERCHANT, ""), context.period)
        for attempt in range(self._attempts):
            try:
                self._uploader.upload(
                    context.remote_location.month_folder_id,
                    name,
                    payload,
                    "application/pdf",
                )
                break
            except UploadInitiationFailedError as exc:
                if not exc.retryable or attempt + 1 >= self._attempts:
                    raise
                Log.warning(f"Upload session could not be opened, retrying: {exc}")
                self._sleep(self._retry_delay)
        context.remote_file_name = name
        return context


class AppendLedgerStep(PipelineStep):
    def __init__(self, appender: LedgerAppender) -> None:
        self._appender = appender

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.remote_location is None:
            raise ValueError("PipelineContext.remote_location must be set before ledger append")
        self._appender.append(context.remote_location.ledger_id, context.fields)
        return context
