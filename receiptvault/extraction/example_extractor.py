"""Example field extractor adapter.

Use this module as a reference when implementing new extraction adapters.
Implement BaseFieldExtractor and register the provider in ExtractorFactory.
"""

from collections.abc import Callable
from datetime import date
from typing import ClassVar

from receiptvault.domain.dates import format_date
from receiptvault.domain.models import FIELD_DATE, ReceiptImage, build_fields
from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.models import ExtractionResult


class ExampleFieldExtractor(BaseFieldExtractor):
    """Returns a fixed field map dated today.

    No network calls. Useful for local development and offline runs.
    """

    DEFAULT_FIELDS: ClassVar[dict[str, str]] = {
        "merchant": "Example Store",
        "items": "Sample item",
        "total": "$0.00",
    }

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def extract(self, image: ReceiptImage) -> ExtractionResult:
        _ = image
        values = {**self.DEFAULT_FIELDS, FIELD_DATE: format_date(self._today())}
        return ExtractionResult(fields=build_fields(values))
