"""Field extractor that asks a multimodal LLM to read the receipt."""

import base64
import json
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

from receiptvault.domain.dates import format_date, normalize_date
from receiptvault.domain.models import (
    FIELD_DATE,
    FIELD_NAMES,
    FIELD_TAX,
    FIELD_TOTAL,
    ReceiptImage,
    build_fields,
)
from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.client_base import BaseVisionClient
from receiptvault.extraction.field_mapper import format_currency
from receiptvault.extraction.models import ExtractionResult
from receiptvault.extraction.prompt_loader import load_prompt_template
from receiptvault.logging.logger import Log

_CURRENCY_FIELDS = (FIELD_TOTAL, FIELD_TAX)


class LlmFieldExtractor(BaseFieldExtractor):
    """Extracts receipt fields with a single vision completion call."""

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        temperature: float = 0.1,
        currency_symbol: str = "$",
        prompt_path: Path | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._currency_symbol = currency_symbol
        self._prompt = load_prompt_template(prompt_path)
        self._today = today

    def extract(self, image: ReceiptImage) -> ExtractionResult:
        raw = self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            prompt=self._prompt,
            image_data_url=self._data_url(image),
        )
        Log.debug(f"Vision model raw response:\n{raw}")

        notes: list[str] = []
        parsed = self._parse_json(raw)
        if parsed is None:
            notes.append("Vision model reply was not a JSON object; fields left empty")
            parsed = {}

        values = {name: self._clean(name, parsed.get(name)) for name in FIELD_NAMES}
        if not values[FIELD_DATE]:
            values[FIELD_DATE] = format_date(self._today())
            notes.append("No transaction date found on receipt; using current date")

        for note in notes:
            Log.warning(note)
        return ExtractionResult(fields=build_fields(values), notes=notes)

    @staticmethod
    def _data_url(image: ReceiptImage) -> str:
        encoded = base64.b64encode(image.data).decode("ascii")
        return f"data:{image.content_type};base64,{encoded}"

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any] | None:
        start = raw.find("{")
        end = raw.rfind("}")
        if start == -1 or end < start:
            return None
        try:
            parsed = json.loads(raw[start : end + 1])
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def _clean(self, name: str, value: Any) -> str:
        if value is None or isinstance(value, (dict, list)):
            return ""
        if name in _CURRENCY_FIELDS:
            amount = self._as_amount(value)
            if amount is not None:
                return format_currency(amount, self._currency_symbol)
        text = str(value).strip()
        if name == FIELD_DATE:
            # Keep unparseable dates verbatim; bucketing falls back later.
            return normalize_date(text) or text
        return text

    @staticmethod
    def _as_amount(value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return float(str(value).replace(",", "").strip())
        except ValueError:
            return None
