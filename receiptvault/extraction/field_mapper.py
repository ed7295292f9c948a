"""Maps a prebuilt-receipt analysis payload onto ExtractedFields."""

import re
from datetime import date
from typing import Any

from receiptvault.domain.dates import format_date, normalize_date
from receiptvault.domain.models import (
    FIELD_ADDRESS,
    FIELD_CARD_LAST4,
    FIELD_DATE,
    FIELD_ITEMS,
    FIELD_MERCHANT,
    FIELD_PAYMENT_METHOD,
    FIELD_PHONE,
    FIELD_TAX,
    FIELD_TAX_ID,
    FIELD_TOTAL,
    build_fields,
)
from receiptvault.extraction.exceptions import InvalidResponseError
from receiptvault.extraction.models import ExtractionResult

# Labels are matched literally; the capture group holds the value.
_TEXT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        FIELD_ADDRESS,
        re.compile(r"(?:כתובת|Address)\s*:\s*([^\n]+)", re.IGNORECASE),
    ),
    (
        FIELD_PHONE,
        re.compile(r"(?:נייד|טלפון|Phone|Tel)\.?\s*:\s*(\+?\d[\d\-]*\d)", re.IGNORECASE),
    ),
    (
        FIELD_TAX_ID,
        re.compile(
            r"(?:ע\.מ/ח\.פ|ח\.פ|VAT\s+No\.?|Reg\.\s*No\.?|Tax\s+ID)\s*:\s*(\d+)",
            re.IGNORECASE,
        ),
    ),
)

_PAYMENT_RE = re.compile(
    r"(ישראכרט|ויזה|מסטרקארד|Isracard|Visa|Mastercard|Amex)\s+[*xX]*\s*(\d{4})(?!\d)",
    re.IGNORECASE,
)


def format_currency(amount: float, symbol: str) -> str:
    return f"{symbol}{amount:.2f}"


def map_analyze_result(
    payload: Any,
    *,
    currency_symbol: str,
    today: date,
) -> ExtractionResult:
    """Build ExtractedFields from a succeeded analysis payload.

    Raises:
        InvalidResponseError: if the payload lacks the expected structure.
    """
    fields, content = _unwrap(payload)
    values: dict[str, str] = {}
    notes: list[str] = []

    merchant = _string_value(fields.get("MerchantName"))
    if merchant:
        values[FIELD_MERCHANT] = merchant

    total = _number_value(fields.get("Total"))
    if total is not None:
        values[FIELD_TOTAL] = format_currency(total, currency_symbol)

    tax = _number_value(fields.get("TotalTax"))
    if tax is not None:
        values[FIELD_TAX] = format_currency(tax, currency_symbol)

    items = _item_descriptions(fields.get("Items"))
    if items:
        values[FIELD_ITEMS] = ", ".join(items)

    raw_date = (_date_value(fields.get("TransactionDate")) or "").strip()
    if not raw_date:
        values[FIELD_DATE] = format_date(today)
        notes.append("No transaction date found on receipt; using current date")
    else:
        # Unparseable dates stay verbatim; month bucketing falls back later.
        values[FIELD_DATE] = normalize_date(raw_date) or raw_date

    values.update(extract_from_text(content))
    return ExtractionResult(fields=build_fields(values), notes=notes)


def extract_from_text(content: str) -> dict[str, str]:
    """Derive fields the analysis model does not return structurally."""
    found: dict[str, str] = {}
    for field_name, pattern in _TEXT_PATTERNS:
        match = pattern.search(content)
        if match:
            found[field_name] = match.group(1).strip()
    payment = _PAYMENT_RE.search(content)
    if payment:
        found[FIELD_PAYMENT_METHOD] = payment.group(1)
        found[FIELD_CARD_LAST4] = payment.group(2)
    return found


def _unwrap(payload: Any) -> tuple[dict[str, Any], str]:
    if not isinstance(payload, dict):
        raise InvalidResponseError("Analysis payload must be an object")
    analyze = payload.get("analyzeResult")
    if not isinstance(analyze, dict):
        raise InvalidResponseError("Analysis payload is missing 'analyzeResult'")
    documents = analyze.get("documents")
    if not isinstance(documents, list):
        raise InvalidResponseError("'analyzeResult.documents' must be a list")
    content = analyze.get("content", "")
    if not isinstance(content, str):
        raise InvalidResponseError("'analyzeResult.content' must be a string")
    if not documents:
        return {}, content
    first = documents[0]
    fields = first.get("fields") if isinstance(first, dict) else None
    if not isinstance(fields, dict):
        raise InvalidResponseError("First analyzed document has no 'fields' object")
    return fields, content


def _string_value(field: Any) -> str | None:
    if not isinstance(field, dict):
        return None
    value = field.get("valueString")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _number_value(field: Any) -> float | None:
    if not isinstance(field, dict):
        return None
    value = field.get("valueNumber")
    if value is None:
        currency = field.get("valueCurrency")
        value = currency.get("amount") if isinstance(currency, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _date_value(field: Any) -> str | None:
    if not isinstance(field, dict):
        return None
    value = field.get("valueDate")
    return value if isinstance(value, str) else None


def _item_descriptions(field: Any) -> list[str]:
    if not isinstance(field, dict):
        return []
    entries = field.get("valueArray")
    if not isinstance(entries, list):
        return []
    descriptions: list[str] = []
    for entry in entries:
        item = entry.get("valueObject") if isinstance(entry, dict) else None
        if not isinstance(item, dict):
            continue
        description = _string_value(item.get("Description"))
        if description:
            descriptions.append(description)
    return descriptions
