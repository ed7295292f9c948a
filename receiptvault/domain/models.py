from collections.abc import Mapping
from dataclasses import dataclass

FIELD_MERCHANT = "merchant"
FIELD_DATE = "date"
FIELD_ADDRESS = "address"
FIELD_PHONE = "phone"
FIELD_TAX_ID = "tax_id"
FIELD_ITEMS = "items"
FIELD_TOTAL = "total"
FIELD_TAX = "tax"
FIELD_PAYMENT_METHOD = "payment_method"
FIELD_CARD_LAST4 = "card_last4"

# Ledger column order; never derive it from dict iteration.
FIELD_NAMES: tuple[str, ...] = (
    FIELD_MERCHANT,
    FIELD_DATE,
    FIELD_ADDRESS,
    FIELD_PHONE,
    FIELD_TAX_ID,
    FIELD_ITEMS,
    FIELD_TOTAL,
    FIELD_TAX,
    FIELD_PAYMENT_METHOD,
    FIELD_CARD_LAST4,
)

ExtractedFields = dict[str, str]


def build_fields(values: Mapping[str, object] | None = None) -> ExtractedFields:
    """Return a complete field map in schema order.

    Missing or None values become empty strings. Unknown keys are rejected so
    a typo cannot silently drop a column.

    Raises:
        ValueError: if ``values`` contains a key outside FIELD_NAMES.
    """
    values = values or {}
    unknown = set(values) - set(FIELD_NAMES)
    if unknown:
        raise ValueError(f"Unknown receipt field(s): {sorted(unknown)}")
    fields: ExtractedFields = {}
    for name in FIELD_NAMES:
        value = values.get(name)
        fields[name] = "" if value is None else str(value)
    return fields


@dataclass(frozen=True)
class ReceiptImage:
    """Raster image of one scanned receipt page."""

    data: bytes
    width: int
    height: int
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class ReceiptDocument:
    """Single-page PDF built from a ReceiptImage."""

    data: bytes
    content_type: str = "application/pdf"

    @property
    def size(self) -> int:
        return len(self.data)
