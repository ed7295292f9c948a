"""Date parsing and month bucketing for receipts."""

from datetime import date, datetime

CANONICAL_DATE_FORMAT = "%d/%m/%Y"

ACCEPTED_DATE_FORMATS: tuple[str, ...] = (
    "%d/%m/%Y",
    "%Y-%m-%d",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%d/%m/%y",
    "%d.%m.%y",
)

_MONTH_NAMES: dict[str, tuple[str, ...]] = {
    "en": (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ),
    "he": (
        "ינואר", "פברואר", "מרץ", "אפריל", "מאי", "יוני",
        "יולי", "אוגוסט", "ספטמבר", "אוקטובר", "נובמבר", "דצמבר",
    ),
}


def parse_date(value: str | None) -> date | None:
    """Parse ``value`` under any accepted format, or return None."""
    text = (value or "").strip()
    if not text:
        return None
    for fmt in ACCEPTED_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: date) -> str:
    return value.strftime(CANONICAL_DATE_FORMAT)


def normalize_date(value: str | None) -> str | None:
    """Return ``value`` rewritten as DD/MM/YYYY, or None if unparseable."""
    parsed = parse_date(value)
    return format_date(parsed) if parsed is not None else None


def bucket_date(raw_date: str | None, today: date) -> date:
    """Date used for month bucketing; falls back to ``today``."""
    parsed = parse_date(raw_date)
    return parsed if parsed is not None else today


def period_key(value: date) -> str:
    """``YYYY-MM`` key for folder and ledger resolution."""
    return f"{value.year:04d}-{value.month:02d}"


def month_name(value: date, locale: str = "en") -> str:
    """Human-readable ``<Month> YYYY`` label used for folder names."""
    names = _MONTH_NAMES.get(locale.lower())
    if names is None:
        raise ValueError(
            f"Unsupported month name locale '{locale}'. Choose from: {sorted(_MONTH_NAMES)}"
        )
    return f"{names[value.month - 1]} {value.year}"


def ledger_name(key: str) -> str:
    """Deterministic ledger title for a ``YYYY-MM`` period key."""
    year, month = key.split("-", 1)
    return f"Receipts_{int(month):02d}_{int(year)}"
