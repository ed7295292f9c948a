"""Fixed column layout and first-creation formatting of the receipts ledger."""

from typing import Any

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
)

LEDGER_COLUMNS: tuple[tuple[str, str], ...] = (
    (FIELD_MERCHANT, "Business Name"),
    (FIELD_DATE, "Date"),
    (FIELD_ADDRESS, "Address"),
    (FIELD_PHONE, "Phone"),
    (FIELD_TAX_ID, "Registration ID"),
    (FIELD_ITEMS, "Items"),
    (FIELD_TOTAL, "Total"),
    (FIELD_TAX, "Tax"),
    (FIELD_PAYMENT_METHOD, "Payment Method"),
    (FIELD_CARD_LAST4, "Card Last 4 Digits"),
)

HEADERS: tuple[str, ...] = tuple(header for _, header in LEDGER_COLUMNS)
HEADER_RANGE = "A1:J1"
DATA_RANGE = "A:J"
FIRST_SHEET_ID = 0

_COLUMN_COUNT = len(LEDGER_COLUMNS)
_CURRENCY_START = 6
_CURRENCY_END = 8


def format_requests(currency_symbol: str) -> list[dict[str, Any]]:
    """batchUpdate requests applied once to a newly created ledger."""
    return [
        {
            "repeatCell": {
                "range": {
                    "sheetId": FIRST_SHEET_ID,
                    "startRowIndex": 0,
                    "endRowIndex": 1,
                    "startColumnIndex": 0,
                    "endColumnIndex": _COLUMN_COUNT,
                },
                "cell": {
                    "userEnteredFormat": {
                        "textFormat": {"bold": True},
                        "horizontalAlignment": "RIGHT",
                        "borders": {
                            "bottom": {
                                "style": "SOLID",
                                "width": 2,
                                "color": {"red": 0, "green": 0, "blue": 0, "alpha": 1},
                            }
                        },
                    }
                },
                "fields": "userEnteredFormat(textFormat.bold,horizontalAlignment,borders)",
            }
        },
        {
            "repeatCell": {
                "range": {
                    "sheetId": FIRST_SHEET_ID,
                    "startRowIndex": 1,
                    "startColumnIndex": _CURRENCY_START,
                    "endColumnIndex": _CURRENCY_END,
                },
                "cell": {
                    "userEnteredFormat": {
                        "numberFormat": {
                            "type": "CURRENCY",
                            "pattern": f"{currency_symbol}#,##0.00",
                        }
                    }
                },
                "fields": "userEnteredFormat.numberFormat",
            }
        },
        {
            "repeatCell": {
                "range": {
                    "sheetId": FIRST_SHEET_ID,
                    "startRowIndex": 0,
                    "startColumnIndex": 0,
                    "endColumnIndex": _COLUMN_COUNT,
                },
                "cell": {"userEnteredFormat": {"horizontalAlignment": "RIGHT"}},
                "fields": "userEnteredFormat.horizontalAlignment",
            }
        },
        {
            "autoResizeDimensions": {
                "dimensions": {
                    "sheetId": FIRST_SHEET_ID,
                    "dimension": "COLUMNS",
                    "startIndex": 0,
                    "endIndex": _COLUMN_COUNT,
                }
            }
        },
    ]
