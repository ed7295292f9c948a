from collections.abc import Mapping

from receiptvault.logging.logger import Log
from receiptvault.remote.exceptions import (
    AppendFailedError,
    AuthFailureError,
    NotAuthorizedError,
    RemoteError,
)
from receiptvault.remote.ledger_schema import DATA_RANGE, LEDGER_COLUMNS
from receiptvault.remote.sheets import SheetsClient


def build_row(fields: Mapping[str, str]) -> list[str]:
    """One ledger row in schema order; missing fields become empty cells."""
    return [fields.get(name) or "" for name, _ in LEDGER_COLUMNS]


class LedgerAppender:
    """Appends extracted receipt fields to a ledger spreadsheet."""

    def __init__(self, sheets: SheetsClient) -> None:
        self._sheets = sheets

    def append(self, ledger_id: str, fields: Mapping[str, str]) -> None:
        """Insert one row with user-entered value interpretation.

        Raises:
            NotAuthorizedError: if the credential is missing or rejected.
            AppendFailedError: on any other remote failure.
        """
        row = build_row(fields)
        try:
            self._sheets.append_values(ledger_id, DATA_RANGE, [row])
        except AuthFailureError as exc:
            raise NotAuthorizedError(f"Not authorized to append to ledger {ledger_id}: {exc}") from exc
        except RemoteError as exc:
            raise AppendFailedError(f"Ledger append failed: {exc}") from exc
        Log.info("Appended receipt row to ledger", ledger_id=ledger_id)
