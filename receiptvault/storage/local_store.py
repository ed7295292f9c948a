from datetime import datetime
from pathlib import Path

from receiptvault.domain.models import ReceiptDocument
from receiptvault.logging.logger import Log
from receiptvault.storage.exceptions import LocalPersistenceError


def receipt_file_name(moment: datetime) -> str:
    """Local file name: Receipt_DD-MM-YYYY_HH-MM-SS.pdf"""
    return f"Receipt_{moment.strftime('%d-%m-%Y_%H-%M-%S')}.pdf"


def unique_path(path: Path) -> Path:
    """Return ``path`` or the first free ``name (n).ext`` sibling."""
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({counter}){path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


class LocalReceiptStore:
    """Writes receipt documents under ``<root>/<month name>/``."""

    def __init__(self, root: Path) -> None:
        self._root = root.expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def month_dir(self, month_name: str) -> Path:
        """Create (if absent) and return the directory for ``month_name``."""
        path = self._root / month_name
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalPersistenceError(f"Cannot create month directory {path}: {exc}") from exc
        return path

    def save(self, document: ReceiptDocument, file_name: str, month_name: str) -> Path:
        """Persist ``document`` and return its path.

        Raises:
            LocalPersistenceError: if the directory or file cannot be written.
        """
        target = unique_path(self.month_dir(month_name) / file_name)
        try:
            target.write_bytes(document.data)
        except OSError as exc:
            raise LocalPersistenceError(f"Cannot write receipt {target}: {exc}") from exc
        Log.info(f"Saved receipt locally ({document.size} bytes)", path=target)
        return target

    def read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise LocalPersistenceError(f"Cannot read receipt {path}: {exc}") from exc
