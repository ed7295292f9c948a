import json
import os
from pathlib import Path

from receiptvault.logging.logger import Log


class LocationCache:
    """Remembers remote container ids across runs.

    Keys are the root folder name, ``<root id>/YYYY-MM`` for month folders
    and ``<month folder id>/ledger:YYYY-MM``. With a ``path`` the map is persisted as JSON after
    every change; without one it lives only as long as the instance.
    Sequential use only.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path.expanduser() if path is not None else None
        self._entries: dict[str, str] = self._load()

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, resource_id: str) -> None:
        if self._entries.get(key) == resource_id:
            return
        self._entries[key] = resource_id
        self._save()

    def discard(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._save()

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            Log.warning(f"Ignoring unreadable location cache {self._path}: {exc}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(self._entries, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            # Lost entries are re-resolved remotely on the next run.
            Log.warning(f"Could not persist location cache {self._path}: {exc}")
