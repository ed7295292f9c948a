"""Idempotent find-or-create of the Drive folders and monthly ledger.

Every ``ensure_*`` call first consults the location cache and re-validates
a cached id with an existence check; a stale id is dropped and resolution
falls through to query-then-create. A create that races another creator
(409) is resolved by re-querying.

Cache keys carry the parent id, so an id is only reused under the parent
it was resolved for. A ledger is cached only once its header row exists;
a ledger found remotely without one is initialized before use.
"""

from receiptvault.domain.dates import ledger_name
from receiptvault.logging.logger import Log
from receiptvault.remote.drive import FOLDER_MIME_TYPE, SPREADSHEET_MIME_TYPE, DriveClient
from receiptvault.remote.exceptions import ResourceConflictError
from receiptvault.remote.ledger_schema import HEADER_RANGE, HEADERS, format_requests
from receiptvault.remote.models import RemoteLocation
from receiptvault.remote.sheets import SheetsClient
from receiptvault.storage.location_cache import LocationCache


class ResourceProvisioner:
    """Resolves (and lazily creates) the remote container path for a period."""

    def __init__(
        self,
        *,
        drive: DriveClient,
        sheets: SheetsClient,
        cache: LocationCache,
        root_folder_name: str = "ReceiptVault",
        currency_symbol: str = "$",
    ) -> None:
        self._drive = drive
        self._sheets = sheets
        self._cache = cache
        self._root_folder_name = root_folder_name
        self._currency_symbol = currency_symbol

    def ensure_folder(
        self,
        name: str,
        parent_id: str | None = None,
        cache_key: str | None = None,
    ) -> str:
        """Return the id of folder ``name`` under ``parent_id``, creating it if needed."""
        key = cache_key or f"{parent_id or ''}/{name}"
        cached = self._revalidated(key)
        if cached is not None:
            return cached
        folder_id = self._find_or_create(name, FOLDER_MIME_TYPE, parent_id)
        self._cache.set(key, folder_id)
        return folder_id

    def ensure_ledger(self, parent_id: str, period_key: str) -> str:
        """Return the id of the ledger for ``period_key`` inside ``parent_id``.

        A ledger gets its header row and formatting once; a ledger left
        without a header by an interrupted run is completed here.
        """
        key = f"{parent_id}/ledger:{period_key}"
        cached = self._revalidated(key)
        if cached is not None:
            return cached

        name = ledger_name(period_key)
        ledger_id = self._drive.find_child(name, SPREADSHEET_MIME_TYPE, parent_id)
        if ledger_id is None:
            try:
                ledger_id = self._drive.create(name, SPREADSHEET_MIME_TYPE, parent_id)
            except ResourceConflictError:
                ledger_id = self._requery_after_conflict(name, SPREADSHEET_MIME_TYPE, parent_id)
                self._initialize_if_blank(ledger_id)
            else:
                self._initialize_ledger(ledger_id)
        else:
            self._initialize_if_blank(ledger_id)
        self._cache.set(key, ledger_id)
        return ledger_id

    def ensure_location(self, period_key: str, month_folder_name: str) -> RemoteLocation:
        """Resolve root folder, month folder and ledger for one receipt."""
        root_id = self.ensure_folder(self._root_folder_name, cache_key=self._root_folder_name)
        month_id = self.ensure_folder(
            month_folder_name, root_id, cache_key=f"{root_id}/{period_key}"
        )
        ledger_id = self.ensure_ledger(month_id, period_key)
        Log.info(
            "Remote location resolved",
            period=period_key,
            month_folder=month_id,
            ledger=ledger_id,
        )
        return RemoteLocation(root_id=root_id, month_folder_id=month_id, ledger_id=ledger_id)

    def _revalidated(self, key: str) -> str | None:
        cached = self._cache.get(key)
        if cached is None:
            return None
        if self._drive.exists(cached):
            Log.debug(f"Using cached id for '{key}'")
            return cached
        Log.warning(f"Cached id for '{key}' no longer exists; resolving again")
        self._cache.discard(key)
        return None

    def _find_or_create(self, name: str, mime_type: str, parent_id: str | None) -> str:
        existing = self._drive.find_child(name, mime_type, parent_id)
        if existing is not None:
            return existing
        try:
            return self._drive.create(name, mime_type, parent_id)
        except ResourceConflictError:
            return self._requery_after_conflict(name, mime_type, parent_id)

    def _requery_after_conflict(self, name: str, mime_type: str, parent_id: str | None) -> str:
        Log.warning(f"Create of '{name}' conflicted; re-querying")
        existing = self._drive.find_child(name, mime_type, parent_id)
        if existing is None:
            raise ResourceConflictError(f"'{name}' conflicted on create but was not found", 409)
        return existing

    def _initialize_if_blank(self, ledger_id: str) -> None:
        if any(cell for row in self._sheets.get_values(ledger_id, HEADER_RANGE) for cell in row):
            return
        Log.warning("Ledger has no header row; initializing", ledger_id=ledger_id)
        self._initialize_ledger(ledger_id)

    def _initialize_ledger(self, ledger_id: str) -> None:
        # Header goes last: a present header implies formatting was applied.
        self._sheets.batch_update(ledger_id, format_requests(self._currency_symbol))
        self._sheets.update_values(ledger_id, HEADER_RANGE, [list(HEADERS)], "RAW")
        Log.info("Initialized ledger header and formatting", ledger_id=ledger_id)
