import httpx

from receiptvault.auth.base import BaseTokenProvider
from receiptvault.logging.logger import Log
from receiptvault.remote.exceptions import MalformedResponseError, RequestFailedError
from receiptvault.remote.google_client import GoogleApiClient, json_body

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"

DRIVE_API = "https://www.googleapis.com/drive/v3"


def quote_query_value(value: str) -> str:
    """Escape a literal for a Drive ``q`` expression."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient(GoogleApiClient):
    """Folder and file metadata operations on Google Drive."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        token_provider: BaseTokenProvider,
        timeout_seconds: float = 30,
        base_url: str = DRIVE_API,
    ) -> None:
        super().__init__(
            http_client=http_client,
            token_provider=token_provider,
            timeout_seconds=timeout_seconds,
        )
        self._base_url = base_url.rstrip("/")

    def find_child(self, name: str, mime_type: str, parent_id: str | None = None) -> str | None:
        """Return the id of a non-trashed object named ``name``, or None."""
        clauses = [
            f"mimeType='{mime_type}'",
            f"name='{quote_query_value(name)}'",
            "trashed=false",
        ]
        if parent_id:
            clauses.append(f"'{quote_query_value(parent_id)}' in parents")
        response = self._request(
            "GET",
            f"{self._base_url}/files",
            "Drive query",
            params={"q": " and ".join(clauses), "fields": "files(id, name)", "spaces": "drive"},
        )
        files = json_body(response, "Drive query").get("files")
        if not isinstance(files, list):
            raise MalformedResponseError("Drive query response has no 'files' list")
        if not files:
            return None
        if len(files) > 1:
            Log.warning(f"Found {len(files)} objects named '{name}'; using the first")
        file_id = files[0].get("id") if isinstance(files[0], dict) else None
        if not isinstance(file_id, str) or not file_id:
            raise MalformedResponseError("Drive query returned an entry without an id")
        return file_id

    def create(self, name: str, mime_type: str, parent_id: str | None = None) -> str:
        """Create an empty object (folder, spreadsheet) and return its id."""
        metadata: dict[str, object] = {"name": name, "mimeType": mime_type}
        if parent_id:
            metadata["parents"] = [parent_id]
        response = self._request(
            "POST",
            f"{self._base_url}/files",
            "Drive create",
            params={"fields": "id"},
            json=metadata,
        )
        file_id = json_body(response, "Drive create").get("id")
        if not isinstance(file_id, str) or not file_id:
            raise MalformedResponseError("Drive create response has no id")
        Log.info(f"Created '{name}'", mime_type=mime_type, id=file_id)
        return file_id

    def exists(self, file_id: str) -> bool:
        """Lightweight check that ``file_id`` still exists and is not trashed."""
        try:
            response = self._request(
                "GET",
                f"{self._base_url}/files/{file_id}",
                "Drive get",
                params={"fields": "id, trashed"},
            )
        except RequestFailedError as exc:
            if exc.status_code == 404:
                return False
            raise
        return not json_body(response, "Drive get").get("trashed", False)
