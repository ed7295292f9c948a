"""Two-phase resumable upload of receipt documents to Google Drive.

Phase 1 POSTs the file metadata and announces length and type; the answer's
``Location`` header is a single-use session URI. Phase 2 PUTs the bytes to
that URI. Nothing is retried here: a retry must open a new session.
"""

from collections.abc import Iterable

import httpx

from receiptvault.auth.base import BaseTokenProvider
from receiptvault.logging.logger import Log
from receiptvault.remote.exceptions import (
    AuthFailureError,
    RemoteError,
    TransientNetworkError,
    UploadFailedError,
    UploadInitiationFailedError,
)
from receiptvault.remote.google_client import GoogleApiClient
from receiptvault.remote.models import UploadSession

UPLOAD_API = "https://www.googleapis.com/upload/drive/v3/files"

_UPLOAD_SUCCESS_STATUSES = frozenset({200, 201})


class UploadTransport(GoogleApiClient):
    """Pushes one document per session into a Drive folder."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        token_provider: BaseTokenProvider,
        timeout_seconds: float = 30,
        upload_url: str = UPLOAD_API,
    ) -> None:
        super().__init__(
            http_client=http_client,
            token_provider=token_provider,
            timeout_seconds=timeout_seconds,
        )
        self._upload_url = upload_url

    def upload(
        self,
        parent_folder_id: str,
        file_name: str,
        payload: bytes | Iterable[bytes],
        content_type: str,
        content_length: int | None = None,
    ) -> None:
        """Open a session and transfer ``payload`` into ``parent_folder_id``.

        ``content_length`` is required when ``payload`` is a chunk iterator.
        """
        if isinstance(payload, (bytes, bytearray)):
            content_length = len(payload)
        if content_length is None:
            raise ValueError("content_length is required for streamed payloads")
        session = self.initiate(parent_folder_id, file_name, content_type, content_length)
        self.send(session, payload, content_type)

    def initiate(
        self,
        parent_folder_id: str,
        file_name: str,
        content_type: str,
        content_length: int,
    ) -> UploadSession:
        """Phase 1: create the upload session.

        Raises:
            AuthFailureError: if the credential is missing or rejected.
            UploadInitiationFailedError: on non-2xx or a missing Location header.
        """
        metadata = {"name": file_name, "mimeType": content_type, "parents": [parent_folder_id]}
        try:
            response = self._request(
                "POST",
                self._upload_url,
                "Upload initiation",
                params={"uploadType": "resumable"},
                headers={
                    "Content-Type": "application/json; charset=UTF-8",
                    "X-Upload-Content-Type": content_type,
                    "X-Upload-Content-Length": str(content_length),
                },
                json=metadata,
            )
        except AuthFailureError:
            raise
        except TransientNetworkError as exc:
            raise UploadInitiationFailedError(str(exc), retryable=True) from exc
        except RemoteError as exc:
            raise UploadInitiationFailedError(str(exc)) from exc

        session_uri = response.headers.get("Location")
        if not session_uri:
            raise UploadInitiationFailedError("Upload initiation response has no Location header")
        Log.debug(f"Opened upload session for '{file_name}' ({content_length} bytes)")
        return UploadSession(session_uri=session_uri, total_bytes=content_length)

    def send(
        self,
        session: UploadSession,
        payload: bytes | Iterable[bytes],
        content_type: str,
    ) -> None:
        """Phase 2: PUT the whole payload to the session URI.

        Raises:
            UploadFailedError: on transport faults or an unexpected status.
        """
        try:
            response = self._http.put(
                session.session_uri,
                content=payload,
                headers={
                    "Content-Type": content_type,
                    "Content-Length": str(session.total_bytes),
                },
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise UploadFailedError(f"Upload transfer network error: {exc}") from exc
        if response.status_code not in _UPLOAD_SUCCESS_STATUSES:
            raise UploadFailedError(f"Upload transfer failed with HTTP {response.status_code}")
        Log.info(f"Uploaded {session.total_bytes} bytes")
