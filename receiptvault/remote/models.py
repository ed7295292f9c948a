from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteLocation:
    """Ids of the container path a receipt is synchronized into."""

    root_id: str
    month_folder_id: str
    ledger_id: str


@dataclass(frozen=True)
class UploadSession:
    """Single-use resumable upload session. Never persisted."""

    session_uri: str
    total_bytes: int
