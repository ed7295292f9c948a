from collections.abc import Callable
from datetime import datetime, timezone

from receiptvault.auth.base import BaseTokenProvider


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StaticTokenProvider(BaseTokenProvider):
    """Serves a token obtained out-of-band (e.g. by a sign-in flow).

    A token without an expiry is considered valid until replaced.
    """

    def __init__(
        self,
        token: str | None,
        expires_at: datetime | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._token = (token or "").strip() or None
        self._expires_at = self._as_aware(expires_at)
        self._now = now

    def get_token(self) -> str | None:
        return self._token if self.is_valid() else None

    def is_valid(self) -> bool:
        if self._token is None:
            return False
        if self._expires_at is None:
            return True
        return self._expires_at > self._now()

    def update(self, token: str | None, expires_at: datetime | None = None) -> None:
        """Replace the held credential after re-authentication."""
        self._token = (token or "").strip() or None
        self._expires_at = self._as_aware(expires_at)

    @staticmethod
    def _as_aware(value: datetime | None) -> datetime | None:
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)
