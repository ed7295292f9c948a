from typing import Any

import httpx

from receiptvault.auth.base import BaseTokenProvider
from receiptvault.remote.exceptions import (
    MalformedResponseError,
    NotAuthenticatedError,
    NotAuthorizedError,
    RequestFailedError,
    ResourceConflictError,
    TransientNetworkError,
)

_TRANSIENT_STATUSES = frozenset({429})


def raise_for_status(response: httpx.Response, action: str) -> None:
    """Translate a non-2xx response into the remote error taxonomy."""
    status = response.status_code
    if response.is_success:
        return
    detail = f"{action} failed with HTTP {status}"
    if status in (401, 403):
        raise NotAuthorizedError(detail)
    if status == 409:
        raise ResourceConflictError(detail, status_code=status)
    if status in _TRANSIENT_STATUSES or status >= 500:
        raise TransientNetworkError(detail, status_code=status)
    raise RequestFailedError(detail, status_code=status)


def json_body(response: httpx.Response, action: str) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"{action} returned a non-JSON body: {exc}") from exc
    if not isinstance(body, dict):
        raise MalformedResponseError(f"{action} returned a non-object body")
    return body


class GoogleApiClient:
    """Bearer-authenticated JSON client shared by the Drive and Sheets clients."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        token_provider: BaseTokenProvider,
        timeout_seconds: float = 30,
    ) -> None:
        self._http = http_client
        self._token_provider = token_provider
        self._timeout = timeout_seconds

    def _auth_headers(self) -> dict[str, str]:
        token = self._token_provider.get_token()
        if not token:
            raise NotAuthenticatedError("No valid remote credential")
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        url: str,
        action: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        merged = {**(headers or {}), **self._auth_headers()}
        try:
            response = self._http.request(
                method, url, headers=merged, timeout=self._timeout, **kwargs
            )
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"{action} network error: {exc}") from exc
        raise_for_status(response, action)
        return response
