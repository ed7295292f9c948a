import json
from collections.abc import Callable

import httpx
import pytest

from receiptvault.auth.static_provider import StaticTokenProvider
from receiptvault.remote.drive import FOLDER_MIME_TYPE, DriveClient, quote_query_value
from receiptvault.remote.exceptions import (
    MalformedResponseError,
    NotAuthenticatedError,
    NotAuthorizedError,
    RequestFailedError,
    ResourceConflictError,
    TransientNetworkError,
)
from receiptvault.remote.google_client import json_body, raise_for_status


def _response(status: int, **kwargs: object) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://x.test"), **kwargs)


def _drive(
    handler: Callable[[httpx.Request], httpx.Response], token: str | None = "tok"
) -> DriveClient:
    return DriveClient(
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        token_provider=StaticTokenProvider(token),
    )


class TestRaiseForStatus:
    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (401, NotAuthorizedError),
            (403, NotAuthorizedError),
            (409, ResourceConflictError),
            (429, TransientNetworkError),
            (500, TransientNetworkError),
            (503, TransientNetworkError),
            (400, RequestFailedError),
            (404, RequestFailedError),
        ],
    )
    def test_maps_status(self, status: int, error: type[Exception]) -> None:
        with pytest.raises(error):
            raise_for_status(_response(status), "Drive query")

    def test_success_passes(self) -> None:
        raise_for_status(_response(204), "Drive query")

    def test_keeps_status_code(self) -> None:
        with pytest.raises(RequestFailedError) as exc_info:
            raise_for_status(_response(404), "Drive get")
        assert exc_info.value.status_code == 404


class TestJsonBody:
    def test_rejects_non_json(self) -> None:
        with pytest.raises(MalformedResponseError):
            json_body(_response(200, content=b"<html>"), "Drive query")

    def test_rejects_non_object(self) -> None:
        with pytest.raises(MalformedResponseError):
            json_body(_response(200, json=[1, 2]), "Drive query")


class TestGoogleApiClient:
    def test_sends_bearer_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"files": []})

        _drive(handler).find_child("ReceiptVault", FOLDER_MIME_TYPE)

        assert seen[0].headers["Authorization"] == "Bearer tok"

    def test_missing_token_fails_before_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"files": []})

        with pytest.raises(NotAuthenticatedError):
            _drive(handler, token=None).find_child("ReceiptVault", FOLDER_MIME_TYPE)
        assert seen == []

    def test_transport_error_is_transient(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(TransientNetworkError):
            _drive(handler).find_child("ReceiptVault", FOLDER_MIME_TYPE)


class TestDriveClient:
    def test_query_escapes_quotes(self) -> None:
        assert quote_query_value("Joe's") == "Joe\\'s"

    def test_find_child_builds_query(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"files": [{"id": "f1", "name": "March 2024"}]})

        found = _drive(handler).find_child("March 2024", FOLDER_MIME_TYPE, "root-1")

        assert found == "f1"
        query = seen[0].url.params["q"]
        assert "name='March 2024'" in query
        assert "trashed=false" in query
        assert "'root-1' in parents" in query

    def test_find_child_without_files_list(self) -> None:
        with pytest.raises(MalformedResponseError):
            _drive(lambda request: httpx.Response(200, json={})).find_child("x", FOLDER_MIME_TYPE)

    def test_exists_false_on_404(self) -> None:
        assert _drive(lambda request: httpx.Response(404)).exists("gone") is False

    def test_exists_false_when_trashed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"id": "f", "trashed": True})

        assert _drive(handler).exists("f") is False

    def test_exists_propagates_auth_failure(self) -> None:
        with pytest.raises(NotAuthorizedError):
            _drive(lambda request: httpx.Response(401)).exists("f")

    def test_create_sends_parent(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "new-1"})

        created = _drive(handler).create("March 2024", FOLDER_MIME_TYPE, "root-1")

        assert created == "new-1"
        assert seen[0].url.params["fields"] == "id"
        assert json.loads(seen[0].content)["parents"] == ["root-1"]
