import json
import re
from typing import Any

import httpx
import pytest

_QUERY_RE = re.compile(r"mimeType='([^']*)' and name='((?:[^'\\]|\\.)*)' and trashed=false")
_PARENT_RE = re.compile(r"'([^']*)' in parents")


class FakeGoogle:
    """In-memory stand-in for the Drive, Sheets and upload endpoints."""

    session_url = "https://upload.example.test/session"

    def __init__(self) -> None:
        self.files: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.values_updates: list[tuple[str, dict[str, Any]]] = []
        self.batch_updates: list[tuple[str, dict[str, Any]]] = []
        self.appends: list[tuple[str, dict[str, Any]]] = []
        self.headers: dict[str, list[list[str]]] = {}
        self.uploaded: list[bytes] = []
        self.upload_metadata: list[dict[str, Any]] = []
        self.fail: dict[str, int] = {}
        self.conflict_on_create = False
        self._next_id = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add(self, name: str, mime_type: str, parent: str | None = None) -> str:
        self._next_id += 1
        file_id = f"id-{self._next_id}"
        self.files[file_id] = {
            "id": file_id,
            "name": name,
            "mimeType": mime_type,
            "parents": [parent] if parent else [],
            "trashed": False,
        }
        return file_id

    def count(self, method: str, path_fragment: str) -> int:
        return sum(
            1 for r in self.requests if r.method == method and path_fragment in r.url.path
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.host}{request.url.path}"
        for fragment, status in self.fail.items():
            if fragment in key:
                return httpx.Response(status)
        host = request.url.host
        if host == "upload.example.test":
            self.uploaded.append(request.read())
            return httpx.Response(200, json={"id": "uploaded-1"})
        if host == "sheets.googleapis.com":
            return self._sheets(request)
        if request.url.path.startswith("/upload/"):
            return self._initiate(request)
        return self._drive(request)

    def _drive(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "GET" and path.endswith("/files"):
            query = request.url.params["q"]
            match = _QUERY_RE.search(query)
            assert match is not None, query
            mime_type, name = match.group(1), match.group(2).replace("\\'", "'")
            parent = _PARENT_RE.search(query)
            hits = [
                {"id": f["id"], "name": f["name"]}
                for f in self.files.values()
                if f["name"] == name
                and f["mimeType"] == mime_type
                and not f["trashed"]
                and (parent is None or parent.group(1) in f["parents"])
            ]
            return httpx.Response(200, json={"files": hits})
        if request.method == "POST" and path.endswith("/files"):
            body = json.loads(request.content)
            parent = (body.get("parents") or [None])[0]
            if self.conflict_on_create:
                self.add(body["name"], body["mimeType"], parent)
                return httpx.Response(409)
            return httpx.Response(200, json={"id": self.add(body["name"], body["mimeType"], parent)})
        if request.method == "GET" and "/files/" in path:
            file_id = path.rsplit("/", 1)[-1]
            entry = self.files.get(file_id)
            if entry is None:
                return httpx.Response(404)
            return httpx.Response(200, json={"id": file_id, "trashed": entry["trashed"]})
        return httpx.Response(404)

    def _sheets(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        spreadsheet_id = path.split("/")[3].split(":")[0]
        if request.method == "GET":
            header = self.headers.get(spreadsheet_id)
            return httpx.Response(200, json={"values": header} if header else {})
        body = json.loads(request.content)
        if path.endswith(":batchUpdate"):
            self.batch_updates.append((spreadsheet_id, body))
        elif path.endswith(":append"):
            self.appends.append((spreadsheet_id, body))
        else:
            self.values_updates.append((spreadsheet_id, body))
            self.headers[spreadsheet_id] = body["values"]
        return httpx.Response(200, json={})

    def _initiate(self, request: httpx.Request) -> httpx.Response:
        self.upload_metadata.append(json.loads(request.content))
        return httpx.Response(200, headers={"Location": self.session_url})


@pytest.fixture()
def fake_google() -> FakeGoogle:
    return FakeGoogle()
