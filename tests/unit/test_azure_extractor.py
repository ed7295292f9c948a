from collections.abc import Callable
from datetime import date
from typing import Any

import httpx
import pytest

from receiptvault.domain.models import ReceiptImage
from receiptvault.extraction.azure_extractor import AzureFieldExtractor
from receiptvault.extraction.exceptions import (
    AuthenticationError,
    ExtractionFailedError,
    ExtractionTimedOutError,
    InvalidResponseError,
)

ENDPOINT = "https://example.cognitiveservices.azure.com"
OPERATION_URL = f"{ENDPOINT}/formrecognizer/documentModels/prebuilt-receipt/analyzeResults/op-1"
TODAY = date(2024, 3, 15)


def _succeeded_body(fields: dict[str, Any] | None = None, content: str = "") -> dict[str, Any]:
    return {
        "status": "succeeded",
        "analyzeResult": {
            "content": content,
            "documents": [{"fields": fields or {}}],
        },
    }


class _FakeAzure:
    """Scripted analyze endpoint: one response factory per request, in order."""

    def __init__(
        self,
        submits: list[Callable[[httpx.Request], httpx.Response]],
        polls: list[Callable[[httpx.Request], httpx.Response]] | None = None,
        repeat_last_poll: bool = False,
    ) -> None:
        self.submits = list(submits)
        self.polls = list(polls or [])
        self.repeat_last_poll = repeat_last_poll
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return self.submits.pop(0)(request)
        if self.repeat_last_poll and len(self.polls) == 1:
            return self.polls[0](request)
        return self.polls.pop(0)(request)

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


def _accepted(request: httpx.Request) -> httpx.Response:
    return httpx.Response(202, headers={"Operation-Location": OPERATION_URL})


def _status(code: int) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(code)


def _poll(body: dict[str, Any]) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, json=body)


def _running(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"status": "running"})


def _network_fault(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection reset", request=request)


def _make_extractor(fake: _FakeAzure, clock: Any) -> AzureFieldExtractor:
    return AzureFieldExtractor(
        http_client=httpx.Client(transport=httpx.MockTransport(fake.handler)),
        endpoint=ENDPOINT,
        api_key="secret-key",
        clock=clock,
        today=lambda: TODAY,
    )


class TestSuccessfulAnalysis:
    def test_polls_until_succeeded_and_maps_fields(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        body = _succeeded_body(
            {"MerchantName": {"valueString": "Cafe X"}, "Total": {"valueNumber": 42.5}}
        )
        fake = _FakeAzure([_accepted], [_running, _running, _poll(body)])

        result = _make_extractor(fake, fake_clock).extract(receipt_image)

        assert len(fake.gets) == 3
        assert result.fields["merchant"] == "Cafe X"
        assert result.fields["total"] == "$42.50"
        assert result.fields["date"] == "15/03/2024"
        assert all(
            value == ""
            for name, value in result.fields.items()
            if name not in ("merchant", "total", "date")
        )

    def test_poll_intervals_grow(self, fake_clock: Any, receipt_image: ReceiptImage) -> None:
        fake = _FakeAzure([_accepted], [_running, _running, _poll(_succeeded_body())])

        _make_extractor(fake, fake_clock).extract(receipt_image)

        assert fake_clock.sleeps == [0.5, 0.75]

    def test_submit_request_shape(self, fake_clock: Any, receipt_image: ReceiptImage) -> None:
        fake = _FakeAzure([_accepted], [_poll(_succeeded_body())])

        _make_extractor(fake, fake_clock).extract(receipt_image)

        submit = fake.posts[0]
        assert str(submit.url) == (
            f"{ENDPOINT}/formrecognizer/documentModels/prebuilt-receipt:analyze"
            "?api-version=2023-07-31"
        )
        assert submit.headers["Ocp-Apim-Subscription-Key"] == "secret-key"
        assert submit.headers["Content-Type"] == "application/octet-stream"
        assert submit.content == receipt_image.data
        assert str(fake.gets[0].url) == OPERATION_URL
        assert fake.gets[0].headers["Ocp-Apim-Subscription-Key"] == "secret-key"

    def test_missing_date_adds_note(self, fake_clock: Any, receipt_image: ReceiptImage) -> None:
        fake = _FakeAzure([_accepted], [_poll(_succeeded_body())])

        result = _make_extractor(fake, fake_clock).extract(receipt_image)

        assert result.fields["date"] == "15/03/2024"
        assert any("current date" in note for note in result.notes)


class TestSubmissionRetry:
    def test_retries_with_exponential_backoff(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure(
            [_status(500), _status(503), _accepted],
            [_poll(_succeeded_body())],
        )

        _make_extractor(fake, fake_clock).extract(receipt_image)

        assert len(fake.posts) == 3
        assert fake_clock.sleeps == [1.0, 2.0]

    def test_gives_up_after_three_attempts(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_status(500), _status(500), _status(500)])

        with pytest.raises(ExtractionFailedError, match="3 attempts"):
            _make_extractor(fake, fake_clock).extract(receipt_image)

        assert len(fake.posts) == 3
        assert fake_clock.sleeps == [1.0, 2.0]

    def test_network_errors_are_retried(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_network_fault, _accepted], [_poll(_succeeded_body())])

        _make_extractor(fake, fake_clock).extract(receipt_image)

        assert len(fake.posts) == 2

    def test_rejected_key_is_not_retried(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_status(401)])

        with pytest.raises(AuthenticationError):
            _make_extractor(fake, fake_clock).extract(receipt_image)

        assert len(fake.posts) == 1
        assert fake_clock.sleeps == []

    def test_missing_operation_location(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_status(202)])

        with pytest.raises(InvalidResponseError, match="Operation-Location"):
            _make_extractor(fake, fake_clock).extract(receipt_image)


class TestPolling:
    def test_times_out_after_budget(self, fake_clock: Any, receipt_image: ReceiptImage) -> None:
        fake = _FakeAzure([_accepted], [_running], repeat_last_poll=True)

        with pytest.raises(ExtractionTimedOutError):
            _make_extractor(fake, fake_clock).extract(receipt_image)

        assert fake_clock.now == pytest.approx(30.0)
        assert max(fake_clock.sleeps) <= 4.0
        assert len(fake.gets) == 11

    def test_failed_status_raises(self, fake_clock: Any, receipt_image: ReceiptImage) -> None:
        fake = _FakeAzure([_accepted], [_running, _poll({"status": "failed"})])

        with pytest.raises(ExtractionFailedError):
            _make_extractor(fake, fake_clock).extract(receipt_image)

    def test_unknown_status_is_invalid_response(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_poll({"status": "canceled"})])

        with pytest.raises(InvalidResponseError, match="canceled"):
            _make_extractor(fake, fake_clock).extract(receipt_image)

    def test_missing_status_is_invalid_response(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_poll({"analyzeResult": {}})])

        with pytest.raises(InvalidResponseError):
            _make_extractor(fake, fake_clock).extract(receipt_image)

    def test_network_fault_doubles_interval(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_network_fault, _poll(_succeeded_body())])

        _make_extractor(fake, fake_clock).extract(receipt_image)

        assert fake_clock.sleeps == [1.0]
        assert len(fake.gets) == 2

    def test_server_error_while_polling_backs_off(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_status(503), _poll(_succeeded_body())])

        _make_extractor(fake, fake_clock).extract(receipt_image)

        assert fake_clock.sleeps == [1.0]

    def test_rejected_key_while_polling(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_status(403)])

        with pytest.raises(AuthenticationError):
            _make_extractor(fake, fake_clock).extract(receipt_image)

    def test_malformed_succeeded_payload(
        self, fake_clock: Any, receipt_image: ReceiptImage
    ) -> None:
        fake = _FakeAzure([_accepted], [_poll({"status": "succeeded"})])

        with pytest.raises(InvalidResponseError, match="analyzeResult"):
            _make_extractor(fake, fake_clock).extract(receipt_image)
