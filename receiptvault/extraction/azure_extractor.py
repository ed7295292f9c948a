"""Field extractor backed by the Azure Document Intelligence receipt model.

Flow:
1. Submit the image bytes to ``:analyze``; a 2xx answer carries an
   ``Operation-Location`` header instead of a result.
2. Retry submission on transport faults and non-2xx statuses with
   exponential backoff (1s, 2s, ...), except for rejected credentials.
3. Poll the operation until ``succeeded`` / ``failed`` or the wall-clock
   budget runs out.
4. Map the succeeded payload onto ExtractedFields.
"""

from collections.abc import Callable
from datetime import date
from typing import Any

import httpx

from receiptvault.domain.models import ReceiptImage
from receiptvault.extraction.backoff import PollSchedule, SubmitRetryPolicy
from receiptvault.extraction.base import BaseFieldExtractor
from receiptvault.extraction.clock import Clock, SystemClock
from receiptvault.extraction.exceptions import (
    AuthenticationError,
    ExtractionFailedError,
    ExtractionTimedOutError,
    InvalidResponseError,
)
from receiptvault.extraction.field_mapper import map_analyze_result
from receiptvault.extraction.models import (
    PENDING_STATUSES,
    STATUS_FAILED,
    STATUS_SUCCEEDED,
    ExtractionResult,
)
from receiptvault.logging.logger import Log

_AUTH_HEADER = "Ocp-Apim-Subscription-Key"
_AUTH_STATUSES = frozenset({401, 403})


class AzureFieldExtractor(BaseFieldExtractor):
    """Submit + poll client for the prebuilt receipt analysis model."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        endpoint: str,
        api_key: str,
        model_id: str = "prebuilt-receipt",
        api_version: str = "2023-07-31",
        currency_symbol: str = "$",
        retry_policy: SubmitRetryPolicy | None = None,
        poll_schedule: PollSchedule | None = None,
        submit_timeout_seconds: float = 30,
        poll_request_timeout_seconds: float = 10,
        clock: Clock | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._http = http_client
        self._analyze_url = (
            f"{endpoint.rstrip('/')}/formrecognizer/documentModels/"
            f"{model_id}:analyze?api-version={api_version}"
        )
        self._api_key = api_key
        self._currency_symbol = currency_symbol
        self._retry_policy = retry_policy or SubmitRetryPolicy()
        self._poll_schedule = poll_schedule or PollSchedule()
        self._submit_timeout = submit_timeout_seconds
        self._poll_request_timeout = poll_request_timeout_seconds
        self._clock = clock or SystemClock()
        self._today = today

    def extract(self, image: ReceiptImage) -> ExtractionResult:
        operation_location = self._submit_with_retry(image)
        payload = self._poll(operation_location)
        result = map_analyze_result(
            payload,
            currency_symbol=self._currency_symbol,
            today=self._today(),
        )
        for note in result.notes:
            Log.warning(note)
        Log.info(
            "Receipt analysis complete",
            populated=sum(1 for value in result.fields.values() if value),
        )
        return result

    def _submit_with_retry(self, image: ReceiptImage) -> str:
        attempts = self._retry_policy.attempts
        last_error: ExtractionFailedError | None = None
        for attempt in range(attempts):
            try:
                Log.info(f"Submitting receipt for analysis (attempt {attempt + 1}/{attempts})")
                return self._submit(image)
            except ExtractionFailedError as exc:
                last_error = exc
                Log.warning(f"Analysis submission attempt {attempt + 1} failed: {exc}")
                if attempt + 1 < attempts:
                    self._clock.sleep(self._retry_policy.delay_after(attempt))
        raise ExtractionFailedError(
            f"Analysis submission failed after {attempts} attempts: {last_error}"
        ) from last_error

    def _submit(self, image: ReceiptImage) -> str:
        try:
            response = self._http.post(
                self._analyze_url,
                content=image.data,
                headers={
                    "Content-Type": "application/octet-stream",
                    _AUTH_HEADER: self._api_key,
                },
                timeout=self._submit_timeout,
            )
        except httpx.TransportError as exc:
            raise ExtractionFailedError(f"Network error during submission: {exc}") from exc

        if response.status_code in _AUTH_STATUSES:
            raise AuthenticationError("Analysis service rejected the API key")
        if not response.is_success:
            raise ExtractionFailedError(f"Submission returned HTTP {response.status_code}")

        operation_location = response.headers.get("Operation-Location")
        if not operation_location:
            raise InvalidResponseError("Submission response has no Operation-Location header")
        Log.debug(f"Analysis operation: {operation_location}")
        return operation_location

    def _poll(self, operation_location: str) -> dict[str, Any]:
        schedule = self._poll_schedule
        started = self._clock.monotonic()
        interval = schedule.initial_interval
        polls = 0

        while True:
            remaining = schedule.timeout - (self._clock.monotonic() - started)
            if remaining <= 0:
                break
            polls += 1
            body = None
            try:
                response = self._http.get(
                    operation_location,
                    headers={_AUTH_HEADER: self._api_key},
                    timeout=self._poll_request_timeout,
                )
            except httpx.TransportError as exc:
                interval = schedule.after_fault(interval)
                Log.warning(f"Poll {polls} network error, backing off to {interval:.2f}s: {exc}")
            else:
                body = self._check_poll_response(response, polls)
                if body is not None and body["status"] == STATUS_SUCCEEDED:
                    Log.info(f"Analysis succeeded after {polls} poll(s)")
                    return body
                if body is None:
                    interval = schedule.after_fault(interval)

            remaining = schedule.timeout - (self._clock.monotonic() - started)
            if remaining <= 0:
                break
            self._clock.sleep(min(interval, remaining))
            if body is not None:
                interval = schedule.after_poll(interval)

        raise ExtractionTimedOutError(
            f"Analysis timed out after {schedule.timeout:g} seconds ({polls} polls)"
        )

    def _check_poll_response(
        self, response: httpx.Response, poll_number: int
    ) -> dict[str, Any] | None:
        """Return the body of a 200 poll, or None for a transient HTTP status.

        Raises on terminal verdicts and malformed bodies.
        """
        status_code = response.status_code
        if status_code in _AUTH_STATUSES:
            raise AuthenticationError("Analysis service rejected the API key while polling")
        if status_code == 429 or status_code >= 500:
            Log.warning(f"Poll {poll_number} returned HTTP {status_code}; backing off")
            return None
        if status_code != 200:
            raise ExtractionFailedError(f"Polling returned HTTP {status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise InvalidResponseError(f"Poll response is not JSON: {exc}") from exc
        if not isinstance(body, dict) or not isinstance(body.get("status"), str):
            raise InvalidResponseError("Poll response has no 'status' string")

        status = body["status"]
        Log.debug(f"Poll {poll_number} status: {status}")
        if status in PENDING_STATUSES or status == STATUS_SUCCEEDED:
            return body
        if status == STATUS_FAILED:
            raise ExtractionFailedError("Analysis service reported that the analysis failed")
        raise InvalidResponseError(f"Unexpected analysis status {status!r}")
