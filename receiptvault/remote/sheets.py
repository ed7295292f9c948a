from typing import Any

import httpx

from receiptvault.auth.base import BaseTokenProvider
from receiptvault.remote.exceptions import MalformedResponseError
from receiptvault.remote.google_client import GoogleApiClient, json_body

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetsClient(GoogleApiClient):
    """Values and formatting operations on Google Sheets."""

    def __init__(
        self,
        *,
        http_client: httpx.Client,
        token_provider: BaseTokenProvider,
        timeout_seconds: float = 30,
        base_url: str = SHEETS_API,
    ) -> None:
        super().__init__(
            http_client=http_client,
            token_provider=token_provider,
            timeout_seconds=timeout_seconds,
        )
        self._base_url = base_url.rstrip("/")

    def update_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[str]],
        value_input_option: str = "RAW",
    ) -> None:
        self._request(
            "PUT",
            f"{self._base_url}/{spreadsheet_id}/values/{cell_range}",
            "Sheets values update",
            params={"valueInputOption": value_input_option},
            json={"range": cell_range, "majorDimension": "ROWS", "values": values},
        )

    def get_values(self, spreadsheet_id: str, cell_range: str) -> list[list[str]]:
        """Return the rows in ``cell_range``; an empty range yields ``[]``."""
        response = self._request(
            "GET",
            f"{self._base_url}/{spreadsheet_id}/values/{cell_range}",
            "Sheets values get",
            params={"majorDimension": "ROWS"},
        )
        rows = json_body(response, "Sheets values get").get("values", [])
        if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
            raise MalformedResponseError("Sheets values response has a malformed 'values' list")
        return rows

    def batch_update(self, spreadsheet_id: str, requests: list[dict[str, Any]]) -> None:
        self._request(
            "POST",
            f"{self._base_url}/{spreadsheet_id}:batchUpdate",
            "Sheets batch update",
            json={"requests": requests},
        )

    def append_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[str]],
        value_input_option: str = "USER_ENTERED",
        insert_data_option: str = "INSERT_ROWS",
    ) -> None:
        self._request(
            "POST",
            f"{self._base_url}/{spreadsheet_id}/values/{cell_range}:append",
            "Sheets values append",
            params={
                "valueInputOption": value_input_option,
                "insertDataOption": insert_data_option,
            },
            json={"majorDimension": "ROWS", "values": values},
        )
