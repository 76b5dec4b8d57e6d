import logging
import re
from typing import Any, Optional, Protocol
from urllib.parse import quote

import requests
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport.requests import AuthorizedSession

from casesheets.exceptions import SheetsApiError

logger = logging.getLogger(__name__)

_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z0-9_]+$")


def a1_range(sheet: str, cells: str) -> str:
    """Sheet-qualified A1 address, quoting the sheet name when it needs it."""
    if _PLAIN_SHEET_NAME.match(sheet):
        return f"{sheet}!{cells}"
    escaped = sheet.replace("'", "''")
    return f"'{escaped}'!{cells}"


class SheetsClient(Protocol):
    def read(self, range_: str) -> list[list[Any]]:
        ...

    def clear(self, range_: str) -> None:
        ...

    def write_at(self, range_: str, values: list[list[Any]]) -> None:
        ...

    def append(self, range_: str, values: list[list[Any]]) -> None:
        ...


class GoogleSheetsClient:
    """
    Thin wrapper over the Sheets v4 values endpoints for a single spreadsheet.
    Calls are not retried; failures surface as SheetsApiError.
    """

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{range}"

    def __init__(self, spreadsheet_id: str, session: AuthorizedSession, timeout: Optional[float] = None):
        self.spreadsheet_id = spreadsheet_id
        self.session = session
        self.timeout = timeout

    @classmethod
    def from_credentials(cls, spreadsheet_id: str, credentials, timeout: Optional[float] = None) -> "GoogleSheetsClient":
        return cls(spreadsheet_id, AuthorizedSession(credentials), timeout=timeout)

    def read(self, range_: str) -> list[list[Any]]:
        data = self._request("GET", range_)
        return data.get("values", [])

    def clear(self, range_: str) -> None:
        self._request("POST", range_, action="clear", json={})

    def write_at(self, range_: str, values: list[list[Any]]) -> None:
        self._request(
            "PUT",
            range_,
            params={"valueInputOption": "USER_ENTERED"},
            json={"majorDimension": "ROWS", "values": values},
        )

    def append(self, range_: str, values: list[list[Any]]) -> None:
        self._request(
            "POST",
            range_,
            action="append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"majorDimension": "ROWS", "values": values},
        )

    def _url(self, range_: str, action: Optional[str] = None) -> str:
        url = self.BASE_URL.format(spreadsheet_id=self.spreadsheet_id, range=quote(range_, safe=""))
        if action:
            url = f"{url}:{action}"
        return url

    def _request(
        self,
        method: str,
        range_: str,
        action: Optional[str] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> dict:
        url = self._url(range_, action)
        try:
            resp = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except (requests.RequestException, google_auth_exceptions.GoogleAuthError) as exc:
            raise SheetsApiError(str(exc)) from exc

        if resp.status_code >= 400:
            raise SheetsApiError(_error_text(resp), status=resp.status_code)

        logger.debug("sheets %s %s -> %s", method, range_, resp.status_code)
        if not resp.content:
            return {}
        return resp.json()


def _error_text(resp) -> str:
    """Upstream error message from a Google API error body, falling back to the raw text."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"Sheets API returned {resp.status_code}"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return resp.text or f"Sheets API returned {resp.status_code}"
