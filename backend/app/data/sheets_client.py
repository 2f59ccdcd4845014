"""
sheets_client.py — HTTP client for the Google Sheets v4 REST API.

Responsibilities:
- Service-account authentication (RS256 JWT assertion → OAuth access token)
- Read a whole sheet as header + rows
- Append a row, overwrite a row
- No retries and no caching of sheet contents; every read goes to the API

The client is sync/blocking. The datastore layer calls it from the threadpool.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from jose import jwt

from app.core.config import settings
from app.core.logging import get_logger


logger = get_logger(__name__)


SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"

TOKEN_LIFETIME_SECONDS = 3600
# Refresh a little before Google expires the token
TOKEN_REFRESH_MARGIN_SECONDS = 60


class SheetsClientError(RuntimeError):
    """Base exception for Sheets client failures."""


class SheetsClientConfigurationError(SheetsClientError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class SheetsClientSettings:
    spreadsheet_id: str
    client_email: str
    private_key: str
    timeout_seconds: int

    @classmethod
    def from_app_settings(cls) -> "SheetsClientSettings":
        return cls(
            spreadsheet_id=settings.GOOGLE_SPREADSHEET_ID,
            client_email=settings.GOOGLE_SHEETS_CLIENT_EMAIL,
            private_key=settings.GOOGLE_SHEETS_PRIVATE_KEY,
            timeout_seconds=settings.GOOGLE_SHEETS_TIMEOUT_SECONDS,
        )

    def missing(self) -> List[str]:
        names = {
            "GOOGLE_SPREADSHEET_ID": self.spreadsheet_id,
            "GOOGLE_SHEETS_CLIENT_EMAIL": self.client_email,
            "GOOGLE_SHEETS_PRIVATE_KEY": self.private_key,
        }
        return [name for name, value in names.items() if not value]


@dataclass
class SheetRow:
    """One data row. `row_number` is the 1-based sheet row (header is row 1)."""
    row_number: int
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, column: str, default: str = "") -> str:
        value = self.values.get(column)
        return value if value not in (None, "") else default

    def set(self, column: str, value: Any) -> None:
        self.values[column] = "" if value is None else str(value)


@dataclass
class SheetTable:
    title: str
    header: List[str]
    rows: List[SheetRow]


def column_letter(index: int) -> str:
    """1 → A, 26 → Z, 27 → AA."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def a1_range(title: str, cells: str = "") -> str:
    escaped = title.replace("'", "''")
    return f"'{escaped}'!{cells}" if cells else f"'{escaped}'"


class SheetsClient:
    """
    Thin wrapper over `requests.Session` for one spreadsheet.

    Only the OAuth access token is kept between calls.
    """

    def __init__(self, session: Optional[requests.Session] = None, config: Optional[SheetsClientSettings] = None):
        self._config = config or SheetsClientSettings.from_app_settings()
        missing = self._config.missing()
        if missing:
            raise SheetsClientConfigurationError(
                f"Google Sheets environment variables are not set: {', '.join(missing)}"
            )
        self._session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def get_spreadsheet_info(self) -> Dict[str, Any]:
        """Spreadsheet title and sheet list (used by the connection check script)."""
        return self._request(
            "GET",
            self._spreadsheet_url(),
            params={"fields": "properties.title,sheets.properties(sheetId,title,index)"},
        )

    def read_table(self, title: str) -> SheetTable:
        """
        Read every populated row of a sheet.

        Short rows are padded so each SheetRow carries every header column.
        """
        payload = self._request("GET", self._values_url(a1_range(title)))
        values: List[List[Any]] = payload.get("values", [])
        if not values:
            return SheetTable(title=title, header=[], rows=[])

        header = [str(h).strip() for h in values[0]]
        rows = []
        for offset, raw in enumerate(values[1:]):
            cells = [str(c) for c in raw] + [""] * (len(header) - len(raw))
            rows.append(SheetRow(row_number=offset + 2, values=dict(zip(header, cells))))
        logger.debug("Read %d rows from sheet '%s'", len(rows), title)
        return SheetTable(title=title, header=header, rows=rows)

    def append_row(self, table: SheetTable, values: Dict[str, Any]) -> None:
        """Append one row; `values` is keyed by header name, unknown keys are ignored."""
        if not table.header:
            raise SheetsClientError(f"Sheet '{table.title}' has no header row")
        row = [self._cell(values.get(column)) for column in table.header]
        self._request(
            "POST",
            self._values_url(a1_range(table.title, "A1")) + ":append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": [row]},
        )

    def update_row(self, table: SheetTable, row: SheetRow) -> None:
        """Overwrite one existing row with `row.values`."""
        last = column_letter(len(table.header))
        target = a1_range(table.title, f"A{row.row_number}:{last}{row.row_number}")
        self._request(
            "PUT",
            self._values_url(target),
            params={"valueInputOption": "RAW"},
            json={
                "range": target,
                "majorDimension": "ROWS",
                "values": [[self._cell(row.values.get(column)) for column in table.header]],
            },
        )

    # ------------------------------------------------------------------ #
    # Request helpers
    # ------------------------------------------------------------------ #

    def _spreadsheet_url(self) -> str:
        return f"{SHEETS_BASE_URL}/{self._config.spreadsheet_id}"

    def _values_url(self, target: str) -> str:
        return f"{self._spreadsheet_url()}/values/{quote(target, safe='')}"

    @staticmethod
    def _cell(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        return str(value)

    def _access_token(self) -> str:
        now = time.time()
        if self._token and now < self._token_expires_at - TOKEN_REFRESH_MARGIN_SECONDS:
            return self._token

        issued_at = int(now)
        assertion = jwt.encode(
            {
                "iss": self._config.client_email,
                "scope": SHEETS_SCOPE,
                "aud": TOKEN_URL,
                "iat": issued_at,
                "exp": issued_at + TOKEN_LIFETIME_SECONDS,
            },
            self._config.private_key,
            algorithm="RS256",
        )
        try:
            response = self._session.post(
                TOKEN_URL,
                data={"grant_type": JWT_GRANT_TYPE, "assertion": assertion},
                timeout=self._config.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise SheetsClientError(f"Token request failed: {exc}") from exc

        if response.status_code != 200:
            raise SheetsClientError(
                f"Token request rejected ({response.status_code}): {response.text[:200]}"
            )
        payload = response.json()
        self._token = payload["access_token"]
        self._token_expires_at = now + float(payload.get("expires_in", TOKEN_LIFETIME_SECONDS))
        logger.info("Obtained Google Sheets access token for %s", self._config.client_email)
        return self._token

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        logger.debug("Sheets API request: %s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                timeout=self._config.timeout_seconds,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise SheetsClientError(f"Sheets API request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise SheetsClientError(
                f"Sheets API error {response.status_code} for {method} {url}: {response.text[:200]}"
            )
        return response.json() if response.content else {}
