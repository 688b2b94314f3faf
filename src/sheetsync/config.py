"""Settings for talking to the Sheets API.

Scopes, endpoints and the fetch projection are plain values handed to the
transport and client at construction time. They can be overridden through
keyword arguments or environment variables:

- ``SHEETSYNC_API_BASE``: API root (default ``https://sheets.googleapis.com/v4``)
- ``SHEETSYNC_TIMEOUT``: request timeout in seconds
- ``SHEETSYNC_SCOPES``: comma-separated OAuth scopes
- ``SHEETSYNC_VALUE_INPUT_OPTION``: ``USER_ENTERED`` or ``RAW``
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

API_BASE = "https://sheets.googleapis.com/v4"
DEFAULT_TIMEOUT = 60.0

# See, edit, create, and delete your spreadsheets in Google Drive
SPREADSHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
# View your Google Spreadsheets
SPREADSHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
# See, edit, create, and delete all of your Google Drive files
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"
# View and manage Google Drive files and folders opened or created with this app
DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
# See and download all your Google Drive files
DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"

# Minimal projection used when (re)fetching a spreadsheet
FETCH_FIELDS = (
    "spreadsheetId,"
    "properties(title,locale,autoRecalc,timeZone),"
    "sheets(properties,data.rowData.values(userEnteredValue))"
)

VALUE_INPUT_OPTIONS = ("USER_ENTERED", "RAW")


@dataclass(frozen=True)
class Settings:
    """Connection and request settings.

    Attributes:
        api_base: Root URL of the Sheets API, without trailing slash
        timeout: HTTP timeout in seconds
        scopes: OAuth scopes the access token is expected to carry. Tokens
            are obtained elsewhere; the transport only reports these.
        fetch_fields: Field projection used by the synchronizer
        value_input_option: How the values endpoint interprets input
    """

    api_base: str = API_BASE
    timeout: float = DEFAULT_TIMEOUT
    scopes: tuple[str, ...] = (SPREADSHEETS_SCOPE,)
    fetch_fields: str = FETCH_FIELDS
    value_input_option: str = "USER_ENTERED"

    def __post_init__(self) -> None:
        if self.value_input_option not in VALUE_INPUT_OPTIONS:
            raise ValueError(
                f"value_input_option must be one of {VALUE_INPUT_OPTIONS}, "
                f"got {self.value_input_option!r}"
            )
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from ``SHEETSYNC_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        values: dict[str, Any] = {}

        api_base = os.environ.get("SHEETSYNC_API_BASE")
        if api_base:
            values["api_base"] = api_base.rstrip("/")

        timeout = os.environ.get("SHEETSYNC_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)

        scopes = os.environ.get("SHEETSYNC_SCOPES")
        if scopes:
            values["scopes"] = tuple(s.strip() for s in scopes.split(",") if s.strip())

        value_input_option = os.environ.get("SHEETSYNC_VALUE_INPUT_OPTION")
        if value_input_option:
            values["value_input_option"] = value_input_option.upper()

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
