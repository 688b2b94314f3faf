"""sheetsync - Local mirror and batched mutations for Google Sheets.

A spreadsheet is fetched into an in-memory mirror, changed locally, and
pushed back as batched requests whose field masks name only the fields that
actually changed. After each structural change the mirror is reloaded from
the server.
"""

__version__ = "0.1.0"

from sheetsync.batch import BatchUpdate, ValueRange, ValuesBatchUpdate
from sheetsync.client import SheetsClient
from sheetsync.config import Settings
from sheetsync.envelope import decode_response
from sheetsync.exceptions import (
    AuthenticationError,
    DecodeError,
    EmptyBatchError,
    InvalidArgumentError,
    NotFoundError,
    RemoteAPIError,
    SheetSyncError,
    TransportError,
)
from sheetsync.models import (
    Cell,
    Color,
    GridProperties,
    Sheet,
    SheetProperties,
    Spreadsheet,
    SpreadsheetProperties,
)
from sheetsync.operations import Dimension
from sheetsync.sync import Synchronizer
from sheetsync.transport import (
    GoogleSheetsTransport,
    LocalFileTransport,
    Transport,
)

__all__ = [
    "AuthenticationError",
    "BatchUpdate",
    "Cell",
    "Color",
    "DecodeError",
    "Dimension",
    "EmptyBatchError",
    "GoogleSheetsTransport",
    "GridProperties",
    "InvalidArgumentError",
    "LocalFileTransport",
    "NotFoundError",
    "RemoteAPIError",
    "Settings",
    "Sheet",
    "SheetProperties",
    "SheetSyncError",
    "SheetsClient",
    "Spreadsheet",
    "SpreadsheetProperties",
    "Synchronizer",
    "Transport",
    "TransportError",
    "ValueRange",
    "ValuesBatchUpdate",
    "__version__",
    "decode_response",
]
