"""Spreadsheet store client package."""

from sheets_client.auth import StaticTokenProvider, TokenProvider
from sheets_client.base import Row, SheetsClient, WriteMode
from sheets_client.exceptions import (
    AuthenticationRequired,
    RateLimited,
    RemoteClientError,
    RemoteServerError,
    RowDecodeError,
    StoreError,
)
from sheets_client.ranges import RowRef, a1, column_letter, normalize_sheet_name

__all__ = [
    # Client
    "SheetsClient",
    "Row",
    "RowRef",
    "WriteMode",
    # Auth
    "TokenProvider",
    "StaticTokenProvider",
    # Ranges
    "a1",
    "column_letter",
    "normalize_sheet_name",
    # Errors
    "StoreError",
    "AuthenticationRequired",
    "RateLimited",
    "RemoteClientError",
    "RemoteServerError",
    "RowDecodeError",
]
