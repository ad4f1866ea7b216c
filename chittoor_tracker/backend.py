"""
Interfaces for the external collaborators of the tracker.

The table engine, object storage, authentication provider and remote
location table are owned by other systems. This module describes the calls
the tracker makes on them; concrete clients are injected by the caller.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import pandas as pd


Row = Dict[str, Any]


class TableClient(Protocol):
    """Row-oriented access to a backend table."""

    def select(self, table: str, filters: Optional[Dict[str, Any]] = None,
               order_by: Optional[str] = None, descending: bool = False) -> List[Row]:
        ...

    def insert(self, table: str, row: Row) -> Row:
        ...

    def update(self, table: str, record_id: str, changes: Row) -> Row:
        ...

    def delete(self, table: str, record_id: str) -> None:
        ...


class StorageClient(Protocol):
    """Object storage used for project images."""

    def upload(self, bucket: str, path: str, data: bytes, upsert: bool = False) -> None:
        ...

    def public_url(self, bucket: str, path: str) -> Optional[str]:
        ...


class RemoteTableSource(Protocol):
    """Asynchronous read of a remote table (used for the location override)."""

    async def select(self, table: str, columns: Iterable[str]) -> List[Row]:
        ...


@dataclass
class AuthUser:
    """Signed-in user as reported by the auth provider."""

    id: str
    email: Optional[str] = None


class AuthProvider(Protocol):
    """Authentication provider."""

    def get_session_user(self) -> Optional[AuthUser]:
        ...

    def sign_in(self, email: str, password: str) -> AuthUser:
        ...

    def sign_out(self) -> None:
        ...

    def on_auth_state_change(self, callback: Callable[[Optional[AuthUser]], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        ...


class CsvTableSource:
    """
    RemoteTableSource backed by a CSV export of the remote table.

    Lets the location override be exercised offline from a file produced by
    the backend's table export.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    async def select(self, table: str, columns: Iterable[str]) -> List[Row]:
        columns = list(columns)
        return await asyncio.to_thread(self._read, columns)

    def _read(self, columns: List[str]) -> List[Row]:
        df = pd.read_csv(self.file_path, dtype=str, keep_default_na=False)
        df.columns = [str(col).strip().lower() for col in df.columns]
        missing = [col for col in columns if col not in df.columns]
        if missing:
            raise KeyError(f"Columns missing from {self.file_path}: {missing}")
        return df[columns].to_dict(orient='records')
