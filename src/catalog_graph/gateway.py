"""
Catalog query gateway.

The narrow interface discovery uses to run catalog SQL, plus a psycopg 3
implementation. The gateway owns the driver; discovery only borrows it for
the duration of a run.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionInfo:
    """Public view of the transaction a session is in."""
    status: str
    backend_pid: Optional[int] = None


class CatalogGateway(ABC):
    """Executes catalog queries and reports transaction state."""

    @abstractmethod
    def execute(self, sql: str) -> List[Dict[str, Any]]:
        """
        Run a SQL text and return its rows as name-keyed dicts.

        Row order must match the query's ORDER BY. Driver errors propagate
        unchanged.
        """

    @abstractmethod
    def is_in_transaction(self) -> bool:
        """Whether the session is inside an open transaction."""

    @abstractmethod
    def current_transaction(self) -> Optional[TransactionInfo]:
        """The open transaction, or None."""


class PsycopgGateway(CatalogGateway):
    """
    CatalogGateway backed by a psycopg 3 connection.

    Either opens its own connection from a connection string (and closes it
    on exit), or wraps a caller-owned connection that it never closes.
    """

    def __init__(self, connection_string: Optional[str] = None, connection: Optional[Any] = None):
        """
        Initialize gateway.

        Args:
            connection_string: libpq connection string or URI
            connection: Existing psycopg connection (borrowed, not closed)
        """
        if connection_string is None and connection is None:
            raise ValueError("Either connection_string or connection is required")

        self.connection_string = connection_string
        self._conn = connection
        self._owns_connection = connection is None

    @classmethod
    def from_connection(cls, connection: Any) -> PsycopgGateway:
        """Wrap an already-open psycopg connection."""
        return cls(connection=connection)

    def connect(self) -> None:
        """Establish database connection."""
        if self._conn is not None:
            return

        import psycopg

        self._conn = psycopg.connect(self.connection_string, autocommit=True)
        logger.info(f"Connected to PostgreSQL database {self._conn.info.dbname}")

    def disconnect(self) -> None:
        """Close the connection if this gateway opened it."""
        if self._owns_connection and self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    @property
    def connection(self) -> Any:
        if self._conn is None:
            self.connect()
        return self._conn

    def execute(self, sql: str) -> List[Dict[str, Any]]:
        from psycopg.rows import dict_row

        with self.connection.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql)
            return cursor.fetchall()

    def is_in_transaction(self) -> bool:
        from psycopg.pq import TransactionStatus

        status = self.connection.info.transaction_status
        return status in (TransactionStatus.INTRANS, TransactionStatus.INERROR)

    def current_transaction(self) -> Optional[TransactionInfo]:
        if not self.is_in_transaction():
            return None

        info = self.connection.info
        return TransactionInfo(status=info.transaction_status.name, backend_pid=info.backend_pid)
