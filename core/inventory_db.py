"""Single, non-poolable connection to the inventory (SQL Server) database.

Every listing request goes through one ``ExclusiveSession``; requests are
therefore serialized process-wide while they hold it. This is the main
throughput limit of the service.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Any, Optional, Protocol, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from core.errors import LockTimeout

logger = logging.getLogger(__name__)


class InventorySource(Protocol):
    def run_parameterized_query(self, sql: str, params: Sequence[Any]) -> Sequence[Sequence[Any]]:
        ...


class SqlInventorySource:
    """Runs ``:p1, :p2, ...`` parameterized SQL on one long-lived connection."""

    def __init__(self, url: str, query_timeout: Optional[int] = None):
        self.url = url
        self.query_timeout = query_timeout
        self._engine = None
        self._conn = None

    def _connect_args(self) -> dict:
        if self.query_timeout and self.url.startswith("mssql+pymssql"):
            return {"timeout": self.query_timeout, "login_timeout": self.query_timeout}
        return {}

    def _connection(self):
        if self._conn is None:
            if self._engine is None:
                self._engine = create_engine(self.url, poolclass=NullPool, connect_args=self._connect_args())
            self._conn = self._engine.connect()
            logger.info("opened inventory database connection")
        return self._conn

    def _discard(self):
        conn, self._conn = self._conn, None
        if conn is not None:
            try:
                conn.invalidate()
            except SQLAlchemyError as e:
                logger.debug("ignoring error while invalidating inventory connection: %s", e)

    def run_parameterized_query(self, sql: str, params: Sequence[Any]):
        binds = {f"p{i}": v for i, v in enumerate(params, start=1)}
        try:
            conn = self._connection()
            rows = conn.execute(text(sql), binds).fetchall()
            conn.rollback()
            return rows
        except SQLAlchemyError:
            # the next request starts over on a fresh connection
            self._discard()
            raise

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


class ExclusiveSession:
    """Mutual-exclusion wrapper that hands out the source to one caller at a time."""

    def __init__(self, source: InventorySource, lock_timeout: float = 10.0):
        self._source = source
        self._lock = threading.Lock()
        self.lock_timeout = lock_timeout

    @contextmanager
    def acquire(self):
        if not self._lock.acquire(timeout=self.lock_timeout):
            logger.warning("inventory session still busy after %.1fs", self.lock_timeout)
            raise LockTimeout()
        try:
            yield self._source
        finally:
            self._lock.release()

    def close(self):
        close = getattr(self._source, "close", None)
        if close is not None:
            close()
