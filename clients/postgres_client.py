"""
PostgreSQL client with connection pooling and explicit transactions.

Uses psycopg2 with ThreadedConnectionPool. Single statements run through
execute()/execute_single()/execute_scalar() and commit immediately.
Multi-statement units run inside transaction(), which commits on a clean
exit and rolls back on any exception.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Tuple

import psycopg2
import psycopg2.extras
import psycopg2.pool

logger = logging.getLogger(__name__)


class Transaction:
    """
    Query methods bound to a single open connection.

    Obtained from PostgresClient.transaction(); never commits on its own.
    """

    def __init__(self, conn):
        self._conn = conn

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        with self._conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(query, params)
            if cur.description:
                return [dict(row) for row in cur.fetchall()]
            return []

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_scalar(self, query: str, params: Tuple | Dict | None = None) -> Any:
        """Execute query, return first value of first row or None."""
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            result = cur.fetchone()
            return result[0] if result else None


class PostgresClient:
    """
    PostgreSQL client with a shared connection pool per database URL.

    Usage:
        db = PostgresClient(database_url)

        rows = db.execute("SELECT * FROM customers")

        with db.transaction() as tx:
            customer_id = tx.execute_scalar("INSERT ... RETURNING id", (...))
            tx.execute("INSERT INTO addresses ...", (customer_id, ...))
    """

    # Class-level connection pools shared across instances
    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str, min_connections: int = 1, max_connections: int = 10):
        self._database_url = database_url
        self._min_connections = min_connections
        self._max_connections = max_connections
        self._ensure_connection_pool()

    def _ensure_connection_pool(self) -> None:
        """Create connection pool if it doesn't exist."""
        with self._pools_lock:
            if self._database_url not in self._connection_pools:
                pool = psycopg2.pool.ThreadedConnectionPool(
                    minconn=self._min_connections,
                    maxconn=self._max_connections,
                    dsn=self._database_url,
                    connect_timeout=30,
                )
                self._connection_pools[self._database_url] = pool
                logger.info("Connection pool created")

    @contextmanager
    def get_connection(self):
        """Borrow a pooled connection, returning it to the pool afterwards."""
        if self._database_url not in self._connection_pools:
            self._ensure_connection_pool()

        pool = self._connection_pools[self._database_url]
        conn = None

        try:
            conn = pool.getconn()
            if conn is None:
                raise RuntimeError("Could not get connection from pool")
            yield conn

        finally:
            if conn:
                pool.putconn(conn)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run several statements as one atomic unit.

        Commits when the block exits normally. Any exception raised inside
        the block rolls the whole unit back and propagates unchanged.
        """
        with self.get_connection() as conn:
            try:
                yield Transaction(conn)
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        with self.transaction() as tx:
            return tx.execute(query, params)

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_scalar(self, query: str, params: Tuple | Dict | None = None) -> Any:
        """Execute query, return first value of first row or None."""
        with self.transaction() as tx:
            return tx.execute_scalar(query, params)

    def close(self) -> None:
        """Close connection pool."""
        with self._pools_lock:
            if self._database_url in self._connection_pools:
                self._connection_pools[self._database_url].closeall()
                del self._connection_pools[self._database_url]
