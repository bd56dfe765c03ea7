"""
Picker Store Connection Pool

Thread-safe PostgreSQL connection pooling for the picker store, with a direct
connection fallback when the pool is exhausted and a simple health check.
"""

import threading
import time
import logging
from contextlib import contextmanager
from typing import Optional, Dict, Any

import psycopg2
from psycopg2 import pool

from utils.config import get_database_config

logger = logging.getLogger(__name__)

# Seconds to wait for the server when opening a connection
CONNECT_TIMEOUT = 10


class DatabasePool:
    """Thread-safe connection pool for the picker database."""

    def __init__(self, db_config: Optional[Dict[str, Any]] = None):
        """
        Initialize the database pool.

        Args:
            db_config: psycopg2 connection keywords; read from PICKERDB_* settings
                when omitted

        Raises:
            ValueError: If required connection settings are missing
        """
        self.pool: Optional[pool.AbstractConnectionPool] = None
        self.pool_lock = threading.Lock()
        self.stats = {
            "connections_created": 0,
            "connections_used": 0,
            "connections_returned": 0,
            "pool_exhausted": 0,
            "fallback_connections": 0,
            "errors": 0
        }

        config = dict(db_config) if db_config is not None else get_database_config()
        config.setdefault("connect_timeout", CONNECT_TIMEOUT)
        self.db_config = config

    def initialize_pool(self, min_connections: int = 1, max_connections: int = 5) -> bool:
        """
        Create the pool and verify it with a test query.

        Returns:
            bool: True if the pool is ready, False otherwise
        """
        try:
            with self.pool_lock:
                if self.pool is not None:
                    return True

                self.pool = psycopg2.pool.ThreadedConnectionPool(
                    min_connections,
                    max_connections,
                    **self.db_config
                )
                self.stats["connections_created"] = min_connections

            with self.get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("SELECT 1")
                    cursor.fetchone()

            logger.info(
                f"Initialized picker store pool on {self.db_config.get('host')} "
                f"with {min_connections}-{max_connections} connections"
            )
            return True

        except Exception as e:
            logger.error(f"Failed to initialize picker store pool: {e}", exc_info=True)
            self.stats["errors"] += 1
            return False

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection, falling back to a direct connection when the pool is
        exhausted or not initialized.

        Yields:
            psycopg2.connection: Database connection

        Example:
            >>> store_pool = DatabasePool()
            >>> with store_pool.get_connection() as conn:
            ...     cursor = conn.cursor()
            ...     cursor.execute("SELECT id FROM pickers LIMIT 1")
        """
        connection = None
        pooled = False
        start_time = time.time()

        try:
            if self.pool is not None:
                try:
                    connection = self.pool.getconn()
                    pooled = True
                    self.stats["connections_used"] += 1
                except pool.PoolError:
                    self.stats["pool_exhausted"] += 1
                    logger.warning("Picker store pool exhausted, using direct connection")

            if connection is None:
                self.stats["fallback_connections"] += 1
                connection = psycopg2.connect(**self.db_config)

            yield connection

        except Exception as e:
            self.stats["errors"] += 1
            elapsed = time.time() - start_time
            logger.error(f"Picker store connection error after {elapsed:.2f}s: {e}")
            raise

        finally:
            if connection is not None:
                try:
                    if pooled and self.pool is not None:
                        self.pool.putconn(connection)
                        self.stats["connections_returned"] += 1
                    else:
                        connection.close()
                except Exception as e:
                    logger.warning(f"Error releasing picker store connection: {e}")
                    self.stats["errors"] += 1

    def close_pool(self):
        """Close all connections in the pool."""
        with self.pool_lock:
            if self.pool is None:
                return
            try:
                self.pool.closeall()
                logger.info("Closed picker store connection pool")
            except Exception as e:
                logger.warning(f"Error closing picker store pool: {e}")
                self.stats["errors"] += 1
            finally:
                self.pool = None

    def get_stats(self) -> Dict[str, Any]:
        """Pool usage counters plus whether the pool is initialized."""
        stats = self.stats.copy()
        stats["pool_initialized"] = self.pool is not None
        if self.pool is not None:
            stats["pool_type"] = type(self.pool).__name__
        return stats

    def health_check(self) -> bool:
        """
        Run a trivial query.

        Returns:
            bool: True if the database answered, False otherwise
        """
        try:
            with self.get_connection() as conn:
                with conn.cursor() as cursor:
                    cursor.execute("SELECT 1")
                    return cursor.fetchone() is not None
        except Exception as e:
            logger.error(f"Picker store health check failed: {e}")
            return False


_picker_pool: Optional[DatabasePool] = None
_pool_lock = threading.Lock()


def get_pool() -> DatabasePool:
    """
    Get or create the shared picker store pool.

    Raises:
        ValueError: If PICKERDB_* settings are missing
    """
    global _picker_pool

    with _pool_lock:
        if _picker_pool is None:
            _picker_pool = DatabasePool()
            _picker_pool.initialize_pool()
        return _picker_pool


def close_pool():
    """Close the shared pool, if any."""
    global _picker_pool

    with _pool_lock:
        if _picker_pool is not None:
            _picker_pool.close_pool()
            _picker_pool = None


@contextmanager
def get_picker_connection():
    """
    Get a picker store connection from the shared pool.

    Yields:
        psycopg2.connection: Database connection
    """
    with get_pool().get_connection() as conn:
        yield conn
