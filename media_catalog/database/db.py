"""
Catalog connection management.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import DatabaseError
from .schema import CURRENT_SCHEMA_VERSION, init_schema

# Seconds a batch waits for another writer (e.g. a second scan) before failing
BUSY_TIMEOUT = 5.0


def schema_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


class DBManager:
    """
    Owns the catalog connection for one CLI run.

    Batches are committed through `with conn:` in DBOperations, so the
    connection stays in the default deferred-transaction mode. WAL lets a
    report read the catalog while a scan is writing to it.
    """
    def __init__(self, db_path: Path, busy_timeout: float = BUSY_TIMEOUT):
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        if self._conn:
            return self._conn

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        logging.info(f"Opening catalog: {self.db_path}")
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        except sqlite3.Error as e:
            raise DatabaseError(f"Cannot open catalog {self.db_path}: {e}") from e

        try:
            self._prepare(conn)
        except sqlite3.Error as e:
            conn.close()
            raise DatabaseError(f"Cannot prepare catalog {self.db_path}: {e}") from e
        except DatabaseError:
            conn.close()
            raise

        self._conn = conn
        return conn

    def _prepare(self, conn: sqlite3.Connection):
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA temp_store=MEMORY;")

        init_schema(conn)

        version = schema_version(conn)
        if version > CURRENT_SCHEMA_VERSION:
            raise DatabaseError(
                f"Catalog {self.db_path} has schema version {version}; "
                f"this build understands up to {CURRENT_SCHEMA_VERSION}"
            )
        count = conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]
        logging.info(f"Catalog ready (schema v{version}, {count} records)")

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
