import os
import sqlite3
import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional, List, Dict, Any, Sequence

from ..exceptions import DatabaseError
from ..models import CatalogRecord, ExistingEntry, Operation, UpsertOp, DeleteOp

# Every column a scan writes; id and date_added are managed here.
RECORD_COLUMNS = list(CatalogRecord.__dataclass_fields__)


def _root_prefix(root: Path) -> str:
    root_str = str(root)
    return root_str if root_str.endswith(os.sep) else root_str + os.sep


class DBOperations:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # --- Queries ---

    def lookup_path(self, volume_name: str, path: Path) -> Optional[ExistingEntry]:
        """Point lookup by exact absolute path."""
        try:
            cur = self.conn.cursor()
            cur.execute(
                "SELECT id, size, date_modified FROM files WHERE volume_name = ? AND path = ?",
                (volume_name, str(path)),
            )
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Lookup of {path} failed: {e}") from e
        if row is None:
            return None
        return ExistingEntry(id=row[0], size=row[1], date_modified=row[2])

    def ids_under_root(self, volume_name: str, root: Path) -> List[int]:
        """
        Returns ids of every record at or below root, newest first.
        Children are normally inserted after their parents, so descending id
        order deletes children before parents.
        """
        prefix = _root_prefix(root)
        try:
            cur = self.conn.cursor()
            cur.execute("""
                SELECT id FROM files
                WHERE volume_name = ?
                  AND (path = ? OR substr(path, 1, ?) = ?)
                ORDER BY id DESC
            """, (volume_name, str(root), len(prefix), prefix))
            return [row[0] for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise DatabaseError(f"Range query under {root} failed: {e}") from e

    def fetch_records_under_root(self, root: Path) -> List[Dict[str, Any]]:
        """Returns catalog rows at or below root (any volume), ordered by path."""
        prefix = _root_prefix(root)
        cur = self.conn.cursor()
        cur.execute("""
            SELECT id, path, media_type, mime_type, size, date_modified, title
            FROM files
            WHERE path = ? OR substr(path, 1, ?) = ?
            ORDER BY path
        """, (str(root), len(prefix), prefix))
        return [
            {
                'id': r[0], 'path': r[1], 'media_type': r[2], 'mime_type': r[3],
                'size': r[4], 'date_modified': r[5], 'title': r[6],
            }
            for r in cur.fetchall()
        ]

    def count_by_media_type(self) -> Dict[int, int]:
        cur = self.conn.cursor()
        cur.execute("SELECT media_type, COUNT(*) FROM files GROUP BY media_type")
        return {media_type: count for media_type, count in cur.fetchall()}

    # --- Mutations ---

    def apply_batch(self, ops: Sequence[Operation]) -> List[Optional[int]]:
        """
        Applies all operations in a single transaction.

        Returns one entry per operation: the record id for upserts, None for
        deletes. Raises DatabaseError (after rolling back) if any operation fails.
        """
        now_iso = datetime.now(UTC).isoformat()
        results: List[Optional[int]] = []
        try:
            with self.conn:
                for op in ops:
                    if isinstance(op, UpsertOp):
                        results.append(self._upsert_record(op.record, now_iso))
                    elif isinstance(op, DeleteOp):
                        self.conn.execute("DELETE FROM files WHERE id = ?", (op.id,))
                        results.append(None)
                    else:
                        raise TypeError(f"Unknown catalog operation: {op!r}")
        except sqlite3.Error as e:
            raise DatabaseError(f"Batch of {len(ops)} operations failed: {e}") from e

        logging.debug(f"Applied batch of {len(ops)} operations.")
        return results

    def _upsert_record(self, rec: CatalogRecord, now_iso: str) -> int:
        """
        Inserts a record or replaces every scanned column of the existing row
        with the same path. The row keeps its id and date_added.
        """
        row = rec.to_row()
        cols = ", ".join(RECORD_COLUMNS)
        placeholders = ", ".join("?" for _ in RECORD_COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in RECORD_COLUMNS if c != 'path')

        self.conn.execute(f"""
            INSERT INTO files ({cols}, date_added)
            VALUES ({placeholders}, ?)
            ON CONFLICT(path) DO UPDATE SET {updates}
        """, [row[c] for c in RECORD_COLUMNS] + [now_iso])

        cur = self.conn.execute("SELECT id FROM files WHERE path = ?", (rec.path,))
        found = cur.fetchone()
        if found is None:
            raise RuntimeError("Database upsert failed to produce a row.")
        return int(found[0])
