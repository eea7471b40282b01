import sqlite3
import pytest
from pathlib import Path

from media_catalog.database.db import DBManager, schema_version
from media_catalog.database.ops import DBOperations
from media_catalog.database.schema import CURRENT_SCHEMA_VERSION
from media_catalog.exceptions import DatabaseError
from media_catalog.models import CatalogRecord, UpsertOp, DeleteOp


def _record(path, size=100, mtime=1_600_000_000, **kwargs):
    return CatalogRecord(
        path=str(path),
        volume_name="/",
        size=size,
        date_modified=mtime,
        title=Path(path).stem,
        **kwargs,
    )


def test_upsert_keeps_id_and_replaces_columns(db_ops):
    """Re-scanning a path updates the row in place rather than duplicating it."""
    first = db_ops.apply_batch([UpsertOp(_record("/music/a.mp3", artist="Old"))])
    second = db_ops.apply_batch([UpsertOp(_record("/music/a.mp3", size=200, genre="Jazz"))])

    assert first == second

    cur = db_ops.conn.cursor()
    cur.execute("SELECT COUNT(*), size, artist, genre FROM files")
    count, size, artist, genre = cur.fetchone()
    assert count == 1
    assert size == 200
    assert artist is None, "columns missing from the new record must be cleared"
    assert genre == "Jazz"


def test_lookup_path(db_ops):
    [rid] = db_ops.apply_batch([UpsertOp(_record("/music/a.mp3", size=42, mtime=7))])

    entry = db_ops.lookup_path("/", Path("/music/a.mp3"))
    assert entry.id == rid
    assert entry.size == 42
    assert entry.date_modified == 7

    assert db_ops.lookup_path("/", Path("/music/b.mp3")) is None
    assert db_ops.lookup_path("/mnt/usb", Path("/music/a.mp3")) is None


def test_ids_under_root_respects_path_segments(db_ops):
    ids = db_ops.apply_batch([
        UpsertOp(_record("/data/music")),
        UpsertOp(_record("/data/music/a.mp3")),
        UpsertOp(_record("/data/music/sub/b.mp3")),
        UpsertOp(_record("/data/music2/c.mp3")),
        UpsertOp(_record("/data/MUSIC/d.mp3")),
    ])

    under = db_ops.ids_under_root("/", Path("/data/music"))

    assert under == sorted(ids[:3], reverse=True)


def test_apply_batch_deletes(db_ops):
    [rid] = db_ops.apply_batch([UpsertOp(_record("/x/a.jpg"))])
    results = db_ops.apply_batch([DeleteOp(rid)])

    assert results == [None]
    assert db_ops.lookup_path("/", Path("/x/a.jpg")) is None


def test_failed_batch_rolls_back(db_ops):
    bad = _record("/x/bad.jpg")
    bad.path = None  # violates NOT NULL

    with pytest.raises(DatabaseError):
        db_ops.apply_batch([UpsertOp(_record("/x/good.jpg")), UpsertOp(bad)])

    assert db_ops.lookup_path("/", Path("/x/good.jpg")) is None


def test_count_by_media_type(db_ops):
    db_ops.apply_batch([
        UpsertOp(_record("/x", media_type=0)),
        UpsertOp(_record("/x/a.jpg", media_type=1)),
        UpsertOp(_record("/x/b.jpg", media_type=1)),
    ])
    assert db_ops.count_by_media_type() == {0: 1, 1: 2}


def test_queries_on_closed_connection_raise_database_error(conn, db_ops):
    conn.close()

    with pytest.raises(DatabaseError):
        db_ops.lookup_path("/", Path("/x/a.jpg"))
    with pytest.raises(DatabaseError):
        db_ops.ids_under_root("/", Path("/x"))


# --- Connection ---

def test_db_manager_prepares_catalog(tmp_path):
    db = tmp_path / "catalogs" / "media.db"

    with DBManager(db, busy_timeout=2.5) as conn:
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 2500
        assert schema_version(conn) == CURRENT_SCHEMA_VERSION
        assert conn.execute("SELECT COUNT(*) FROM files").fetchone()[0] == 0

    assert db.exists()


def test_db_manager_reuses_and_reopens(tmp_path):
    manager = DBManager(tmp_path / "media.db")
    first = manager.connect()
    assert manager.connect() is first

    DBOperations(first).apply_batch([UpsertOp(_record("/x/a.jpg"))])
    manager.close()

    with manager as conn:
        assert conn is not first
        assert conn.execute("SELECT COUNT(*) FROM files").fetchone()[0] == 1
        assert schema_version(conn) == CURRENT_SCHEMA_VERSION


def test_db_manager_rejects_newer_schema(tmp_path):
    db = tmp_path / "media.db"
    c = sqlite3.connect(db)
    with c:
        c.execute("CREATE TABLE schema_version (version INTEGER PRIMARY KEY)")
        c.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION + 1,))
    c.close()

    manager = DBManager(db)
    with pytest.raises(DatabaseError, match="schema version"):
        manager.connect()
    assert manager._conn is None
