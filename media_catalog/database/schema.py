"""
Database schema definitions.
"""
import sqlite3
import logging

CURRENT_SCHEMA_VERSION = 1

def init_schema(conn: sqlite3.Connection):
    """
    Applies the catalog schema to the database.
    Idempotent: safe to run on every startup.
    """
    with conn:
        # 1. Version Tracking (For future migrations)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            );
        """)

        cur = conn.cursor()
        cur.execute("SELECT version FROM schema_version")
        if not cur.fetchone():
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (CURRENT_SCHEMA_VERSION,))

        # 2. Catalog Table
        # One row per known file or directory, keyed by absolute path
        conn.execute("""
        CREATE TABLE IF NOT EXISTS files (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            volume_name     TEXT NOT NULL,
            path            TEXT NOT NULL UNIQUE,
            size            INTEGER,
            date_modified   INTEGER,              -- Seconds since epoch
            mime_type       TEXT,
            media_type      INTEGER NOT NULL DEFAULT 0,
            title           TEXT,
            is_drm          INTEGER NOT NULL DEFAULT 0,
            width           INTEGER,
            height          INTEGER,

            duration        INTEGER,              -- Milliseconds
            artist          TEXT,
            album_artist    TEXT,
            compilation     TEXT,
            composer        TEXT,
            album           TEXT,
            track           TEXT,
            year            TEXT,
            genre           TEXT,

            is_ringtone     INTEGER,
            is_notification INTEGER,
            is_alarm        INTEGER,
            is_podcast      INTEGER,
            is_audiobook    INTEGER,
            is_music        INTEGER,

            resolution      TEXT,
            description     TEXT,
            date_taken      INTEGER,              -- Milliseconds since epoch
            color_standard  TEXT,
            color_transfer  TEXT,
            color_range     TEXT,
            orientation     INTEGER,

            date_added      TEXT NOT NULL
        );
        """)

        # 3. Indices for Performance
        conn.execute("CREATE INDEX IF NOT EXISTS idx_files_volume_path ON files(volume_name, path);")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_files_media_type ON files(media_type);")

    logging.debug("Database schema initialized.")
