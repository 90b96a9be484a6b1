"""
sqlite plumbing for the key/value store: connections and schema versioning.
"""

import sqlite3
from pathlib import Path

from loco.utils.log import get_logger

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
# bump together with schema.sql; stored in PRAGMA user_version
SCHEMA_VERSION = 1


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a connection whose rows come back as sqlite3.Row.

    Sensor callbacks may save from their own threads, so the connection is
    not pinned to its creating thread; the tracker's lock serializes access.
    `timeout` is how long a write waits for another process holding the DB.
    """
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def init_db(db_path: str) -> sqlite3.Connection:
    """
    Connect, create the key/value table if missing and stamp the schema version.

    Raises
    ------
    sqlite3.DatabaseError
        If the file was written by a newer schema than this code knows.
    """
    conn = get_connection(db_path)
    found = schema_version(conn)
    if found > SCHEMA_VERSION:
        conn.close()
        raise sqlite3.DatabaseError(
            f"{db_path} has schema version {found}, newer than supported {SCHEMA_VERSION}"
        )
    logger.debug("Applying %s to %s (version %d -> %d)", SCHEMA_PATH.name, db_path, found, SCHEMA_VERSION)
    conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    conn.commit()
    return conn
