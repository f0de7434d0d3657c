"""
SQLite file backing the World State.

One table holds every key/value pair. Keys sort in binary order so range
scans come back in the same order as the in-memory World State.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path


WORLD_STATE_TABLE = "world_state"

WORLD_STATE_DDL = f"""
CREATE TABLE IF NOT EXISTS {WORLD_STATE_TABLE} (
  key TEXT NOT NULL PRIMARY KEY COLLATE BINARY,
  value BLOB NOT NULL CHECK (length(value) > 0)
) WITHOUT ROWID;
"""


def initialize_database(db_path: str | Path) -> Path:
    """Create the ledger file and its World State table if missing.

    Safe to call on an existing ledger; stored entries are left untouched.
    Returns the resolved path of the ledger file.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(path))
    try:
        _ = connection.executescript(WORLD_STATE_DDL)
        connection.commit()
    finally:
        connection.close()
    return path.resolve()


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a connection to an initialized ledger file.

    Rows come back as ``sqlite3.Row`` so columns can be read by name.
    """
    connection = sqlite3.connect(str(db_path))
    connection.row_factory = sqlite3.Row
    return connection
