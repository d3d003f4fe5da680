"""SQLite connection helper shared by the repository and the admin CLI."""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from config.settings import settings


@contextmanager
def get_conn(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection to ``db_path`` (default ``settings.DB_PATH``), committing on success."""

    path = db_path or settings.DB_PATH
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(path, timeout=5.0)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
