"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interview_sessions (
  id TEXT PRIMARY KEY,
  visa_type TEXT NOT NULL,
  destination_country TEXT NOT NULL,
  language TEXT NOT NULL DEFAULT 'en',
  start_time TEXT NOT NULL,
  end_time TEXT,
  total_questions INTEGER NOT NULL,
  questions_asked TEXT NOT NULL,
  overall_score INTEGER NOT NULL,
  passed INTEGER NOT NULL,
  holistic_score INTEGER,
  feedback TEXT,
  improvements TEXT NOT NULL,
  strengths TEXT NOT NULL,
  concerns TEXT NOT NULL,
  ai_powered INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interview_sessions_start
  ON interview_sessions (start_time DESC);
""",
]


def migrate(db_path: str = "data/interview.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
