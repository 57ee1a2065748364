"""
SQLite storage for lexi topics and translations.

Schema
──────
table: topics
  id          INTEGER PRIMARY KEY AUTOINCREMENT
  title       TEXT NOT NULL DEFAULT ''
  description TEXT NOT NULL DEFAULT ''
  identifier  TEXT NOT NULL UNIQUE

table: translations
  topic_id     INTEGER NOT NULL
  lang_id      INTEGER NOT NULL
  translations TEXT            (key → value mapping serialised as JSON, NULL if empty)
  PRIMARY KEY (topic_id, lang_id)
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "lexi.db"

TOPICS_TABLE = "topics"
TRANSLATIONS_TABLE = "translations"


def db_path() -> Path:
    """Return the database file path, honouring a LEXI_DB_PATH env var if set."""
    env = os.getenv("LEXI_DB_PATH")
    return Path(env) if env else DEFAULT_DB_PATH


@contextmanager
def connect():
    """Yield a connected sqlite3.Connection, creating the file/dir if needed.

    Commits when the block exits normally, rolls back and re-raises otherwise.
    """
    path = db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Create the topics and translations tables if they don't exist yet."""
    with connect() as conn:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TOPICS_TABLE} (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                title       TEXT NOT NULL DEFAULT '',
                description TEXT NOT NULL DEFAULT '',
                identifier  TEXT NOT NULL UNIQUE
            )
            """
        )
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TRANSLATIONS_TABLE} (
                topic_id     INTEGER NOT NULL,
                lang_id      INTEGER NOT NULL,
                translations TEXT,
                PRIMARY KEY (topic_id, lang_id)
            )
            """
        )
    logger.info("Lexi DB initialised at %s", db_path())
