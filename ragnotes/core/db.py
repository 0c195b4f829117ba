"""
SQLite connection management and schema for the notes table.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from .config import ensure_db_directory, get_db_path


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path or get_db_path())
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    db_path = db_path or get_db_path()
    ensure_db_directory(db_path)

    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # AUTOINCREMENT keeps ids from being reused after a delete
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS notes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                text TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        conn.commit()


def health_check(db_path: str = None) -> bool:
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row[0] for row in cursor.fetchall()]
            return 'notes' in tables
    except sqlite3.Error:
        return False
