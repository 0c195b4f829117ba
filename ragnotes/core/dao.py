"""
Note repository over the SQLite notes table.
Canonical store: note text lives here, the vector index only mirrors it by id.
"""

import sqlite3
from datetime import datetime
from typing import List, Optional

from .db import get_db, init_db
from .errors import StorageReadError, StorageWriteError
from .schema import Note
from ..util.logging import logger


def _row_to_note(row: sqlite3.Row) -> Note:
    created_at = row["created_at"]
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    return Note(id=row["id"], text=row["text"], created_at=created_at)


class NoteRepository:
    """Create, read and delete note rows."""

    def __init__(self, db_path: str = None):
        self.db_path = db_path
        init_db(db_path)

    def insert_note(self, text: str) -> Note:
        """Insert a note row and return it with its assigned id."""
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.execute(
                    "INSERT INTO notes (text) VALUES (?) RETURNING id, text, created_at",
                    (text,)
                )
                row = cursor.fetchone()
                conn.commit()
        except sqlite3.Error as e:
            logger.log_note_operation("insert", None, text, status="failed")
            raise StorageWriteError(f"Failed to create note: {e}") from e

        if row is None:
            raise StorageWriteError("Failed to create note: store returned no row")

        note = _row_to_note(row)
        logger.log_note_operation("insert", note.id, text)
        return note

    def get_note(self, note_id: int) -> Optional[Note]:
        """Get a note by id, or None when it does not exist."""
        try:
            with get_db(self.db_path) as conn:
                row = conn.execute(
                    "SELECT id, text, created_at FROM notes WHERE id = ?",
                    (note_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageReadError(f"Failed to read note {note_id}: {e}") from e

        return _row_to_note(row) if row else None

    def delete_note(self, note_id: int) -> bool:
        """Delete a note row. Returns False when there was nothing to delete."""
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
                conn.commit()
                deleted = cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.log_note_operation("delete", note_id, status="failed")
            raise StorageWriteError(f"Failed to delete note {note_id}: {e}") from e

        logger.log_note_operation("delete", note_id, status="success" if deleted else "noop")
        return deleted

    def list_notes(self) -> List[Note]:
        """List all notes in id order."""
        try:
            with get_db(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT id, text, created_at FROM notes ORDER BY id"
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageReadError(f"Failed to list notes: {e}") from e

        return [_row_to_note(row) for row in rows]

    def count_notes(self) -> int:
        """Get the number of stored notes."""
        try:
            with get_db(self.db_path) as conn:
                return conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageReadError(f"Failed to count notes: {e}") from e
