from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import DirectoryRepository


class MySQLDirectoryRepository(DirectoryRepository):
    """Read-only lookups; each call uses its own short-lived connection."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _exists(self, table: str, id_col: str, value: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT 1 AS found FROM {table} WHERE {id_col}=%s", (str(value),))
            return fetchone(cur) is not None

    def student_exists(self, student_id: str) -> bool:
        return self._exists("students", "student_id", student_id)

    def course_exists(self, course_id: str) -> bool:
        return self._exists("courses", "course_id", course_id)

    def get_actor_name(self, actor_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT full_name FROM actors WHERE actor_id=%s", (str(actor_id),))
            r = fetchone(cur)
            return r["full_name"] if r else None
