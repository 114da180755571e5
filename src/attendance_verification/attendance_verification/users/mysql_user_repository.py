from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserDirectory

_USER_COLUMNS = "user_id, full_name, phone_number, email, role, student_id, is_active"


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=str(row["user_id"]),
        full_name=row["full_name"],
        phone_number=row.get("phone_number"),
        email=row.get("email"),
        role=Role(row["role"]),
        student_id=row.get("student_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE {column}=%s LIMIT 1",
                (value,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_one("user_id", user_id)

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        return self._get_one("phone_number", phone_number)

    def get_by_student_id(self, student_id: str) -> Optional[User]:
        return self._get_one("student_id", student_id)
