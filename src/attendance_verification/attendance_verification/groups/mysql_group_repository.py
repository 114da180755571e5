from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Group
from .repository import GroupRegistry


class MySQLGroupRegistry(GroupRegistry):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: str) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id, name FROM student_groups WHERE group_id=%s", (group_id,))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute(
                "SELECT user_id FROM student_group_members WHERE group_id=%s ORDER BY user_id",
                (group_id,),
            )
            members = tuple(str(r["user_id"]) for r in fetchall(cur))
            return Group(group_id=str(row["group_id"]), name=row["name"], member_ids=members)
