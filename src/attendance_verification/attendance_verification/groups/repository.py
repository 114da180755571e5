from __future__ import annotations

from typing import Optional, Protocol

from .model import Group


class GroupRegistry(Protocol):
    """Read-only lookup of student groups and their member user ids."""

    def get_by_id(self, group_id: str) -> Optional[Group]:
        raise NotImplementedError
