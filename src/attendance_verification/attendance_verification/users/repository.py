from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserDirectory(Protocol):
    """Read-only lookup interface onto user-account storage.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_phone(self, phone_number: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_student_id(self, student_id: str) -> Optional[User]:
        raise NotImplementedError
