from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a user as seen by the attendance subsystem.

    Plain data object, read from the user directory; this package never writes
    user rows.
    """

    user_id: str
    full_name: str
    phone_number: Optional[str]
    email: Optional[str]
    role: Role
    student_id: Optional[str] = None
    is_active: bool = True
