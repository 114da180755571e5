from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Group:
    """A student group as seen by attendance queries: a name and its members."""

    group_id: str
    name: str
    member_ids: Tuple[str, ...] = field(default_factory=tuple)
