from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from ..core.enums import MatchedBy
from ..core.exceptions import NotFound
from ..users.model import User
from ..users.repository import UserDirectory
from .claim import Claim, ResolvedIdentity

logger = logging.getLogger(__name__)

Lookup = Tuple[
    Callable[[Claim], bool],
    MatchedBy,
    Callable[[UserDirectory, Claim], Optional[User]],
]

# Precedence: direct id, id retried as a student number, then phone.
LOOKUPS: Sequence[Lookup] = (
    (lambda c: bool(c.user_id), MatchedBy.ID, lambda d, c: d.get_by_id(c.user_id)),
    (lambda c: bool(c.user_id), MatchedBy.STUDENT_ID, lambda d, c: d.get_by_student_id(c.user_id)),
    (lambda c: bool(c.phone_number), MatchedBy.PHONE, lambda d, c: d.get_by_phone(c.phone_number)),
)


class IdentityResolver:
    """Find the one canonical user a claim refers to.

    No cross-field validation happens here; the first lookup that hits an
    active user wins, a miss on all of them is ``NotFound``.
    """

    def __init__(self, users: UserDirectory, *, lookups: Sequence[Lookup] = LOOKUPS):
        self._users = users
        self._lookups = lookups

    def try_resolve(self, claim: Claim) -> Optional[ResolvedIdentity]:
        for applies, matched_by, lookup in self._lookups:
            if not applies(claim):
                continue
            user = lookup(self._users, claim)
            if user and user.is_active:
                return ResolvedIdentity(user=user, matched_by=matched_by)
        return None

    def resolve(self, claim: Claim) -> ResolvedIdentity:
        resolved = self.try_resolve(claim)
        if resolved is None:
            logger.info("No user for claim (provenance=%s)", claim.provenance.value)
            raise NotFound()
        return resolved
