from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, Tuple

from ...core.enums import ScanMethod
from ...core.exceptions import Incomplete
from .base import ClaimChannel
from .manual_channel import ManualChannel
from .qr_channel import QrPayloadChannel


def _default_routes() -> Sequence[Tuple[Callable[[Mapping[str, Any]], bool], ClaimChannel]]:
    qr = QrPayloadChannel()
    manual = ManualChannel()
    return (
        (lambda s: "qrData" in s, qr),
        (lambda s: bool(s.get("phoneNumber") or s.get("userId")), manual),
    )


@dataclass
class ChannelFactory:
    """Factory Pattern: pick the channel from the shape of the submission."""

    routes: Sequence[Tuple[Callable[[Mapping[str, Any]], bool], ClaimChannel]] = field(default_factory=_default_routes)

    def for_submission(self, submission: Mapping[str, Any]) -> ClaimChannel:
        for matches, channel in self.routes:
            if matches(submission):
                return channel
        raise Incomplete("Phone number or user ID is required")

    def for_method(self, method: ScanMethod) -> ClaimChannel:
        for _, channel in self.routes:
            if channel.scan_method == method:
                return channel
        raise LookupError(f"no channel for {method.value}")
