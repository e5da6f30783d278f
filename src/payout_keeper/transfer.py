from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, Optional, Set

from .errors import TransferFailed

log = logging.getLogger(__name__)


class LocalTransfer:
    """
    Native-asset send primitive.

    A send fails when the sender cannot cover it or the recipient refuses
    incoming value; on failure nothing is credited.
    """

    def __init__(self, rejecting: Optional[Iterable[str]] = None) -> None:
        self.rejecting: Set[str] = set(rejecting or ())
        self.credits: Dict[str, int] = defaultdict(int)

    def reject(self, recipient: str) -> None:
        self.rejecting.add(recipient)

    def accept(self, recipient: str) -> None:
        self.rejecting.discard(recipient)

    def send(self, recipient: str, amount: int, available: int) -> None:
        if amount > available:
            raise TransferFailed(
                recipient, amount, f"insufficient balance ({available} available)"
            )
        if recipient in self.rejecting:
            raise TransferFailed(recipient, amount, "recipient rejected the transfer")
        self.credits[recipient] += amount
        log.debug("Sent %d to %s", amount, recipient)

    def credited(self, recipient: str) -> int:
        return self.credits.get(recipient, 0)
