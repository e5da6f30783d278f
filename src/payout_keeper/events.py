from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WinnerPaid:
    timestamp: int
    recipient: str
    amount: int
    price: int


Listener = Callable[[WinnerPaid], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self.history: List[WinnerPaid] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def publish(self, event: WinnerPaid) -> None:
        self.history.append(event)
        log.info(
            "WinnerPaid: %d wei to %s at %d (price %d)",
            event.amount,
            event.recipient,
            event.timestamp,
            event.price,
        )
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                # The payout already happened; a listener cannot undo it.
                log.exception("WinnerPaid listener %r failed", listener)
