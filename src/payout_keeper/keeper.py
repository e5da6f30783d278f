from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .contract import PayoutAutomation
from .errors import NoFunds, PayoutError
from .events import WinnerPaid

log = logging.getLogger(__name__)


class Keeper:
    """
    External polling agent: asks is_due() and, when due, triggers run_upkeep().

    Failures are logged and left for the next cycle; there is no in-cycle retry.
    """

    def __init__(
        self,
        contract: PayoutAutomation,
        identity: str,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.contract = contract
        self.identity = identity
        self.clock = clock
        self.sleep = sleep

    def poll_once(self) -> Optional[WinnerPaid]:
        now = int(self.clock())
        try:
            due = self.contract.is_due(now)
        except NoFunds:
            log.warning("Contract has no funds; nothing to pay")
            return None

        if not due:
            log.debug("Not due at %d", now)
            return None

        try:
            event = self.contract.run_upkeep(self.identity, now)
        except PayoutError as e:
            log.error("Upkeep failed (%s): %s", e.kind, e)
            return None

        if event is None:
            log.info("Upkeep ran at %d but the trigger interval has not elapsed", now)
        return event

    def run(self, poll_interval_s: float, max_cycles: Optional[int] = None) -> int:
        """Poll until max_cycles (forever when None). Returns the number of payouts."""
        paid = 0
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            if self.poll_once() is not None:
                paid += 1
            cycles += 1
            if max_cycles is None or cycles < max_cycles:
                self.sleep(poll_interval_s)
        return paid
