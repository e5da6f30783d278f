from __future__ import annotations

import logging
from typing import Optional

from .access import require_authorized_trigger
from .errors import NoFunds, TransferFailed
from .events import WinnerPaid
from .payout import PayoutExecutor
from .pause import require_not_paused
from .project_constants import CHECK_INTERVAL_S, TRIGGER_INTERVAL_S
from .state import PayoutState

log = logging.getLogger(__name__)


class UpkeepScheduler:
    """
    Two-speed schedule.

    is_due() answers "is it worth polling" against check_interval_s, while
    run_upkeep() pays only once trigger_interval_s has elapsed. The two
    intervals are deliberately independent.
    """

    def __init__(
        self,
        oracle,
        executor: PayoutExecutor,
        check_interval_s: int = CHECK_INTERVAL_S,
        trigger_interval_s: int = TRIGGER_INTERVAL_S,
    ) -> None:
        self.oracle = oracle
        self.executor = executor
        self.check_interval_s = check_interval_s
        self.trigger_interval_s = trigger_interval_s

    def is_due(self, state: PayoutState, now: int) -> bool:
        if state.balance <= 0:
            raise NoFunds()
        return now - state.last_trigger_time > self.check_interval_s

    def run_upkeep(
        self, state: PayoutState, caller: str, now: int
    ) -> Optional[WinnerPaid]:
        require_authorized_trigger(state, caller)
        require_not_paused(state)

        elapsed = now - state.last_trigger_time
        if elapsed <= self.trigger_interval_s:
            log.debug(
                "Upkeep skipped: %ds elapsed, trigger interval %ds",
                elapsed,
                self.trigger_interval_s,
            )
            return None

        # Price read happens before any mutation; PriceUnavailable aborts cleanly.
        quote = self.oracle.current_price(now=now)

        previous = state.last_trigger_time
        state.last_trigger_time = now
        try:
            return self.executor.payout(
                state,
                state.prize_usd,
                quote.price,
                state.winner,
                now,
                price_decimals=quote.decimals,
            )
        except TransferFailed:
            state.last_trigger_time = previous
            log.warning("Payout to %s failed; cooldown restored to %d", state.winner, previous)
            raise
