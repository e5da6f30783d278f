from __future__ import annotations

import logging
import threading
from typing import Optional

from . import pause as pause_switch
from .access import require_owner
from .events import EventBus, Listener, WinnerPaid
from .oracle import PriceQuote
from .payout import PayoutExecutor
from .project_constants import CHECK_INTERVAL_S, TRIGGER_INTERVAL_S
from .scheduler import UpkeepScheduler
from .state import PayoutState, require_identity, require_positive
from .transfer import LocalTransfer
from .treasury import TreasuryLedger

log = logging.getLogger(__name__)


class PayoutAutomation:
    """
    Automated prize payout around one PayoutState.

    Every public operation runs to completion under a single lock, so a
    trigger, a withdrawal and a config change never interleave. The price
    read inside run_upkeep() is the only I/O and is bounded by the feed
    client's timeout.

    Usage:
        contract = PayoutAutomation.deploy(
            owner="0xOwner", authorized_trigger="0xKeeper",
            prize_usd=100_00000000, winner="0xWinner",
            oracle=ChainlinkFeedClient(rpc_url, feed), now=int(time.time()),
        )
        contract.fund("0xOwner", 10**18)
        if contract.is_due(now):
            contract.run_upkeep("0xKeeper", now)
    """

    def __init__(
        self,
        state: PayoutState,
        oracle,
        transfer: Optional[LocalTransfer] = None,
        check_interval_s: int = CHECK_INTERVAL_S,
        trigger_interval_s: int = TRIGGER_INTERVAL_S,
    ) -> None:
        self._state = state
        self._lock = threading.RLock()
        self.oracle = oracle
        self.transfer = transfer or LocalTransfer()
        self.events = EventBus()
        self.treasury = TreasuryLedger(self.transfer)
        self.scheduler = UpkeepScheduler(
            oracle,
            PayoutExecutor(self.transfer, self.events),
            check_interval_s=check_interval_s,
            trigger_interval_s=trigger_interval_s,
        )

    @classmethod
    def deploy(
        cls,
        owner: str,
        authorized_trigger: str,
        prize_usd: int,
        winner: str,
        oracle,
        now: int,
        **kwargs,
    ) -> "PayoutAutomation":
        state = PayoutState.create(owner, authorized_trigger, prize_usd, winner, now)
        log.info("Deployed payout for %s, prize=%d, owner=%s", winner, prize_usd, owner)
        return cls(state, oracle, **kwargs)

    # -- configuration -----------------------------------------------------

    def set_authorized_trigger(self, caller: str, trigger: str) -> None:
        with self._lock:
            require_owner(self._state, caller)
            self._state.authorized_trigger = require_identity(trigger, "authorized trigger")
            log.info("Authorized trigger set to %s", self._state.authorized_trigger)

    def get_authorized_trigger(self) -> str:
        with self._lock:
            return self._state.authorized_trigger

    def set_prize(self, caller: str, prize_usd: int) -> None:
        with self._lock:
            require_owner(self._state, caller)
            self._state.prize_usd = require_positive(prize_usd, "prize")
            log.info("Prize set to %d", prize_usd)

    def get_prize(self, caller: str) -> int:
        with self._lock:
            require_owner(self._state, caller)
            return self._state.prize_usd

    def set_winner(self, caller: str, winner: str) -> None:
        with self._lock:
            require_owner(self._state, caller)
            self._state.winner = require_identity(winner, "winner")
            log.info("Winner set to %s", self._state.winner)

    def get_winner(self, caller: str) -> str:
        with self._lock:
            require_owner(self._state, caller)
            return self._state.winner

    # -- pause switch ------------------------------------------------------

    def pause(self, caller: str) -> None:
        with self._lock:
            pause_switch.pause(self._state, caller)

    def resume(self, caller: str) -> None:
        with self._lock:
            pause_switch.resume(self._state, caller)

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._state.paused

    # -- treasury ----------------------------------------------------------

    def fund(self, caller: str, amount: int) -> int:
        with self._lock:
            return self.treasury.fund(self._state, caller, amount)

    def receive(self, amount: int) -> int:
        with self._lock:
            return self.treasury.receive(self._state, amount)

    def withdraw(self, caller: str, amount: int, payee: str) -> int:
        with self._lock:
            return self.treasury.withdraw(self._state, caller, amount, payee)

    @property
    def balance(self) -> int:
        with self._lock:
            return self._state.balance

    # -- scheduling --------------------------------------------------------

    def is_due(self, now: int) -> bool:
        with self._lock:
            return self.scheduler.is_due(self._state, now)

    def run_upkeep(self, caller: str, now: int) -> Optional[WinnerPaid]:
        with self._lock:
            return self.scheduler.run_upkeep(self._state, caller, now)

    @property
    def last_trigger_time(self) -> int:
        with self._lock:
            return self._state.last_trigger_time

    # -- informational -----------------------------------------------------

    def current_price(self, now: Optional[int] = None) -> PriceQuote:
        return self.oracle.current_price(now=now)

    def subscribe(self, listener: Listener) -> None:
        self.events.subscribe(listener)

    def snapshot(self) -> PayoutState:
        with self._lock:
            return PayoutState.from_dict(self._state.to_dict())
