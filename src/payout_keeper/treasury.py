from __future__ import annotations

import logging

from .access import require_owner
from .pause import require_not_paused
from .state import PayoutState, require_identity, require_positive
from .transfer import LocalTransfer

log = logging.getLogger(__name__)


class TreasuryLedger:
    """Contract balance: owner deposits, plain incoming value, owner withdrawals."""

    def __init__(self, transfer: LocalTransfer) -> None:
        self.transfer = transfer

    def fund(self, state: PayoutState, caller: str, amount: int) -> int:
        require_owner(state, caller)
        require_not_paused(state)
        require_positive(amount, "funding amount")
        state.balance += amount
        log.info("Funded %d by %s; balance=%d", amount, caller, state.balance)
        return state.balance

    def receive(self, state: PayoutState, amount: int) -> int:
        require_positive(amount, "received amount")
        state.balance += amount
        log.debug("Received %d; balance=%d", amount, state.balance)
        return state.balance

    def withdraw(self, state: PayoutState, caller: str, amount: int, payee: str) -> int:
        require_owner(state, caller)
        require_not_paused(state)
        payee = require_identity(payee, "payee")
        require_positive(amount, "withdrawal amount")
        self.transfer.send(payee, amount, available=state.balance)
        state.balance -= amount
        log.info("Withdrew %d to %s; balance=%d", amount, payee, state.balance)
        return state.balance
