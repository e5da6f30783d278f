from __future__ import annotations

import logging

from .errors import InvalidArgument
from .events import EventBus, WinnerPaid
from .project_constants import FEED_DECIMALS, NATIVE_DECIMALS
from .state import PayoutState, require_identity
from .transfer import LocalTransfer

log = logging.getLogger(__name__)


def compute_amount(prize_usd: int, price: int, price_decimals: int = FEED_DECIMALS) -> int:
    """USD prize (FEED_DECIMALS fixed point) -> smallest native units at a price with price_decimals."""
    if prize_usd <= 0:
        raise InvalidArgument(f"prize must be > 0, got {prize_usd}")
    if price <= 0:
        raise InvalidArgument(f"price must be > 0, got {price}")
    if price_decimals >= FEED_DECIMALS:
        prize = prize_usd * 10 ** (price_decimals - FEED_DECIMALS)
        return prize * 10**NATIVE_DECIMALS // price
    return prize_usd * 10**NATIVE_DECIMALS // (price * 10 ** (FEED_DECIMALS - price_decimals))


def to_native(raw_amount: int) -> float:
    return round(raw_amount / (10**NATIVE_DECIMALS), 6)


class PayoutExecutor:
    def __init__(self, transfer: LocalTransfer, events: EventBus) -> None:
        self.transfer = transfer
        self.events = events

    def payout(
        self,
        state: PayoutState,
        prize_usd: int,
        price: int,
        recipient: str,
        now: int,
        price_decimals: int = FEED_DECIMALS,
    ) -> WinnerPaid:
        recipient = require_identity(recipient, "recipient")
        amount = compute_amount(prize_usd, price, price_decimals)
        log.info(
            "Paying %s: prize=%d price=%d -> %d wei (%s native)",
            recipient,
            prize_usd,
            price,
            amount,
            to_native(amount),
        )
        self.transfer.send(recipient, amount, available=state.balance)
        state.balance -= amount

        event = WinnerPaid(timestamp=now, recipient=recipient, amount=amount, price=price)
        self.events.publish(event)
        return event
