from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .errors import InvalidArgument
from .project_constants import ZERO_ADDRESS


def is_null_identity(identity: str | None) -> bool:
    if identity is None:
        return True
    value = identity.strip()
    return not value or value.lower() == ZERO_ADDRESS


def require_identity(identity: str | None, what: str) -> str:
    if is_null_identity(identity):
        raise InvalidArgument(f"{what} must not be the zero address")
    return identity.strip()  # type: ignore[union-attr]


def require_positive(value: int, what: str) -> int:
    # bool is an int subclass; True is not an amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{what} must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgument(f"{what} must be > 0, got {value}")
    return value


@dataclass
class PayoutState:
    owner: str
    authorized_trigger: str
    winner: str
    prize_usd: int
    last_trigger_time: int
    paused: bool = False
    balance: int = 0

    @staticmethod
    def create(
        owner: str,
        authorized_trigger: str,
        prize_usd: int,
        winner: str,
        now: int,
    ) -> "PayoutState":
        return PayoutState(
            owner=require_identity(owner, "owner"),
            authorized_trigger=require_identity(authorized_trigger, "authorized trigger"),
            winner=require_identity(winner, "winner"),
            prize_usd=require_positive(prize_usd, "prize"),
            last_trigger_time=int(now),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PayoutState":
        state = PayoutState(
            owner=str(data["owner"]),
            authorized_trigger=str(data["authorized_trigger"]),
            winner=str(data["winner"]),
            prize_usd=int(data["prize_usd"]),
            last_trigger_time=int(data["last_trigger_time"]),
            paused=bool(data.get("paused", False)),
            balance=int(data.get("balance", 0)),
        )
        if state.balance < 0:
            raise InvalidArgument(f"balance must be >= 0, got {state.balance}")
        return state
