from __future__ import annotations


class PayoutError(RuntimeError):
    """Base class for every rejected payout-contract call."""

    kind = "payout_error"


class Unauthorized(PayoutError):
    kind = "unauthorized"

    def __init__(self, caller: str, role: str) -> None:
        self.caller = caller
        self.role = role
        super().__init__(f"Caller {caller!r} is not the {role}")


class Paused(PayoutError):
    kind = "paused"

    def __init__(self) -> None:
        super().__init__("Contract is paused")


class NoFunds(PayoutError):
    kind = "no_funds"

    def __init__(self) -> None:
        super().__init__("Contract balance is zero")


class InvalidArgument(PayoutError):
    kind = "invalid_argument"


class TransferFailed(PayoutError):
    kind = "transfer_failed"

    def __init__(self, recipient: str, amount: int, reason: str) -> None:
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Transfer of {amount} to {recipient} failed: {reason}")


class PriceUnavailable(PayoutError):
    """Price feed could not be read, or returned an unusable answer."""

    kind = "price_unavailable"
