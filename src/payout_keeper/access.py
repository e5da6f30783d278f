from __future__ import annotations

from .errors import Unauthorized
from .state import PayoutState


def require_owner(state: PayoutState, caller: str) -> None:
    if caller != state.owner:
        raise Unauthorized(caller, "owner")


def require_authorized_trigger(state: PayoutState, caller: str) -> None:
    if caller != state.authorized_trigger:
        raise Unauthorized(caller, "authorized trigger")
