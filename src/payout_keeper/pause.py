from __future__ import annotations

import logging

from .access import require_owner
from .errors import Paused
from .state import PayoutState

log = logging.getLogger(__name__)


def pause(state: PayoutState, caller: str) -> None:
    require_owner(state, caller)
    state.paused = True
    log.warning("Payouts paused by %s", caller)


def resume(state: PayoutState, caller: str) -> None:
    require_owner(state, caller)
    state.paused = False
    log.info("Payouts resumed by %s", caller)


def require_not_paused(state: PayoutState) -> None:
    if state.paused:
        raise Paused()
