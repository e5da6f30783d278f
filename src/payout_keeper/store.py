from __future__ import annotations

import json
import os
from typing import Any, Dict

from .state import PayoutState

FIELDS = (
    "owner",
    "authorized_trigger",
    "winner",
    "prize_usd",
    "last_trigger_time",
    "paused",
    "balance",
)


def save_state(state: PayoutState, path: str) -> None:
    doc: Dict[str, Any] = state.to_dict()
    # Big ints as strings; JSON consumers often read numbers as doubles.
    doc["prize_usd"] = str(state.prize_usd)
    doc["balance"] = str(state.balance)

    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2)
    os.replace(tmp, path)


def load_state(path: str) -> PayoutState:
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)

    if not isinstance(doc, dict):
        raise RuntimeError(f"State file {path} is not a JSON object")
    missing = [k for k in FIELDS if k not in doc]
    if missing:
        raise RuntimeError(f"State file {path} is missing fields: {', '.join(missing)}")
    return PayoutState.from_dict(doc)
