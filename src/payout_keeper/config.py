from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .project_constants import CHECK_INTERVAL_S, DEFAULT_PRICE_FEED, TRIGGER_INTERVAL_S


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer number of seconds, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    price_feed: str = DEFAULT_PRICE_FEED
    price_max_age_s: Optional[int] = None
    check_interval_s: int = CHECK_INTERVAL_S
    trigger_interval_s: int = TRIGGER_INTERVAL_S
    state_file: str = "payout_state.json"

    @staticmethod
    def from_env(
        rpc_url_override: str | None = None,
        state_file_override: str | None = None,
    ) -> "Settings":
        load_dotenv()

        rpc_url = rpc_url_override or os.getenv("RPC_URL", "").strip()
        if not rpc_url:
            # Otherwise build a Sepolia url from the Infura key, if any.
            infura_key = os.getenv("INFURA_API_KEY", "").strip()
            rpc_url = f"https://sepolia.infura.io/v3/{infura_key}" if infura_key else ""

        max_age = os.getenv("PRICE_MAX_AGE_S", "").strip()

        return Settings(
            rpc_url=rpc_url,
            price_feed=os.getenv("PRICE_FEED_ADDRESS", "").strip() or DEFAULT_PRICE_FEED,
            price_max_age_s=_env_int("PRICE_MAX_AGE_S", 0) if max_age else None,
            check_interval_s=_env_int("CHECK_INTERVAL_S", CHECK_INTERVAL_S),
            trigger_interval_s=_env_int("TRIGGER_INTERVAL_S", TRIGGER_INTERVAL_S),
            state_file=state_file_override
            or os.getenv("STATE_FILE", "").strip()
            or "payout_state.json",
        )

