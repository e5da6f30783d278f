from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .errors import PriceUnavailable
from .project_constants import FEED_DECIMALS

# AggregatorV3Interface selectors
LATEST_ROUND_DATA = "0xfeaf968c"
DECIMALS = "0x313ce567"

WORD_HEX = 64


@dataclass(frozen=True)
class PriceQuote:
    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int
    decimals: int = FEED_DECIMALS

    @property
    def price(self) -> int:
        return self.answer

    def to_usd(self) -> float:
        return self.answer / (10**self.decimals)


def _words(result: str, count: int) -> List[int]:
    body = result[2:] if result.startswith("0x") else result
    if len(body) < count * WORD_HEX:
        raise PriceUnavailable(
            f"Feed returned {len(body) // 2} bytes, expected {count * 32}"
        )
    try:
        return [
            int(body[i * WORD_HEX : (i + 1) * WORD_HEX], 16) for i in range(count)
        ]
    except ValueError as e:
        raise PriceUnavailable(f"Feed returned non-hex data: {e}")


def _signed(word: int) -> int:
    return word - (1 << 256) if word >= (1 << 255) else word


def decode_latest_round_data(result: str, decimals: int = FEED_DECIMALS) -> PriceQuote:
    """
    latestRoundData() returns five ABI words:
    roundId(uint80) | answer(int256) | startedAt | updatedAt | answeredInRound(uint80)
    """
    round_id, answer, started_at, updated_at, answered_in_round = _words(result, 5)
    return PriceQuote(
        round_id=round_id,
        answer=_signed(answer),
        started_at=started_at,
        updated_at=updated_at,
        answered_in_round=answered_in_round,
        decimals=decimals,
    )


def check_quote(
    quote: PriceQuote, max_age_s: Optional[float], now: Optional[int] = None
) -> PriceQuote:
    if quote.answer <= 0:
        raise PriceUnavailable(f"Feed answered a non-positive price: {quote.answer}")
    if max_age_s is not None:
        now = int(time.time()) if now is None else now
        age = now - quote.updated_at
        if age > max_age_s:
            raise PriceUnavailable(
                f"Feed answer is stale: updated {age}s ago (max {max_age_s}s)"
            )
    return quote


class ChainlinkFeedClient:
    """Reads one Chainlink aggregator over plain JSON-RPC eth_call."""

    def __init__(
        self,
        rpc_url: str,
        feed_address: str,
        timeout_s: float = 10.0,
        max_age_s: Optional[float] = None,
        decimals: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.feed_address = feed_address
        self.max_age_s = max_age_s
        self._decimals = decimals
        self.client = httpx.Client(timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def decimals(self) -> int:
        if self._decimals is None:
            (value,) = _words(self._eth_call(DECIMALS), 1)
            self._decimals = value
        return self._decimals

    def current_price(self, now: Optional[int] = None) -> PriceQuote:
        quote = decode_latest_round_data(
            self._eth_call(LATEST_ROUND_DATA), decimals=self.decimals()
        )
        return check_quote(quote, self.max_age_s, now)

    def _eth_call(self, data: str) -> str:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [{"to": self.feed_address, "data": data}, "latest"],
        }
        result = self._post(payload).get("result")
        if not isinstance(result, str):
            raise PriceUnavailable(f"eth_call to {self.feed_address} returned no data")
        return result

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.rpc_url:
            raise PriceUnavailable(
                "Missing INFURA_API_KEY (or RPC_URL). Put it in .env or export it."
            )
        try:
            resp = self.client.post(self.rpc_url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PriceUnavailable(f"Price feed request failed: {e}") from e
        if "error" in data:
            raise PriceUnavailable(f"RPC error: {data['error']}")
        return data


class StaticPriceFeed:
    """Fixed answer, for local runs and tests."""

    def __init__(
        self,
        answer: int,
        decimals: int = FEED_DECIMALS,
        max_age_s: Optional[float] = None,
        updated_at: Optional[int] = None,
    ) -> None:
        self.answer = answer
        self._decimals = decimals
        self.max_age_s = max_age_s
        self.updated_at = updated_at
        self.round_id = 1

    def close(self) -> None:
        pass

    def decimals(self) -> int:
        return self._decimals

    def set_answer(self, answer: int, updated_at: Optional[int] = None) -> None:
        self.answer = answer
        self.updated_at = updated_at
        self.round_id += 1

    def current_price(self, now: Optional[int] = None) -> PriceQuote:
        updated_at = self.updated_at
        if updated_at is None:
            updated_at = int(time.time()) if now is None else now
        quote = PriceQuote(
            round_id=self.round_id,
            answer=self.answer,
            started_at=updated_at,
            updated_at=updated_at,
            answered_in_round=self.round_id,
            decimals=self._decimals,
        )
        return check_quote(quote, self.max_age_s, now)
