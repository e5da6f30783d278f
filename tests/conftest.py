"""
Payout test fixtures.

The price feed is always a StaticPriceFeed or an httpx MockTransport;
tests never hit a real RPC endpoint.
"""
import pytest

from payout_keeper.contract import PayoutAutomation
from payout_keeper.oracle import StaticPriceFeed
from payout_keeper.project_constants import DAY_S
from payout_keeper.transfer import LocalTransfer

OWNER = "0x1111111111111111111111111111111111111111"
KEEPER = "0x2222222222222222222222222222222222222222"
WINNER = "0x3333333333333333333333333333333333333333"
STRANGER = "0x4444444444444444444444444444444444444444"

T0 = 1_700_000_000
PRIZE = 100
PRICE = 50
FUNDING = 10 * 10**18

# One second past each window
AFTER_TRIGGER = T0 + 14 * DAY_S + 1
AFTER_CHECK = T0 + 30 * DAY_S + 1


@pytest.fixture
def feed():
    return StaticPriceFeed(PRICE)


@pytest.fixture
def transfer():
    return LocalTransfer()


@pytest.fixture
def contract(feed, transfer):
    """Deployed at T0 with a 100-unit prize, unfunded."""
    return PayoutAutomation.deploy(
        owner=OWNER,
        authorized_trigger=KEEPER,
        prize_usd=PRIZE,
        winner=WINNER,
        oracle=feed,
        now=T0,
        transfer=transfer,
    )


@pytest.fixture
def funded(contract):
    contract.fund(OWNER, FUNDING)
    return contract
