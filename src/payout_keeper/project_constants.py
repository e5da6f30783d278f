"""
Project-wide parameters for the automated prize payout.

These values define the public rules of the payout schedule.
Changing them changes when the winner gets paid and MUST be announced.
"""

DAY_S = 24 * 60 * 60

# "Is it worth polling" window used by is_due()
CHECK_INTERVAL_S = 30 * DAY_S

# "Is it actually time to pay" gate used by run_upkeep()
TRIGGER_INTERVAL_S = 14 * DAY_S

# Native asset (ETH-like) uses 18 decimals
NATIVE_DECIMALS = 18

# Chainlink USD feeds answer with 8 decimals; prize_usd uses the same scale
FEED_DECIMALS = 8

# ETH / USD on Sepolia
DEFAULT_PRICE_FEED = "0x694AA1769357215DE4FAC081bf1f309aDC325306"

ZERO_ADDRESS = "0x" + "0" * 40
