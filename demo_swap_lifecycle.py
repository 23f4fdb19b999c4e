"""
demo_swap_lifecycle.py -- A walkthrough of one margined interest rate swap.

Two counterparties agree to exchange a fixed rate (3%) for a floating rate on a
notional of 1,000,000. Neither party ever receives the notional; only the
difference between the two legs changes hands. To make sure the loser can pay,
both parties post margin into the swap's custody account up front.

We will:
  1. Fund two parties with tokens and let the swap pull their margin
  2. Show that a healthy swap cannot be liquidated
  3. Settle at maturity, with the floating rate fixed quarterly
  4. Withdraw the proceeds and check that every token is accounted for

All money is WAD fixed-point: an int scaled by 10**18. No floats anywhere.

Run this:  .venv/bin/python demo_swap_lifecycle.py
"""

from __future__ import annotations

from datetime import UTC, datetime

from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import WAD, from_wad
from irswap.infra.memory_adapter import InMemoryToken
from irswap.infra.rate_feed import PeriodicFixingRateSource
from irswap.swap.contract import SwapContract


def sep(title: str) -> None:
    """Print a section separator."""
    print(f"\n{'=' * 72}")
    print(f"  {title}")
    print(f"{'=' * 72}\n")


def units(x: int) -> str:
    return f"{from_wad(x):,.2f}"


ALICE = Address(value="0x" + "a1" * 20)  # pays fixed
BOB = Address(value="0x" + "b2" * 20)    # pays floating
KEEPER = Address(value="0x" + "c3" * 20)  # anyone watching for breaches
SWAP = Address(value="0x" + "e5" * 20)   # the swap's own custody account

START = UtcDatetime(value=datetime(2025, 1, 1, tzinfo=UTC))
MATURITY = UtcDatetime(value=datetime(2026, 1, 1, tzinfo=UTC))
NOTIONAL = 1_000_000 * WAD


# =========================================================================
# STEP 1: Custody and the rate feed
# =========================================================================

sep("STEP 1: Custody and the rate feed")

# The token is an in-memory stand-in for an ERC-20 ledger. The swap acts
# through a handle bound to its own account: it can send what it holds, and
# pull from a party only up to what that party approved.
token = InMemoryToken()
for party in (ALICE, BOB):
    token.mint(party, 500_000 * WAD)
    token.as_account(party).approve(SWAP, 500_000 * WAD)

# The floating leg fixes once a quarter. Rates are annualised; the feed
# accrues each one pro rata over the part of its quarter a window covers.
quarterly = (
    40_000_000_000_000_000,  # 4.0%
    45_000_000_000_000_000,  # 4.5%
    55_000_000_000_000_000,  # 5.5%
    60_000_000_000_000_000,  # 6.0%
)
feed = PeriodicFixingRateSource.from_schedule(START, quarterly, months=3)
for fixing in feed.fixings:
    print(f"  {fixing.start.date()} .. {fixing.end.date()}  {from_wad(fixing.annual_rate)}")

swap = SwapContract(SWAP, token.as_account(SWAP), feed)


# =========================================================================
# STEP 2: Initialization
# =========================================================================

sep("STEP 2: Initialization")

# Either named party may initialize. Each posts initial margin of 10% of
# notional; both pulls succeed or neither does.
match swap.initialize(ALICE, ALICE, BOB, NOTIONAL, MATURITY, START):
    case Ok(terms):
        print(f"  Status:             {swap.status.value}")
        print(f"  Notional:           {units(terms.notional)}")
        print(f"  Fixed rate:         {from_wad(terms.fixed_rate)}")
    case Err(e):
        raise SystemExit(f"initialize failed: {e.message}")

for position in swap.positions():
    print(f"  {position.role.value:15s} {position.address}  margin {units(position.margin)}")
print(f"  Custody holds:      {units(token.balance_of(SWAP))}")


# =========================================================================
# STEP 3: A healthy swap cannot be liquidated
# =========================================================================

sep("STEP 3: Liquidation attempt")

# Liquidation is open to anyone, but only pays when a margin is below 7% of
# notional. Both parties hold 10%, so this fails and changes nothing.
match swap.liquidate(KEEPER, UtcDatetime(value=datetime(2025, 6, 1, tzinfo=UTC))):
    case Ok(_):
        raise SystemExit("a healthy swap should not be liquidatable")
    case Err(e):
        print(f"  Refused:            {e.code}")
        print(f"  Reason:             {e.message}")


# =========================================================================
# STEP 4: Settlement at maturity
# =========================================================================

sep("STEP 4: Settlement at maturity")

# Accrued floating rate over the year is ~5.0%, above the 3% fixed rate, so
# the fixed payer owes the difference on the notional.
match swap.settle_at_maturity(BOB, MATURITY):
    case Ok(result):
        print(f"  Accrued floating:   {from_wad(result.variable_rate)}")
        print(f"  Direction:          {result.direction.value}")
        print(f"  Mark-to-market:     {units(result.mark_to_market)}")
        print(f"  Status:             {swap.status.value}")
    case Err(e):
        raise SystemExit(f"settlement failed: {e.message}")

# Settling twice is refused; funds never move twice.
match swap.settle_at_maturity(BOB, MATURITY):
    case Err(e):
        print(f"  Second settlement:  {e.code}")
    case Ok(_):
        raise SystemExit("second settlement should fail")


# =========================================================================
# STEP 5: Withdrawals and conservation
# =========================================================================

sep("STEP 5: Withdrawals")

# Settlement only credits payable balances. Each party pulls its own.
for party, name in ((ALICE, "Alice"), (BOB, "Bob")):
    match swap.withdraw(party):
        case Ok(amount):
            print(f"  {name} withdrew {units(amount)}, now holds {units(token.balance_of(party))}")
        case Err(e):
            raise SystemExit(f"withdraw failed: {e.message}")

assert swap.ledger is not None
print(f"\n  Custody holds:      {units(token.balance_of(SWAP))}")
print(f"  Ledger balanced:    {isinstance(swap.ledger.verify_conservation(), Ok)}")
print(f"  Total supply:       {units(token.balance_of(ALICE) + token.balance_of(BOB))}")
