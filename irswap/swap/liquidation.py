"""Liquidation engine: breach detection, fee, forced close-out.

Anyone may liquidate; the caller is the liquidator and is paid the fee.

1. threshold = margin_requirement_ratio * notional
2. breaching = parties with margin < threshold, plus, at or after maturity,
   a payer whose margin cannot cover the final mark-to-market (fixed payer
   first); none -> NotEligibleError
3. fee = liquidation_fee_ratio * notional
4. each breaching party is debited min(fee, margin) into the pool. The cap
   is a business rule: margin never goes below zero, the debit never reverts.
5. the pool funds as much of the fee as it holds
6. forced final settlement at min(now, maturity). The payer's whole margin
   is seized when it does not cover the mark-to-market; the rest is unpaid.
7. any fee the pool could not fund comes out of the released balances,
   breaching parties first. Only what custody holds for the swap is paid.
8. the fee leaves custody for the liquidator as the last step, so a failed
   transfer can still be rolled back by the caller.

Liquidation terminates the swap; the contract moves it to SETTLED.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, final

from irswap.core.errors import CustodyTransferFailedError, NotEligibleError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint
from irswap.infra.protocols import Custody, RateSource
from irswap.swap.custody import push
from irswap.swap.settlement import SettlementError, SettlementResult, quote, settle

if TYPE_CHECKING:
    from irswap.swap.state import SwapState

_SOURCE = "swap.liquidation"

type LiquidationError = SettlementError | NotEligibleError | CustodyTransferFailedError


@final
@dataclass(frozen=True, slots=True)
class LiquidationOutcome:
    """Who breached, what was charged, and the forced settlement.

    fee is what the liquidator was paid; it is below fee_due only when
    custody no longer held enough for the swap.
    """

    liquidator: Address
    breached: tuple[Address, ...]
    threshold: FixedPoint
    fee: FixedPoint
    debits: tuple[tuple[Address, FixedPoint], ...]
    settlement: SettlementResult
    fee_due: FixedPoint = 0


def breaching_parties(
    state: SwapState,
) -> Ok[tuple[tuple[Address, ...], FixedPoint]] | Err[SettlementError]:
    """Parties whose margin is below the requirement, and the threshold used."""
    match state.active(f"{_SOURCE}.breaching_parties"):
        case Err(e):
            return Err(e)
        case Ok((terms, parties, ledger)):
            pass
    match terms.margin_threshold():
        case Err(e):
            return Err(e)
        case Ok(threshold):
            pass
    breached = tuple(p for p in parties.ordered() if ledger.margin_of(p) < threshold)
    return Ok((breached, threshold))


def maturity_shortfall(
    state: SwapState, rates: RateSource, now: UtcDatetime,
) -> Ok[Address | None] | Err[SettlementError]:
    """The payer whose margin cannot cover the final mark-to-market.

    None before maturity, when nothing is owed, or when the margin covers it.
    """
    match state.active(f"{_SOURCE}.maturity_shortfall"):
        case Err(e):
            return Err(e)
        case Ok((terms, parties, ledger)):
            pass
    if now < terms.maturity_time:
        return Ok(None)
    match quote(terms, parties, rates, terms.maturity_time):
        case Err(e):
            return Err(e)
        case Ok(q):
            pass
    if q.payer is None or ledger.margin_of(q.payer) >= q.mark_to_market.amount:
        return Ok(None)
    return Ok(q.payer)


def liquidate(
    state: SwapState,
    custody: Custody,
    rates: RateSource,
    caller: Address,
    now: UtcDatetime,
) -> Ok[LiquidationOutcome] | Err[LiquidationError]:
    """Liquidate a breached position on behalf of caller.

    Mutates state.ledger; on Err the caller must restore its snapshot.
    """
    match state.active(f"{_SOURCE}.liquidate"):
        case Err(e):
            return Err(e)
        case Ok((terms, parties, ledger)):
            pass

    match breaching_parties(state):
        case Err(e):
            return Err(e)
        case Ok((below_threshold, threshold)):
            pass
    match maturity_shortfall(state, rates, now):
        case Err(e):
            return Err(e)
        case Ok(short_payer):
            pass
    breached = tuple(
        p for p in parties.ordered() if p in below_threshold or p == short_payer
    )
    if not breached:
        return Err(NotEligibleError(
            message=f"Both margins meet the requirement of {threshold}",
            code="NOT_ELIGIBLE",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.liquidate",
            threshold=str(threshold),
        ))

    match terms.liquidation_fee():
        case Err(e):
            return Err(e)
        case Ok(fee):
            pass

    debits: list[tuple[Address, FixedPoint]] = []
    for party in breached:
        charge = min(fee, ledger.margin_of(party))
        match ledger.debit(party, charge):
            case Err(e):
                return Err(e)
            case Ok(_):
                debits.append((party, charge))

    from_pool = min(fee, ledger.pool)
    match ledger.pay_fee(from_pool):
        case Err(e):
            return Err(e)
        case Ok(_):
            pass

    as_of = min(now, terms.maturity_time)
    match settle(state, rates, as_of, seize=True):
        case Err(e):
            return Err(e)
        case Ok(settlement):
            pass

    outstanding = fee - from_pool
    others = tuple(p for p in parties.ordered() if p not in breached)
    for account in (*breached, *others):
        outstanding -= ledger.charge_payable(account, outstanding)
    paid = fee - outstanding

    if paid:
        match push(custody, caller, paid):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass

    return Ok(LiquidationOutcome(
        liquidator=caller,
        breached=breached,
        threshold=threshold,
        fee=paid,
        debits=tuple(debits),
        settlement=settlement,
        fee_due=fee,
    ))
