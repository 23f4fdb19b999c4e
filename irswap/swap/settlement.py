"""Settlement engine: mark-to-market, transfer direction, close-out.

settle() is reached only through SwapContract (maturity) or the liquidation
engine (forced close). At maturity it never truncates: if the paying party's
margin does not cover the mark-to-market, it fails with MarginShortfallError
and leaves the ledger untouched. Only a liquidation close-out may seize the
payer's whole margin and leave the rest unpaid.

Mark-to-market is a three-way comparison of the accrued variable rate v
against the fixed rate. The magnitude |v - fixed_rate| is only formed after
the comparison, so no unsigned subtraction can wrap.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, final

from irswap.core.errors import (
    ArithmeticOverflowError,
    IllegalTransitionError,
    InsufficientMarginError,
    InvalidTermsError,
    MarginShortfallError,
    NotAPartyError,
    RateUnavailableError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint, is_word, wad_mul
from irswap.infra.protocols import RateSource

if TYPE_CHECKING:
    from irswap.swap.state import SwapState
    from irswap.swap.terms import Counterparties, SwapTerms

_SOURCE = "swap.settlement"

type SettlementError = (
    ArithmeticOverflowError
    | IllegalTransitionError
    | InsufficientMarginError
    | InvalidTermsError
    | MarginShortfallError
    | NotAPartyError
    | RateUnavailableError
)


class PayDirection(Enum):
    """Which leg pays the mark-to-market."""

    FIXED_PAYS = "FixedPays"
    FLOATING_PAYS = "FloatingPays"
    NONE = "None"


@final
@dataclass(frozen=True, slots=True)
class MarkToMarket:
    direction: PayDirection
    amount: FixedPoint


@final
@dataclass(frozen=True, slots=True)
class SettlementResult:
    """What one settlement computed and applied."""

    as_of: UtcDatetime
    variable_rate: FixedPoint
    fixed_rate: FixedPoint
    direction: PayDirection
    mark_to_market: FixedPoint
    payer: Address | None
    receiver: Address | None
    final: bool
    fixed_margin_released: FixedPoint = 0
    floating_margin_released: FixedPoint = 0
    residual_to_fixed: FixedPoint = 0
    residual_to_floating: FixedPoint = 0
    unpaid: FixedPoint = 0


def compute_mark_to_market(
    variable_rate: FixedPoint, fixed_rate: FixedPoint, notional: FixedPoint,
) -> Ok[MarkToMarket] | Err[ArithmeticOverflowError]:
    """Direction and magnitude owed. Pure and deterministic."""
    if variable_rate > fixed_rate:
        direction, spread = PayDirection.FIXED_PAYS, variable_rate - fixed_rate
    elif variable_rate < fixed_rate:
        direction, spread = PayDirection.FLOATING_PAYS, fixed_rate - variable_rate
    else:
        return Ok(MarkToMarket(direction=PayDirection.NONE, amount=0))
    match wad_mul(spread, notional):
        case Err(e):
            return Err(e)
        case Ok(amount):
            pass
    return Ok(MarkToMarket(direction=direction, amount=amount))


def _accrued_rate(
    rates: RateSource, start: UtcDatetime, end: UtcDatetime,
) -> Ok[FixedPoint] | Err[RateUnavailableError]:
    match rates.rate_from_to(start, end):
        case Err(e):
            return Err(e)
        case Ok(v):
            pass
    if not is_word(v):
        return Err(RateUnavailableError(
            message=f"Rate source returned {v!r}, not an unsigned WAD value",
            code="RATE_OUT_OF_RANGE",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}._accrued_rate",
            start=start.isoformat(),
            end=end.isoformat(),
        ))
    return Ok(v)


@final
@dataclass(frozen=True, slots=True)
class SettlementQuote:
    """What settling at as_of would move, computed without touching the ledger."""

    as_of: UtcDatetime
    variable_rate: FixedPoint
    fixed_rate: FixedPoint
    mark_to_market: MarkToMarket
    payer: Address | None
    receiver: Address | None


def quote(
    terms: SwapTerms, parties: Counterparties, rates: RateSource, as_of: UtcDatetime,
) -> Ok[SettlementQuote] | Err[SettlementError]:
    """Accrued rate, direction and amount owed over [creation_time, as_of]."""
    if not (terms.creation_time <= as_of <= terms.maturity_time):
        return Err(InvalidTermsError(
            message=(
                f"as_of {as_of.isoformat()} outside "
                f"[{terms.creation_time.isoformat()}, {terms.maturity_time.isoformat()}]"
            ),
            code="SETTLEMENT_OUT_OF_TERM",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.quote",
            field="as_of",
            actual_value=as_of.isoformat(),
        ))

    match _accrued_rate(rates, terms.creation_time, as_of):
        case Err(e):
            return Err(e)
        case Ok(variable_rate):
            pass

    match compute_mark_to_market(variable_rate, terms.fixed_rate, terms.notional):
        case Err(e):
            return Err(e)
        case Ok(mtm):
            pass

    payer: Address | None = None
    receiver: Address | None = None
    match mtm.direction:
        case PayDirection.FIXED_PAYS:
            payer, receiver = parties.fixed_payer, parties.floating_payer
        case PayDirection.FLOATING_PAYS:
            payer, receiver = parties.floating_payer, parties.fixed_payer
        case PayDirection.NONE:
            pass
    return Ok(SettlementQuote(
        as_of=as_of,
        variable_rate=variable_rate,
        fixed_rate=terms.fixed_rate,
        mark_to_market=mtm,
        payer=payer,
        receiver=receiver,
    ))


def settle(
    state: SwapState,
    rates: RateSource,
    as_of: UtcDatetime,
    *,
    final: bool = True,
    seize: bool = False,
) -> Ok[SettlementResult] | Err[SettlementError]:
    """Settle the swap over [creation_time, as_of].

    1. v = accrued variable rate over [creation_time, as_of]
    2. Three-way compare v with fixed_rate -> direction, mark-to-market
    3. Debit the payer's margin, crediting the receiver's payable balance.
       InsufficientMargin -> MarginShortfallError (no partial settlement).
       With seize=True (liquidation close-out only) the payer's whole
       margin is taken instead and the uncovered part is reported as unpaid.
    4. Final only: release both margins to their owners' payable balances
       and split the unallocated pool equally.
    """
    match state.active(f"{_SOURCE}.settle"):
        case Err(e):
            return Err(e)
        case Ok((terms, parties, ledger)):
            pass

    match quote(terms, parties, rates, as_of):
        case Err(e):
            return Err(e)
        case Ok(q):
            pass

    payer, receiver, owed = q.payer, q.receiver, q.mark_to_market.amount
    unpaid: FixedPoint = 0
    if payer is not None and receiver is not None:
        paid = min(owed, ledger.margin_of(payer)) if seize else owed
        match ledger.debit(payer, paid, payee=receiver):
            case Err(InsufficientMarginError() as e):
                return Err(MarginShortfallError(
                    message=(
                        f"{payer} owes {owed} but holds {e.available} margin; "
                        "position must be topped up or liquidated"
                    ),
                    code="MARGIN_SHORTFALL",
                    timestamp=UtcDatetime.now(),
                    source=f"{_SOURCE}.settle",
                    payer=payer.value,
                    mark_to_market=str(owed),
                    margin=e.available,
                ))
            case Err(e):
                return Err(e)
            case Ok(_):
                unpaid = owed - paid

    result = SettlementResult(
        as_of=as_of,
        variable_rate=q.variable_rate,
        fixed_rate=q.fixed_rate,
        direction=q.mark_to_market.direction,
        mark_to_market=owed,
        payer=payer,
        receiver=receiver,
        final=final,
        unpaid=unpaid,
    )
    if not final:
        return Ok(result)

    released: list[FixedPoint] = []
    for party in parties.ordered():
        match ledger.release_margin(party):
            case Err(e):
                return Err(e)
            case Ok(amount):
                released.append(amount)
    to_fixed, to_floating = ledger.distribute_pool()
    return Ok(replace(
        result,
        fixed_margin_released=released[0],
        floating_margin_released=released[1],
        residual_to_fixed=to_fixed,
        residual_to_floating=to_floating,
    ))
