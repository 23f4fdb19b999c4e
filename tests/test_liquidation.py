"""Tests for irswap.swap.liquidation — breach detection, fee cap, forced close."""

from __future__ import annotations

from swap_support import FIXED, FLOATING, KEEPER, MATURITY, NOTIONAL, SWAP_ADDR, T0, at, wad
from irswap.core.errors import (
    CustodyTransferFailedError,
    NotEligibleError,
)
from irswap.core.result import Err, Ok, unwrap
from irswap.infra.memory_adapter import InMemoryToken, StaticRateSource
from irswap.ledger.margin import MarginLedger
from irswap.swap.lifecycle import SwapStatus
from irswap.swap.liquidation import breaching_parties, liquidate, maturity_shortfall
from irswap.swap.settlement import PayDirection
from irswap.swap.state import SwapState
from irswap.swap.terms import Counterparties, SwapTerms


def _setup(fixed: int, floating: int) -> tuple[SwapState, InMemoryToken]:
    token = InMemoryToken()
    token.mint(SWAP_ADDR, wad(fixed + floating))
    ledger = MarginLedger(FIXED, FLOATING)
    ledger.deposit(FIXED, wad(fixed))
    ledger.deposit(FLOATING, wad(floating))
    state = SwapState(
        address=SWAP_ADDR,
        status=SwapStatus.ACTIVE,
        terms=unwrap(SwapTerms.create(NOTIONAL, T0, MATURITY)),
        counterparties=unwrap(Counterparties.create(FIXED, FLOATING)),
        ledger=ledger,
    )
    return state, token


class TestBreachDetection:
    def test_no_breach(self) -> None:
        state, _ = _setup(100_000, 100_000)
        assert breaching_parties(state) == Ok(((), wad(70_000)))

    def test_single_breach(self) -> None:
        state, _ = _setup(65_000, 100_000)
        assert breaching_parties(state) == Ok(((FIXED,), wad(70_000)))

    def test_threshold_is_strict(self) -> None:
        state, _ = _setup(70_000, 100_000)
        assert breaching_parties(state) == Ok(((), wad(70_000)))


class TestLiquidate:
    def test_scenario_fixed_payer_breach(self) -> None:
        state, token = _setup(65_000, 100_000)
        custody = token.as_account(SWAP_ADDR)
        outcome = unwrap(liquidate(state, custody, StaticRateSource(wad("0.03")), KEEPER, at(100)))
        assert outcome.breached == (FIXED,)
        assert outcome.fee == wad(5_000)
        assert outcome.debits == ((FIXED, wad(5_000)),)
        assert token.balance_of(KEEPER) == wad(5_000)
        settlement = outcome.settlement
        assert settlement.final
        assert settlement.as_of == at(100)
        assert settlement.direction is PayDirection.NONE
        assert settlement.fixed_margin_released == wad(60_000)
        assert settlement.floating_margin_released == wad(100_000)
        assert state.ledger is not None
        assert state.ledger.verify_conservation() == Ok(None)
        assert state.ledger.custodied() == token.balance_of(SWAP_ADDR)

    def test_scenario_not_eligible(self) -> None:
        state, token = _setup(100_000, 100_000)
        assert state.ledger is not None
        before = state.ledger.snapshot()
        result = liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        )
        assert isinstance(result, Err)
        assert isinstance(result.error, NotEligibleError)
        assert state.ledger.snapshot() == before
        assert token.balance_of(KEEPER) == 0

    def test_both_breach_each_debited_once(self) -> None:
        state, token = _setup(60_000, 65_000)
        outcome = unwrap(liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        ))
        assert outcome.breached == (FIXED, FLOATING)
        assert outcome.debits == ((FIXED, wad(5_000)), (FLOATING, wad(5_000)))
        # one fee paid; the second debit stays in the pool and is split
        assert token.balance_of(KEEPER) == wad(5_000)
        assert outcome.settlement.residual_to_fixed == wad(2_500)
        assert outcome.settlement.residual_to_floating == wad(2_500)

    def test_fee_capped_at_available_margin(self) -> None:
        state, token = _setup(3_000, 4_000)
        outcome = unwrap(liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        ))
        assert outcome.debits == ((FIXED, wad(3_000)), (FLOATING, wad(4_000)))
        assert state.ledger is not None
        assert state.ledger.total() == 0

    def test_fee_beyond_pool_comes_from_released_balances(self) -> None:
        state, token = _setup(2_000, 100_000)
        outcome = unwrap(liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        ))
        assert outcome.debits == ((FIXED, wad(2_000)),)
        assert outcome.fee == outcome.fee_due == wad(5_000)
        assert token.balance_of(KEEPER) == wad(5_000)
        # the breaching party has nothing left, so the counterparty's release funds the rest
        assert state.ledger is not None
        assert state.ledger.payable_of(FIXED) == 0
        assert state.ledger.payable_of(FLOATING) == wad(97_000)
        assert state.ledger.verify_conservation() == Ok(None)
        assert state.ledger.custodied() == token.balance_of(SWAP_ADDR)

    def test_fee_limited_to_what_custody_holds(self) -> None:
        state, token = _setup(1_000, 1_000)
        outcome = unwrap(liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        ))
        assert outcome.fee_due == wad(5_000)
        assert outcome.fee == wad(2_000)
        assert token.balance_of(KEEPER) == wad(2_000)
        assert token.balance_of(SWAP_ADDR) == 0
        assert state.ledger is not None
        assert state.ledger.verify_conservation() == Ok(None)

    def test_forced_settlement_seizes_whole_margin(self) -> None:
        state, token = _setup(65_000, 100_000)
        # fixed owes 0.10 * notional = 100,000 but holds 60,000 after the fee
        outcome = unwrap(liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.13")), KEEPER, at(100),
        ))
        settlement = outcome.settlement
        assert settlement.mark_to_market == wad(100_000)
        assert settlement.unpaid == wad(40_000)
        assert settlement.fixed_margin_released == 0
        assert token.balance_of(KEEPER) == wad(5_000)
        assert state.ledger is not None
        assert state.ledger.payable_of(FIXED) == 0
        assert state.ledger.payable_of(FLOATING) == wad(160_000)
        assert state.ledger.verify_conservation() == Ok(None)
        assert state.ledger.custodied() == token.balance_of(SWAP_ADDR)

    def test_settles_at_maturity_when_called_late(self) -> None:
        state, token = _setup(65_000, 100_000)
        rates = StaticRateSource(wad("0.03"))
        unwrap(liquidate(state, token.as_account(SWAP_ADDR), rates, KEEPER, at(500)))
        assert rates.queries
        assert set(rates.queries) == {(T0, MATURITY)}

    def test_fee_transfer_failure(self) -> None:
        state, token = _setup(65_000, 100_000)
        token.freeze(KEEPER)
        result = liquidate(
            state, token.as_account(SWAP_ADDR), StaticRateSource(wad("0.03")), KEEPER, at(100),
        )
        assert isinstance(result, Err)
        assert isinstance(result.error, CustodyTransferFailedError)
        assert result.error.destination == KEEPER.value


class TestMaturityShortfall:
    def test_none_before_maturity(self) -> None:
        state, _ = _setup(100_000, 100_000)
        rates = StaticRateSource(wad("0.18"))
        assert maturity_shortfall(state, rates, at(364)) == Ok(None)
        assert rates.queries == []

    def test_payer_short_at_maturity(self) -> None:
        state, _ = _setup(100_000, 100_000)
        # fixed owes 0.15 * notional = 150,000 against 100,000 margin
        assert maturity_shortfall(state, StaticRateSource(wad("0.18")), MATURITY) == Ok(FIXED)

    def test_covered_payer_is_not_short(self) -> None:
        state, _ = _setup(100_000, 100_000)
        assert maturity_shortfall(state, StaticRateSource(wad("0.12")), MATURITY) == Ok(None)

    def test_shortfall_makes_a_healthy_margin_liquidatable(self) -> None:
        state, token = _setup(100_000, 100_000)
        rates = StaticRateSource(wad("0.18"))
        before = liquidate(state, token.as_account(SWAP_ADDR), rates, KEEPER, at(100))
        assert isinstance(before, Err)
        assert isinstance(before.error, NotEligibleError)

        outcome = unwrap(liquidate(state, token.as_account(SWAP_ADDR), rates, KEEPER, MATURITY))
        assert outcome.breached == (FIXED,)
        assert outcome.debits == ((FIXED, wad(5_000)),)
        assert outcome.settlement.as_of == MATURITY
        assert outcome.settlement.unpaid == wad(55_000)
        assert token.balance_of(KEEPER) == wad(5_000)
        assert state.ledger is not None
        assert state.ledger.payable_of(FLOATING) == wad(195_000)
        assert state.ledger.verify_conservation() == Ok(None)
        assert state.ledger.custodied() == token.balance_of(SWAP_ADDR)
