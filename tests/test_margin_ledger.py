"""Tests for irswap.ledger.margin — margin, payable and pool buckets."""

from __future__ import annotations

from swap_support import FIXED, FLOATING, KEEPER, OUTSIDER, wad
from irswap.core.errors import (
    ArithmeticOverflowError,
    InsufficientMarginError,
    NotAPartyError,
)
from irswap.core.result import Err, Ok
from irswap.core.wad import UINT256_MAX
from irswap.ledger.margin import POOL, MarginLedger


def _funded(fixed: int = 100_000, floating: int = 100_000) -> MarginLedger:
    ledger = MarginLedger(FIXED, FLOATING)
    ledger.deposit(FIXED, wad(fixed))
    ledger.deposit(FLOATING, wad(floating))
    return ledger


class TestDepositAndCredit:
    def test_deposit_counts_towards_deposited(self) -> None:
        ledger = _funded()
        assert ledger.margin_of(FIXED) == wad(100_000)
        assert ledger.deposited == wad(200_000)
        assert ledger.total() == wad(200_000)

    def test_credit_unknown_party(self) -> None:
        result = MarginLedger(FIXED, FLOATING).credit(OUTSIDER, 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, NotAPartyError)

    def test_credit_overflow(self) -> None:
        ledger = MarginLedger(FIXED, FLOATING)
        ledger.credit(FIXED, UINT256_MAX)
        result = ledger.credit(FIXED, 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, ArithmeticOverflowError)
        assert ledger.margin_of(FIXED) == UINT256_MAX


class TestDebit:
    def test_debit_to_payee(self) -> None:
        ledger = _funded()
        assert ledger.debit(FIXED, wad(20_000), payee=FLOATING) == Ok(None)
        assert ledger.margin_of(FIXED) == wad(80_000)
        assert ledger.payable_of(FLOATING) == wad(20_000)
        assert ledger.margin_of(FLOATING) == wad(100_000)

    def test_debit_to_pool(self) -> None:
        ledger = _funded()
        ledger.debit(FIXED, wad(5_000))
        assert ledger.pool == wad(5_000)

    def test_insufficient_margin_leaves_ledger_untouched(self) -> None:
        ledger = _funded()
        before = ledger.snapshot()
        result = ledger.debit(FIXED, wad(150_000), payee=FLOATING)
        assert isinstance(result, Err)
        assert isinstance(result.error, InsufficientMarginError)
        assert result.error.code == "INSUFFICIENT_MARGIN"
        assert result.error.available == str(wad(100_000))
        assert ledger.snapshot() == before

    def test_debit_exact_margin_reaches_zero(self) -> None:
        ledger = _funded()
        assert isinstance(ledger.debit(FIXED, wad(100_000)), Ok)
        assert ledger.margin_of(FIXED) == 0

    def test_negative_debit_rejected(self) -> None:
        result = _funded().debit(FIXED, -1)
        assert isinstance(result, Err)
        assert isinstance(result.error, ArithmeticOverflowError)


class TestPool:
    def test_recognise_surplus(self) -> None:
        ledger = _funded()
        assert ledger.recognise_surplus(wad(200_001)) == wad(1)
        assert ledger.pool == wad(1)
        assert ledger.surplus_recognised == wad(1)

    def test_recognise_surplus_ignores_deficit(self) -> None:
        ledger = _funded()
        assert ledger.recognise_surplus(wad(1)) == 0
        assert ledger.pool == 0

    def test_pay_fee_from_pool(self) -> None:
        ledger = _funded()
        ledger.debit(FIXED, wad(5_000))
        assert ledger.pay_fee(wad(5_000)) == Ok(None)
        assert ledger.pool == 0
        assert ledger.fees_paid == wad(5_000)

    def test_pay_fee_insufficient_pool(self) -> None:
        result = _funded().pay_fee(1)
        assert isinstance(result, Err)
        assert result.error.party == POOL
        assert result.error.code == "INSUFFICIENT_POOL"

    def test_charge_payable_takes_up_to_balance(self) -> None:
        ledger = _funded()
        ledger.release_margin(FLOATING)
        assert ledger.charge_payable(FLOATING, wad(3_000)) == wad(3_000)
        assert ledger.payable_of(FLOATING) == wad(97_000)
        assert ledger.fees_paid == wad(3_000)
        assert ledger.charge_payable(FIXED, wad(3_000)) == 0
        assert ledger.verify_conservation() == Ok(None)

    def test_charge_payable_capped(self) -> None:
        ledger = _funded(fixed=1)
        ledger.release_margin(FIXED)
        assert ledger.charge_payable(FIXED, wad(5_000)) == wad(1)
        assert ledger.payable_of(FIXED) == 0

    def test_distribute_pool_each_party_own_half(self) -> None:
        ledger = _funded()
        ledger.debit(FIXED, 7)
        assert ledger.distribute_pool() == (4, 3)
        assert ledger.payable_of(FIXED) == 4
        assert ledger.payable_of(FLOATING) == 3
        assert ledger.pool == 0


class TestCloseOutAndWithdraw:
    def test_release_margin(self) -> None:
        ledger = _funded()
        assert ledger.release_margin(FIXED) == Ok(wad(100_000))
        assert ledger.margin_of(FIXED) == 0
        assert ledger.payable_of(FIXED) == wad(100_000)

    def test_take_payable(self) -> None:
        ledger = _funded()
        ledger.release_margin(FIXED)
        assert ledger.take_payable(FIXED) == wad(100_000)
        assert ledger.take_payable(FIXED) == 0
        assert ledger.withdrawn == wad(100_000)

    def test_take_payable_non_party_is_zero(self) -> None:
        assert _funded().take_payable(KEEPER) == 0


class TestConservation:
    def test_holds_through_a_full_cycle(self) -> None:
        ledger = _funded()
        ledger.recognise_surplus(wad(200_010))
        ledger.debit(FIXED, wad(20_000), payee=FLOATING)
        ledger.debit(FLOATING, wad(5_000))
        ledger.pay_fee(wad(5_000))
        for party in (FIXED, FLOATING):
            ledger.release_margin(party)
        ledger.distribute_pool()
        ledger.take_payable(FLOATING)
        assert ledger.verify_conservation() == Ok(None)
        assert ledger.custodied() == ledger.payable_of(FIXED)

    def test_detects_tampering(self) -> None:
        ledger = _funded()
        ledger._margins[FIXED] += 1  # simulate a buggy mutation
        result = ledger.verify_conservation()
        assert isinstance(result, Err)
        assert result.error.law_name == "ledger.value_conserved"

    def test_detects_negative_bucket(self) -> None:
        ledger = _funded()
        ledger._margins[FIXED] = -1
        ledger._deposited -= wad(100_000) + 1
        result = ledger.verify_conservation()
        assert isinstance(result, Err)
        assert result.error.law_name == "ledger.non_negative"

    def test_snapshot_restore_roundtrip(self) -> None:
        ledger = _funded()
        snap = ledger.snapshot()
        ledger.debit(FIXED, wad(1), payee=FLOATING)
        ledger.restore(snap)
        assert ledger.snapshot() == snap
        assert ledger.payable_of(FLOATING) == 0
