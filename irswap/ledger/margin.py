"""Margin ledger: the only owner of the two parties' posted margin.

Buckets held for one swap, all WAD-scaled unsigned ints:
    margin[p]    collateral posted by counterparty p
    payable[a]   external balance credited to account a, awaiting withdrawal
    pool         custodied funds not allocated to anyone (fees, surplus)

Conservation law:
    sum(margin) + sum(payable) + pool + withdrawn + fees_paid
        == deposited + surplus_recognised

Non-negativity: every bucket is >= 0 by construction. Every
subtraction is preceded by an explicit sufficiency check; nothing relies on
unsigned underflow.

MarginLedger is @final but NOT a dataclass — it holds mutable state. Callers
take a snapshot() before a multi-step operation and restore() it on failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from irswap.core.errors import (
    ArithmeticOverflowError,
    ConservationViolationError,
    InsufficientMarginError,
    NotAPartyError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint, checked_add, require_word

_SOURCE = "ledger.margin.MarginLedger"

POOL = "pool"


@final
@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Complete copy of ledger state for rollback."""

    margins: tuple[tuple[Address, FixedPoint], ...]
    payables: tuple[tuple[Address, FixedPoint], ...]
    pool: FixedPoint
    deposited: FixedPoint
    withdrawn: FixedPoint
    fees_paid: FixedPoint
    surplus_recognised: FixedPoint


def _not_a_party(party: Address, fn: str) -> Err[NotAPartyError]:
    return Err(NotAPartyError(
        message=f"{party} holds no margin in this swap",
        code="NOT_A_PARTY",
        timestamp=UtcDatetime.now(),
        source=f"{_SOURCE}.{fn}",
        caller=party.value,
    ))


@final
class MarginLedger:
    """Margin, payable and pool balances for a single two-party swap."""

    def __init__(self, fixed_payer: Address, floating_payer: Address) -> None:
        self._parties: tuple[Address, Address] = (fixed_payer, floating_payer)
        self._margins: dict[Address, FixedPoint] = {fixed_payer: 0, floating_payer: 0}
        self._payables: dict[Address, FixedPoint] = {}
        self._pool: FixedPoint = 0
        self._deposited: FixedPoint = 0
        self._withdrawn: FixedPoint = 0
        self._fees_paid: FixedPoint = 0
        self._surplus_recognised: FixedPoint = 0

    # -- Queries --

    def is_party(self, account: Address) -> bool:
        return account in self._margins

    def margin_of(self, party: Address) -> FixedPoint:
        return self._margins.get(party, 0)

    def payable_of(self, account: Address) -> FixedPoint:
        return self._payables.get(account, 0)

    @property
    def pool(self) -> FixedPoint:
        return self._pool

    @property
    def deposited(self) -> FixedPoint:
        return self._deposited

    @property
    def withdrawn(self) -> FixedPoint:
        return self._withdrawn

    @property
    def fees_paid(self) -> FixedPoint:
        return self._fees_paid

    @property
    def surplus_recognised(self) -> FixedPoint:
        return self._surplus_recognised

    def total(self) -> FixedPoint:
        """Sum of both parties' margin."""
        return sum(self._margins.values())

    def custodied(self) -> FixedPoint:
        """Funds the ledger says are held in custody: margin + payable + pool."""
        return self.total() + sum(self._payables.values()) + self._pool

    # -- Margin mutations --

    def deposit(
        self, party: Address, amount: FixedPoint,
    ) -> Ok[None] | Err[NotAPartyError | ArithmeticOverflowError]:
        """Record funds pulled into custody as margin for party."""
        match self.credit(party, amount):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        self._deposited += amount
        return Ok(None)

    def credit(
        self, party: Address, amount: FixedPoint,
    ) -> Ok[None] | Err[NotAPartyError | ArithmeticOverflowError]:
        """Increase party's margin."""
        if party not in self._margins:
            return _not_a_party(party, "credit")
        match checked_add(self._margins[party], amount):
            case Err(e):
                return Err(e)
            case Ok(new_margin):
                self._margins[party] = new_margin
        return Ok(None)

    def debit(
        self,
        party: Address,
        amount: FixedPoint,
        *,
        payee: Address | None = None,
    ) -> Ok[None] | Err[InsufficientMarginError | NotAPartyError | ArithmeticOverflowError]:
        """Reduce party's margin by amount.

        The debited value is credited to payee's external payable balance, or
        to the unallocated pool when no payee is named. Fails without any
        change if margin < amount.
        """
        if party not in self._margins:
            return _not_a_party(party, "debit")
        match require_word(amount, "debit"):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        available = self._margins[party]
        if available < amount:
            return Err(InsufficientMarginError(
                message=f"Margin of {party} ({available}) does not cover {amount}",
                code="INSUFFICIENT_MARGIN",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.debit",
                party=party.value,
                required=str(amount),
                available=str(available),
            ))
        if payee is not None:
            match checked_add(self.payable_of(payee), amount):
                case Err(e):
                    return Err(e)
                case Ok(new_payable):
                    self._payables[payee] = new_payable
        else:
            self._pool += amount
        self._margins[party] = available - amount
        return Ok(None)

    def release_margin(self, party: Address) -> Ok[FixedPoint] | Err[NotAPartyError]:
        """Move party's entire margin to its own payable balance (close-out)."""
        if party not in self._margins:
            return _not_a_party(party, "release_margin")
        amount = self._margins[party]
        self._margins[party] = 0
        self._payables[party] = self.payable_of(party) + amount
        return Ok(amount)

    # -- Pool mutations --

    def recognise_surplus(self, observed_balance: FixedPoint) -> FixedPoint:
        """Bring custody funds the ledger does not know about into the pool.

        Returns the amount recognised. A custody balance below the ledger's
        view is not corrected here; it surfaces when a transfer fails.
        """
        held = self.custodied()
        if observed_balance <= held:
            return 0
        surplus = observed_balance - held
        self._pool += surplus
        self._surplus_recognised += surplus
        return surplus

    def pay_fee(self, amount: FixedPoint) -> Ok[None] | Err[InsufficientMarginError]:
        """Fund an outgoing fee from the pool."""
        if amount > self._pool:
            return Err(InsufficientMarginError(
                message=f"Pool ({self._pool}) cannot fund fee {amount}",
                code="INSUFFICIENT_POOL",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.pay_fee",
                party=POOL,
                required=str(amount),
                available=str(self._pool),
            ))
        self._pool -= amount
        self._fees_paid += amount
        return Ok(None)

    def charge_payable(self, account: Address, amount: FixedPoint) -> FixedPoint:
        """Fund up to amount of an outgoing fee from account's payable balance.

        Takes min(amount, payable); returns what was taken.
        """
        taken = min(amount, self.payable_of(account))
        if taken:
            self._payables[account] = self._payables[account] - taken
            self._fees_paid += taken
        return taken

    def distribute_pool(self) -> tuple[FixedPoint, FixedPoint]:
        """Split the pool between the two parties' payable balances.

        Each party receives its own half; an odd smallest unit goes to the
        fixed payer. Returns (fixed_share, floating_share).
        """
        fixed_payer, floating_payer = self._parties
        floating_share = self._pool // 2
        fixed_share = self._pool - floating_share
        self._payables[fixed_payer] = self.payable_of(fixed_payer) + fixed_share
        self._payables[floating_payer] = self.payable_of(floating_payer) + floating_share
        self._pool = 0
        return fixed_share, floating_share

    # -- Withdrawal --

    def take_payable(self, account: Address) -> FixedPoint:
        """Zero account's payable balance and record it as withdrawn."""
        amount = self._payables.pop(account, 0)
        self._withdrawn += amount
        return amount

    # -- Invariants --

    def verify_conservation(self) -> Ok[None] | Err[ConservationViolationError]:
        """Check non-negativity of every bucket, then value conservation."""
        negative = [
            str(k) for k, v in (*self._margins.items(), *self._payables.items()) if v < 0
        ]
        if negative or self._pool < 0:
            return Err(ConservationViolationError(
                message=f"Negative balance for {negative or [POOL]}",
                code="NEGATIVE_BALANCE",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.verify_conservation",
                law_name="ledger.non_negative",
                expected=">= 0",
                actual=", ".join(negative) or POOL,
            ))
        held = self.custodied() + self._withdrawn + self._fees_paid
        funded = self._deposited + self._surplus_recognised
        if held != funded:
            return Err(ConservationViolationError(
                message="Ledger value not conserved",
                code="CONSERVATION_VIOLATION",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.verify_conservation",
                law_name="ledger.value_conserved",
                expected=str(funded),
                actual=str(held),
            ))
        return Ok(None)

    # -- Rollback --

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            margins=tuple(self._margins.items()),
            payables=tuple(self._payables.items()),
            pool=self._pool,
            deposited=self._deposited,
            withdrawn=self._withdrawn,
            fees_paid=self._fees_paid,
            surplus_recognised=self._surplus_recognised,
        )

    def restore(self, snap: LedgerSnapshot) -> None:
        self._margins = dict(snap.margins)
        self._payables = dict(snap.payables)
        self._pool = snap.pool
        self._deposited = snap.deposited
        self._withdrawn = snap.withdrawn
        self._fees_paid = snap.fees_paid
        self._surplus_recognised = snap.surplus_recognised
