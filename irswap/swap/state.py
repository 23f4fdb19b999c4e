"""SwapState: the single owned record every entry point mutates.

There is no ambient or module-level swap state. Engines receive the state by
reference; the contract snapshots it before each entry point and restores
the snapshot if the entry point fails, so no partial mutation is ever
observable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from irswap.core.errors import IllegalTransitionError, NotAPartyError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.ledger.margin import LedgerSnapshot, MarginLedger
from irswap.swap.lifecycle import SwapStatus
from irswap.swap.liquidation import LiquidationOutcome
from irswap.swap.settlement import SettlementResult
from irswap.swap.terms import DEFAULT_PARAMETERS, Counterparties, SwapParameters, SwapTerms


@final
@dataclass(frozen=True, slots=True)
class StateSnapshot:
    status: SwapStatus
    terms: SwapTerms | None
    counterparties: Counterparties | None
    ledger: LedgerSnapshot | None
    close_out: SettlementResult | None
    liquidation: LiquidationOutcome | None


@final
@dataclass(slots=True)
class SwapState:
    """Mutable state of one swap instance.

    address is the swap's own custody account. terms, counterparties and
    ledger are None until initialization.
    """

    address: Address
    parameters: SwapParameters = DEFAULT_PARAMETERS
    status: SwapStatus = SwapStatus.UNINITIALIZED
    terms: SwapTerms | None = None
    counterparties: Counterparties | None = None
    ledger: MarginLedger | None = None
    close_out: SettlementResult | None = None
    liquidation: LiquidationOutcome | None = None

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            status=self.status,
            terms=self.terms,
            counterparties=self.counterparties,
            ledger=self.ledger.snapshot() if self.ledger is not None else None,
            close_out=self.close_out,
            liquidation=self.liquidation,
        )

    def restore(self, snap: StateSnapshot) -> None:
        self.status = snap.status
        self.terms = snap.terms
        self.counterparties = snap.counterparties
        if snap.ledger is None:
            self.ledger = None
        elif self.ledger is not None:
            self.ledger.restore(snap.ledger)
        self.close_out = snap.close_out
        self.liquidation = snap.liquidation

    def active(
        self, source: str,
    ) -> Ok[tuple[SwapTerms, Counterparties, MarginLedger]] | Err[IllegalTransitionError]:
        """Terms, counterparties and ledger of an initialized swap."""
        if self.terms is None or self.counterparties is None or self.ledger is None:
            return Err(IllegalTransitionError(
                message="Swap is not initialized",
                code="NOT_INITIALIZED",
                timestamp=UtcDatetime.now(),
                source=source,
                from_state=self.status.value,
                to_state=SwapStatus.ACTIVE.value,
            ))
        return Ok((self.terms, self.counterparties, self.ledger))


def authorize(state: SwapState, caller: Address) -> Ok[None] | Err[NotAPartyError]:
    """Party predicate: caller must be one of the two stored counterparties."""
    if state.counterparties is not None and state.counterparties.role_of(caller) is not None:
        return Ok(None)
    return Err(NotAPartyError(
        message=f"{caller} is not a party to this swap",
        code="NOT_A_PARTY",
        timestamp=UtcDatetime.now(),
        source="swap.state.authorize",
        caller=caller.value,
    ))
