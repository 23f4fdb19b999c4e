"""SwapContract: the orchestrator and its external entry points.

Entry points (caller is always explicit):
    initialize          restricted to the two named counterparties
    post_margin         either party, ACTIVE only
    settle_at_maturity  either party, ACTIVE, now >= maturity
    liquidate           anyone, ACTIVE, while a margin requirement is breached
                        or, from maturity, while the payer cannot cover the
                        final mark-to-market
    withdraw            any account with a payable balance

Each entry point is one atomic transaction: the state is snapshotted first
and restored on any Err or raised exception, and the ledger's conservation
law is checked before success is returned. Custody calls are made after all
ledger changes are staged, and at most one outgoing transfer happens per
entry point.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import final

from irswap.core.errors import (
    AlreadyInitializedError,
    AlreadySettledError,
    ArithmeticOverflowError,
    ConservationViolationError,
    CustodyTransferFailedError,
    IllegalTransitionError,
    InvalidPartyError,
    InvalidTermsError,
    NotAPartyError,
    NotMaturedError,
    SwapError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint, require_word
from irswap.infra.protocols import Custody, RateSource
from irswap.ledger.margin import MarginLedger
from irswap.swap.custody import pull, push
from irswap.swap.lifecycle import SwapStatus, check_transition
from irswap.swap.liquidation import LiquidationError, LiquidationOutcome, liquidate
from irswap.swap.settlement import SettlementError, SettlementResult, settle
from irswap.swap.state import SwapState, authorize
from irswap.swap.terms import (
    DEFAULT_PARAMETERS,
    Counterparties,
    PartyPosition,
    PartyRole,
    SwapParameters,
    SwapTerms,
)

_SOURCE = "swap.contract.SwapContract"

type InitError = (
    AlreadyInitializedError
    | AlreadySettledError
    | InvalidPartyError
    | NotAPartyError
    | InvalidTermsError
    | ArithmeticOverflowError
    | CustodyTransferFailedError
)


@final
class SwapContract:
    """One bilateral fixed-for-floating swap between two margined parties."""

    def __init__(
        self,
        address: Address,
        custody: Custody,
        rates: RateSource,
        parameters: SwapParameters = DEFAULT_PARAMETERS,
    ) -> None:
        self._state = SwapState(address=address, parameters=parameters)
        self._custody = custody
        self._rates = rates

    # -- Queries --

    @property
    def address(self) -> Address:
        return self._state.address

    @property
    def status(self) -> SwapStatus:
        return self._state.status

    @property
    def terms(self) -> SwapTerms | None:
        return self._state.terms

    @property
    def close_out(self) -> SettlementResult | None:
        return self._state.close_out

    @property
    def liquidation(self) -> LiquidationOutcome | None:
        return self._state.liquidation

    @property
    def ledger(self) -> MarginLedger | None:
        return self._state.ledger

    def is_party(self, account: Address) -> bool:
        return isinstance(authorize(self._state, account), Ok)

    def positions(self) -> tuple[PartyPosition, ...]:
        """Both parties in (fixed, floating) order; empty before initialization."""
        cps, ledger = self._state.counterparties, self._state.ledger
        if cps is None or ledger is None:
            return ()
        return (
            PartyPosition(
                address=cps.fixed_payer,
                role=PartyRole.FIXED_PAYER,
                margin=ledger.margin_of(cps.fixed_payer),
            ),
            PartyPosition(
                address=cps.floating_payer,
                role=PartyRole.FLOATING_PAYER,
                margin=ledger.margin_of(cps.floating_payer),
            ),
        )

    def margin_of(self, party: Address) -> FixedPoint:
        return self._state.ledger.margin_of(party) if self._state.ledger else 0

    def payable_of(self, account: Address) -> FixedPoint:
        return self._state.ledger.payable_of(account) if self._state.ledger else 0

    # -- Atomicity --

    def _atomically[T, E: SwapError](
        self, op: Callable[[], Ok[T] | Err[E]],
    ) -> Ok[T] | Err[E | ConservationViolationError]:
        """Run op; restore the pre-call snapshot on Err, on a raised exception
        or on a conservation breach. Exceptions are re-raised after restore.
        """
        snap = self._state.snapshot()
        try:
            result = op()
        except BaseException:
            self._state.restore(snap)
            raise
        if isinstance(result, Err):
            self._state.restore(snap)
            return result
        if self._state.ledger is not None:
            check = self._state.ledger.verify_conservation()
            if isinstance(check, Err):
                self._state.restore(snap)
                return check
        return result

    def _require_active(
        self, fn: str,
    ) -> Ok[None] | Err[IllegalTransitionError | AlreadySettledError]:
        """Ok while ACTIVE; AlreadySettled once SETTLED; IllegalTransition before init."""
        match self._state.status:
            case SwapStatus.ACTIVE:
                return Ok(None)
            case SwapStatus.SETTLED:
                return Err(AlreadySettledError(
                    message=f"{fn}: swap is already settled",
                    code="ALREADY_SETTLED",
                    timestamp=UtcDatetime.now(),
                    source=f"{_SOURCE}.{fn}",
                ))
            case SwapStatus.UNINITIALIZED:
                return Err(IllegalTransitionError(
                    message=f"{fn}: swap is not initialized",
                    code="NOT_INITIALIZED",
                    timestamp=UtcDatetime.now(),
                    source=f"{_SOURCE}.{fn}",
                    from_state=SwapStatus.UNINITIALIZED.value,
                    to_state=SwapStatus.ACTIVE.value,
                ))

    # -- Entry points --

    def initialize(
        self,
        caller: Address,
        fixed_payer: Address,
        floating_payer: Address,
        notional: FixedPoint,
        maturity: UtcDatetime,
        now: UtcDatetime,
    ) -> Ok[SwapTerms] | Err[InitError | ConservationViolationError]:
        """Set terms, create both parties and pull their initial margin.

        The two custody pulls are both-or-neither: if the second fails the
        first is refunded.
        """
        match self._state.status:
            case SwapStatus.SETTLED:
                return self._require_active("initialize")  # type: ignore[return-value]
            case SwapStatus.ACTIVE:
                return Err(AlreadyInitializedError(
                    message="Swap is already initialized",
                    code="ALREADY_INITIALIZED",
                    timestamp=UtcDatetime.now(),
                    source=f"{_SOURCE}.initialize",
                ))
            case SwapStatus.UNINITIALIZED:
                pass

        match Counterparties.create(fixed_payer, floating_payer):
            case Err(e):
                return Err(e)
            case Ok(cps):
                pass
        if cps.role_of(caller) is None:
            return Err(NotAPartyError(
                message=f"{caller} is not one of the named counterparties",
                code="NOT_A_PARTY",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.initialize",
                caller=caller.value,
            ))
        match SwapTerms.create(notional, now, maturity, self._state.parameters):
            case Err(e):
                return Err(e)
            case Ok(terms):
                pass
        match terms.initial_margin():
            case Err(e):
                return Err(e)
            case Ok(margin):
                pass

        def op() -> Ok[SwapTerms] | Err[InitError]:
            ledger = MarginLedger(cps.fixed_payer, cps.floating_payer)
            for party in cps.ordered():
                match ledger.deposit(party, margin):
                    case Err(e):
                        return Err(e)
                    case Ok(_):
                        pass
            self._state.terms = terms
            self._state.counterparties = cps
            self._state.ledger = ledger
            self._state.status = SwapStatus.ACTIVE
            return self._pull_initial_margin(cps, margin).map(lambda _: terms)

        return self._atomically(op)

    def _pull_initial_margin(
        self, cps: Counterparties, margin: FixedPoint,
    ) -> Ok[None] | Err[CustodyTransferFailedError]:
        match pull(self._custody, cps.fixed_payer, self.address, margin):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        match pull(self._custody, cps.floating_payer, self.address, margin):
            case Err(e):
                refund = push(self._custody, cps.fixed_payer, margin)
                if isinstance(refund, Err):
                    return Err(replace(
                        e, message=f"{e.message}; refund to {cps.fixed_payer} also failed",
                    ))
                return Err(e)
            case Ok(_):
                return Ok(None)

    def post_margin(
        self, caller: Address, amount: FixedPoint,
    ) -> Ok[FixedPoint] | Err[SwapError]:
        """Top up caller's margin by pulling amount into custody.

        Returns the caller's new margin.
        """
        match self._require_active("post_margin"):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        match authorize(self._state, caller):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        match require_word(amount, "post_margin"):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass

        def op() -> Ok[FixedPoint] | Err[SwapError]:
            ledger = self._state.ledger
            assert ledger is not None  # guaranteed while ACTIVE
            match ledger.deposit(caller, amount):
                case Err(e):
                    return Err(e)
                case Ok(_):
                    pass
            return pull(self._custody, caller, self.address, amount).map(
                lambda _: ledger.margin_of(caller),
            )

        return self._atomically(op)

    def settle_at_maturity(
        self, caller: Address, now: UtcDatetime,
    ) -> Ok[SettlementResult] | Err[SettlementError | AlreadySettledError | NotMaturedError]:
        """Final settlement at maturity_time. Moves the swap to SETTLED."""
        match self._require_active("settle_at_maturity"):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        match authorize(self._state, caller):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        terms = self._state.terms
        assert terms is not None  # guaranteed while ACTIVE
        if now < terms.maturity_time:
            return Err(NotMaturedError(
                message=f"Swap matures at {terms.maturity_time.isoformat()}",
                code="NOT_MATURED",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.settle_at_maturity",
                maturity=terms.maturity_time.isoformat(),
                as_of=now.isoformat(),
            ))

        def op() -> Ok[SettlementResult] | Err[SettlementError | AlreadySettledError]:
            self._recognise_surplus()
            match settle(self._state, self._rates, terms.maturity_time):
                case Err(e):
                    return Err(e)
                case Ok(result):
                    pass
            return self._close(result).map(lambda _: result)

        return self._atomically(op)

    def liquidate(
        self, caller: Address, now: UtcDatetime,
    ) -> Ok[LiquidationOutcome] | Err[LiquidationError | AlreadySettledError | InvalidPartyError]:
        """Force-close a breached position; caller receives the fee."""
        match self._require_active("liquidate"):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        if caller.is_zero:
            return Err(InvalidPartyError(
                message="The zero address cannot act as liquidator",
                code="INVALID_PARTY",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.liquidate",
                party=caller.value,
            ))

        def op() -> Ok[LiquidationOutcome] | Err[LiquidationError | AlreadySettledError]:
            self._recognise_surplus()
            match liquidate(self._state, self._custody, self._rates, caller, now):
                case Err(e):
                    return Err(e)
                case Ok(outcome):
                    pass
            self._state.liquidation = outcome
            return self._close(outcome.settlement).map(lambda _: outcome)

        return self._atomically(op)

    def withdraw(self, caller: Address) -> Ok[FixedPoint] | Err[SwapError]:
        """Pay out caller's whole payable balance. Returns the amount sent."""
        if self._state.ledger is None:
            return self._require_active("withdraw")  # type: ignore[return-value]

        def op() -> Ok[FixedPoint] | Err[SwapError]:
            ledger = self._state.ledger
            assert ledger is not None
            amount = ledger.take_payable(caller)
            if amount == 0:
                return Ok(0)
            return push(self._custody, caller, amount).map(lambda _: amount)

        return self._atomically(op)

    # -- Internals --

    def _recognise_surplus(self) -> None:
        ledger = self._state.ledger
        assert ledger is not None
        ledger.recognise_surplus(self._custody.balance_of(self.address))

    def _close(
        self, result: SettlementResult,
    ) -> Ok[None] | Err[IllegalTransitionError | AlreadySettledError]:
        match check_transition(self._state.status, SwapStatus.SETTLED):
            case Err(e):
                return Err(e)
            case Ok(_):
                pass
        self._state.status = SwapStatus.SETTLED
        self._state.close_out = result
        return Ok(None)
