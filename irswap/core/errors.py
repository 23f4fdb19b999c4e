"""Error values for the swap engine. No domain function raises for these.

Every error is a frozen dataclass that can be matched on, serialized and
stored. Base class SwapError; one @final subclass per failure kind.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from irswap.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class SwapError:
    """Base error value. NOT @final — has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> SwapError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


# ---------------------------------------------------------------------------
# Initialization and authorization
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class InvalidPartyError(SwapError):
    """A counterparty address is zero or both legs name the same account."""

    party: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "party": self.party}


@final
@dataclass(frozen=True, slots=True)
class InvalidTermsError(SwapError):
    """Notional is zero or maturity does not lie after creation."""

    field: str
    actual_value: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "field": self.field, "actual_value": self.actual_value}


@final
@dataclass(frozen=True, slots=True)
class AlreadyInitializedError(SwapError):
    """Initialization was attempted on a swap that already has terms."""


@final
@dataclass(frozen=True, slots=True)
class NotAPartyError(SwapError):
    """Caller is not one of the two counterparties."""

    caller: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "caller": self.caller}


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class DivisionByZeroError(SwapError):
    """Fixed-point division by zero."""

    dividend: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "dividend": self.dividend}


@final
@dataclass(frozen=True, slots=True)
class ArithmeticOverflowError(SwapError):
    """A result (or an intermediate) left the unsigned 256-bit word range."""

    operation: str
    operands: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "operation": self.operation,
            "operands": list(self.operands),
        }


# ---------------------------------------------------------------------------
# Margin and settlement
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class InsufficientMarginError(SwapError):
    """A debit exceeds the margin (or pool funds) available to cover it."""

    party: str
    required: str
    available: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "party": self.party,
            "required": self.required,
            "available": self.available,
        }


@final
@dataclass(frozen=True, slots=True)
class MarginShortfallError(SwapError):
    """Settlement could not be paid from the payer's margin.

    Signals that the position must be topped up or force-liquidated; the
    settlement is never truncated.
    """

    payer: str
    mark_to_market: str
    margin: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "payer": self.payer,
            "mark_to_market": self.mark_to_market,
            "margin": self.margin,
        }


@final
@dataclass(frozen=True, slots=True)
class NotEligibleError(SwapError):
    """Liquidation attempted while both margins meet the requirement."""

    threshold: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "threshold": self.threshold}


@final
@dataclass(frozen=True, slots=True)
class ConservationViolationError(SwapError):
    """A ledger conservation law was violated."""

    law_name: str
    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "law_name": self.law_name,
            "expected": self.expected,
            "actual": self.actual,
        }


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class AlreadySettledError(SwapError):
    """The swap has reached its terminal state."""


@final
@dataclass(frozen=True, slots=True)
class NotMaturedError(SwapError):
    """Maturity settlement requested before maturity_time."""

    maturity: str
    as_of: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "maturity": self.maturity, "as_of": self.as_of}


@final
@dataclass(frozen=True, slots=True)
class IllegalTransitionError(SwapError):
    """State transition is not allowed."""

    from_state: str
    to_state: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "from_state": self.from_state,
            "to_state": self.to_state,
        }


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class CustodyTransferFailedError(SwapError):
    """The custody collaborator rejected or failed a transfer."""

    operation: str
    destination: str
    amount: str

    def to_dict(self) -> dict[str, object]:
        return {
            **SwapError.to_dict(self),
            "operation": self.operation,
            "destination": self.destination,
            "amount": self.amount,
        }


@final
@dataclass(frozen=True, slots=True)
class RateUnavailableError(SwapError):
    """The variable-rate source could not supply an accrued rate."""

    start: str
    end: str

    def to_dict(self) -> dict[str, object]:
        return {**SwapError.to_dict(self), "start": self.start, "end": self.end}
