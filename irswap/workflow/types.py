"""Workflow data types for the swap lifecycle.

All types: @final @dataclass(frozen=True, slots=True).
Amounts cross the wire as plain WAD ints; timestamps as UtcDatetime.
Activity outputs carry either a result or an error string, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import final

from irswap.core.types import Address, UtcDatetime
from irswap.infra.config import DEFAULT_MONITOR_CONFIG


class LifecycleOutcome(Enum):
    """Terminal states of the lifecycle workflow."""

    MATURED = "Matured"
    LIQUIDATED = "Liquidated"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Workflow input / result
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class SwapLifecycleInput:
    """One swap to watch until it terminates.

    swap_id doubles as the Temporal Workflow ID. settler must be one of the
    counterparties; liquidator receives any liquidation fee.
    """

    swap_id: str
    maturity: UtcDatetime
    settler: Address
    liquidator: Address
    poll_interval: timedelta = DEFAULT_MONITOR_CONFIG.poll_interval

    def __post_init__(self) -> None:
        if not self.swap_id:
            raise TypeError("SwapLifecycleInput.swap_id must be non-empty")
        if self.poll_interval <= timedelta(0):
            raise TypeError(
                f"SwapLifecycleInput.poll_interval must be > 0, got {self.poll_interval}"
            )


@final
@dataclass(frozen=True, slots=True)
class SwapLifecycleResult:
    """Terminal result of the lifecycle workflow."""

    swap_id: str
    outcome: LifecycleOutcome
    settlement_amount: int = 0
    liquidation_fee: int = 0
    checks_run: int = 0
    reason: str | None = None


# ---------------------------------------------------------------------------
# Activity inputs / outputs
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class LiquidationCheckInput:
    swap_id: str
    liquidator: Address
    as_of: UtcDatetime


@final
@dataclass(frozen=True, slots=True)
class LiquidationCheckOutput:
    """Result of one margin check.

    liquidated: this check closed the swap. already_settled: the swap was
    closed before the check ran. Both False with no error: margins healthy.
    """

    liquidated: bool = False
    already_settled: bool = False
    fee: int = 0
    settlement_amount: int = 0
    error: str | None = None

    def __post_init__(self) -> None:
        if self.error is not None and (self.liquidated or self.already_settled):
            raise TypeError("LiquidationCheckOutput cannot carry an error and an outcome")


@final
@dataclass(frozen=True, slots=True)
class MaturitySettlementInput:
    swap_id: str
    settler: Address
    as_of: UtcDatetime


@final
@dataclass(frozen=True, slots=True)
class MaturitySettlementOutput:
    """Wrapper for the maturity settlement result or error.

    margin_shortfall marks an error caused by the payer's margin not covering
    the final mark-to-market; the swap is then open to liquidation.
    """

    settlement_amount: int | None = None
    direction: str | None = None
    error: str | None = None
    margin_shortfall: bool = False

    def __post_init__(self) -> None:
        if (self.settlement_amount is None) == (self.error is None):
            raise TypeError(
                "MaturitySettlementOutput must have exactly one of settlement_amount or error"
            )
