"""Activity implementations for the swap lifecycle workflow.

Activities are thin wrappers over SwapContract entry points. All domain logic
lives in irswap.swap; an activity only looks the swap up, calls one entry
point with the workflow's logical time, and flattens the Result into a
frozen-dataclass output.

Each activity:
- Is an @activity.defn method of SwapActivities, bound to one SwapBook
- Takes a single frozen-dataclass input
- Returns a frozen-dataclass output with an optional error field
- Is idempotent: once the swap is SETTLED a repeat reports already_settled
  (check) or an AlreadySettled error (maturity) and moves no funds
"""

from __future__ import annotations

from typing import final

from temporalio import activity

from irswap.core.errors import AlreadySettledError, MarginShortfallError, NotEligibleError
from irswap.core.result import Err, Ok
from irswap.swap.contract import SwapContract
from irswap.workflow.types import (
    LiquidationCheckInput,
    LiquidationCheckOutput,
    MaturitySettlementInput,
    MaturitySettlementOutput,
)


@final
class SwapBook:
    """In-process registry of live swaps by swap id."""

    def __init__(self) -> None:
        self._swaps: dict[str, SwapContract] = {}

    def register(self, swap_id: str, contract: SwapContract) -> None:
        if swap_id in self._swaps:
            raise ValueError(f"Swap {swap_id!r} is already registered")
        self._swaps[swap_id] = contract

    def get(self, swap_id: str) -> SwapContract | None:
        return self._swaps.get(swap_id)

    def __contains__(self, swap_id: object) -> bool:
        return swap_id in self._swaps

    def __len__(self) -> int:
        return len(self._swaps)


class SwapActivities:
    """Activities bound to a SwapBook. Register the bound methods on a Worker."""

    def __init__(self, book: SwapBook) -> None:
        self._book = book

    @activity.defn(name="check_liquidation")
    async def check_liquidation(self, inp: LiquidationCheckInput) -> LiquidationCheckOutput:
        """Liquidate the swap if either margin is below the requirement.

        Timeout: 30s | Retries: 3
        """
        contract = self._book.get(inp.swap_id)
        if contract is None:
            return LiquidationCheckOutput(error=f"Unknown swap {inp.swap_id}")

        match contract.liquidate(inp.liquidator, inp.as_of):
            case Ok(outcome):
                activity.logger.info(
                    "Liquidated swap %s: breached=%s fee=%d",
                    inp.swap_id,
                    [p.value for p in outcome.breached],
                    outcome.fee,
                )
                return LiquidationCheckOutput(
                    liquidated=True,
                    fee=outcome.fee,
                    settlement_amount=outcome.settlement.mark_to_market,
                )
            case Err(NotEligibleError()):
                activity.logger.debug("Swap %s margins healthy", inp.swap_id)
                return LiquidationCheckOutput()
            case Err(AlreadySettledError()):
                return LiquidationCheckOutput(already_settled=True)
            case Err(e):
                activity.logger.warning(
                    "Liquidation check failed for swap %s: %s (%s)",
                    inp.swap_id, e.message, e.code,
                )
                return LiquidationCheckOutput(error=f"{e.code}: {e.message}")

    @activity.defn(name="settle_swap_at_maturity")
    async def settle_swap_at_maturity(
        self, inp: MaturitySettlementInput,
    ) -> MaturitySettlementOutput:
        """Final settlement at maturity.

        Timeout: 30s | Retries: 3
        """
        contract = self._book.get(inp.swap_id)
        if contract is None:
            return MaturitySettlementOutput(error=f"Unknown swap {inp.swap_id}")

        match contract.settle_at_maturity(inp.settler, inp.as_of):
            case Ok(result):
                activity.logger.info(
                    "Settled swap %s at maturity: %s %d",
                    inp.swap_id, result.direction.value, result.mark_to_market,
                )
                return MaturitySettlementOutput(
                    settlement_amount=result.mark_to_market,
                    direction=result.direction.value,
                )
            case Err(MarginShortfallError() as e):
                activity.logger.warning(
                    "Swap %s cannot settle at maturity, payer %s is short: %s",
                    inp.swap_id, e.payer, e.message,
                )
                return MaturitySettlementOutput(
                    error=f"{e.code}: {e.message}", margin_shortfall=True,
                )
            case Err(e):
                activity.logger.warning(
                    "Maturity settlement failed for swap %s: %s (%s)",
                    inp.swap_id, e.message, e.code,
                )
                return MaturitySettlementOutput(error=f"{e.code}: {e.message}")
