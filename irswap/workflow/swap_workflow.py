"""Durable workflow for one swap from initialization to termination.

Steps: (check_liquidation -> sleep) until maturity -> settle_swap_at_maturity.
A liquidation during the polling phase ends the workflow early. If the
payer cannot cover the final mark-to-market, one more liquidation check
closes the swap at maturity.

Determinism contract: this module contains NO I/O, NO randomness,
NO system clock access (uses workflow.now()), NO mutable globals.
All interaction with the swap is delegated to Activities.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from irswap.core.types import UtcDatetime
    from irswap.infra.config import DEFAULT_MONITOR_CONFIG
    from irswap.workflow.activities import SwapActivities
    from irswap.workflow.types import (
        LifecycleOutcome,
        LiquidationCheckInput,
        MaturitySettlementInput,
        SwapLifecycleInput,
        SwapLifecycleResult,
    )

ACTIVITY_TIMEOUT: timedelta = DEFAULT_MONITOR_CONFIG.activity_timeout

# -- Retry policies --

CHECK_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=2),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=30),
    maximum_attempts=DEFAULT_MONITOR_CONFIG.max_attempts,
)

SETTLEMENT_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=2),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=60),
    maximum_attempts=DEFAULT_MONITOR_CONFIG.max_attempts,
)


def _workflow_utc_now() -> UtcDatetime:
    """Replay-safe UTC timestamp from Temporal's logical clock.

    The ONLY way to get the current time in workflow code.
    """
    return UtcDatetime(value=workflow.now())


@workflow.defn(name="SwapLifecycle")
class SwapLifecycleWorkflow:
    """Watch one swap until it is liquidated or settles at maturity.

    Invariants maintained:
    - Every run reaches exactly one terminal outcome
    - Maturity settlement is attempted at most once, never before maturity
    - No check is issued after a check reports the swap closed
    """

    def __init__(self) -> None:
        self._status: str = "STARTED"
        self._checks_run: int = 0

    # -- Queries --

    @workflow.query
    def get_status(self) -> str:
        """Current workflow phase."""
        return self._status

    @workflow.query
    def get_checks_run(self) -> int:
        return self._checks_run

    # -- Main workflow --

    @workflow.run
    async def run(self, inp: SwapLifecycleInput) -> SwapLifecycleResult:
        """Poll for liquidation until maturity, then settle."""
        workflow.logger.info(
            "Monitoring swap %s until %s", inp.swap_id, inp.maturity.isoformat(),
        )

        # --- Phase 1: liquidation monitoring ---
        self._status = "MONITORING"
        while (now := _workflow_utc_now()) < inp.maturity:
            check = await workflow.execute_activity_method(
                SwapActivities.check_liquidation,
                LiquidationCheckInput(
                    swap_id=inp.swap_id, liquidator=inp.liquidator, as_of=now,
                ),
                start_to_close_timeout=ACTIVITY_TIMEOUT,
                retry_policy=CHECK_RETRY,
            )
            self._checks_run += 1
            if check.liquidated:
                self._status = "LIQUIDATED"
                workflow.logger.info(
                    "Swap %s liquidated, fee %d", inp.swap_id, check.fee,
                )
                return SwapLifecycleResult(
                    swap_id=inp.swap_id,
                    outcome=LifecycleOutcome.LIQUIDATED,
                    settlement_amount=check.settlement_amount,
                    liquidation_fee=check.fee,
                    checks_run=self._checks_run,
                )
            if check.already_settled:
                self._status = "FAILED"
                return SwapLifecycleResult(
                    swap_id=inp.swap_id,
                    outcome=LifecycleOutcome.FAILED,
                    checks_run=self._checks_run,
                    reason="Swap was closed outside this workflow",
                )
            if check.error is not None:
                # A failed check leaves the swap untouched; retry next poll.
                workflow.logger.warning(
                    "Liquidation check for swap %s failed: %s",
                    inp.swap_id, check.error,
                )
            remaining = inp.maturity.value - workflow.now()
            if remaining > timedelta(0):
                await workflow.sleep(min(inp.poll_interval, remaining))

        # --- Phase 2: maturity settlement ---
        self._status = "SETTLING"
        settlement = await workflow.execute_activity_method(
            SwapActivities.settle_swap_at_maturity,
            MaturitySettlementInput(
                swap_id=inp.swap_id, settler=inp.settler, as_of=_workflow_utc_now(),
            ),
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=SETTLEMENT_RETRY,
        )
        if settlement.margin_shortfall:
            # An uncovered payer at maturity is liquidatable.
            workflow.logger.warning(
                "Swap %s short at maturity, liquidating: %s", inp.swap_id, settlement.error,
            )
            check = await workflow.execute_activity_method(
                SwapActivities.check_liquidation,
                LiquidationCheckInput(
                    swap_id=inp.swap_id, liquidator=inp.liquidator, as_of=_workflow_utc_now(),
                ),
                start_to_close_timeout=ACTIVITY_TIMEOUT,
                retry_policy=CHECK_RETRY,
            )
            self._checks_run += 1
            if check.liquidated:
                self._status = "LIQUIDATED"
                return SwapLifecycleResult(
                    swap_id=inp.swap_id,
                    outcome=LifecycleOutcome.LIQUIDATED,
                    settlement_amount=check.settlement_amount,
                    liquidation_fee=check.fee,
                    checks_run=self._checks_run,
                )
        if settlement.error is not None:
            self._status = "FAILED"
            return SwapLifecycleResult(
                swap_id=inp.swap_id,
                outcome=LifecycleOutcome.FAILED,
                checks_run=self._checks_run,
                reason=f"Maturity settlement failed: {settlement.error}",
            )

        assert settlement.settlement_amount is not None
        self._status = "MATURED"
        return SwapLifecycleResult(
            swap_id=inp.swap_id,
            outcome=LifecycleOutcome.MATURED,
            settlement_amount=settlement.settlement_amount,
            checks_run=self._checks_run,
        )
