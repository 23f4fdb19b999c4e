"""irswap.workflow — Temporal.io swap lifecycle workflow."""

from irswap.workflow.types import LifecycleOutcome as LifecycleOutcome
from irswap.workflow.types import LiquidationCheckInput as LiquidationCheckInput
from irswap.workflow.types import LiquidationCheckOutput as LiquidationCheckOutput
from irswap.workflow.types import MaturitySettlementInput as MaturitySettlementInput
from irswap.workflow.types import MaturitySettlementOutput as MaturitySettlementOutput
from irswap.workflow.types import SwapLifecycleInput as SwapLifecycleInput
from irswap.workflow.types import SwapLifecycleResult as SwapLifecycleResult
