"""Swap lifecycle state machine.

UNINITIALIZED -> ACTIVE   initialize()
ACTIVE        -> SETTLED  settle_at_maturity() or a terminating liquidate()

SETTLED is terminal. Withdrawals are not transitions and are allowed in
ACTIVE and SETTLED.
"""

from __future__ import annotations

from enum import Enum

from irswap.core.errors import AlreadySettledError, IllegalTransitionError
from irswap.core.result import Err, Ok
from irswap.core.types import UtcDatetime


class SwapStatus(Enum):
    UNINITIALIZED = "Uninitialized"
    ACTIVE = "Active"
    SETTLED = "Settled"


type TransitionTable = frozenset[tuple[SwapStatus, SwapStatus]]

SWAP_TRANSITIONS: TransitionTable = frozenset({
    (SwapStatus.UNINITIALIZED, SwapStatus.ACTIVE),
    (SwapStatus.ACTIVE, SwapStatus.SETTLED),
})


def check_transition(
    from_state: SwapStatus,
    to_state: SwapStatus,
    transitions: TransitionTable = SWAP_TRANSITIONS,
) -> Ok[None] | Err[IllegalTransitionError | AlreadySettledError]:
    """Validate a transition. Anything out of SETTLED is AlreadySettled."""
    if (from_state, to_state) in transitions:
        return Ok(None)
    if from_state is SwapStatus.SETTLED:
        return Err(AlreadySettledError(
            message="Swap is already settled",
            code="ALREADY_SETTLED",
            timestamp=UtcDatetime.now(),
            source="swap.lifecycle.check_transition",
        ))
    return Err(IllegalTransitionError(
        message=f"Invalid transition: {from_state.value} -> {to_state.value}",
        code="ILLEGAL_TRANSITION",
        timestamp=UtcDatetime.now(),
        source="swap.lifecycle.check_transition",
        from_state=from_state.value,
        to_state=to_state.value,
    ))
