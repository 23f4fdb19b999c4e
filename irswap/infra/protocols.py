"""Collaborator protocols: custody (token transfers) and the variable-rate feed.

Domain code depends on these abstractions; adapters in infra/ implement them.
Both are synchronous and fallible. A failure aborts the calling entry point
with no margin mutation retained.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from irswap.core.errors import RateUnavailableError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint


@runtime_checkable
class Custody(Protocol):
    """Token custody, acting as the swap's own account.

    transfer() moves funds out of the swap's account; transfer_from() pulls
    funds under an allowance the source granted to the swap. A False return
    or a raised exception is a hard failure.
    """

    def approve(self, spender: Address, amount: FixedPoint) -> bool: ...

    def transfer(self, to: Address, amount: FixedPoint) -> bool: ...

    def transfer_from(self, source: Address, to: Address, amount: FixedPoint) -> bool: ...

    def balance_of(self, holder: Address) -> FixedPoint: ...


@runtime_checkable
class RateSource(Protocol):
    """Time-indexed variable-rate feed.

    rate_from_to(start, end) is the accrued variable rate over [start, end],
    WAD-scaled, non-decreasing in end for a fixed start.
    """

    def rate_from_to(
        self, start: UtcDatetime, end: UtcDatetime,
    ) -> Ok[FixedPoint] | Err[RateUnavailableError]: ...
