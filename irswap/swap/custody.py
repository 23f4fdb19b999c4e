"""Boundary to the custody collaborator.

A transfer that returns False or raises becomes
Err(CustodyTransferFailedError) here and nowhere else.
"""

from __future__ import annotations

from irswap.core.errors import CustodyTransferFailedError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint
from irswap.infra.protocols import Custody


def _failed(
    operation: str, destination: Address, amount: FixedPoint, detail: str,
) -> Err[CustodyTransferFailedError]:
    return Err(CustodyTransferFailedError(
        message=f"Custody {operation} of {amount} to {destination} failed: {detail}",
        code="CUSTODY_TRANSFER_FAILED",
        timestamp=UtcDatetime.now(),
        source=f"swap.custody.{operation}",
        operation=operation,
        destination=destination.value,
        amount=str(amount),
    ))


def push(
    custody: Custody, destination: Address, amount: FixedPoint,
) -> Ok[None] | Err[CustodyTransferFailedError]:
    """Send amount from the swap's custody account to destination."""
    try:
        accepted = custody.transfer(destination, amount)
    except Exception as exc:  # noqa: BLE001
        return _failed("transfer", destination, amount, repr(exc))
    if not accepted:
        return _failed("transfer", destination, amount, "rejected")
    return Ok(None)


def pull(
    custody: Custody, source: Address, destination: Address, amount: FixedPoint,
) -> Ok[None] | Err[CustodyTransferFailedError]:
    """Pull amount from source into destination under a prior approval."""
    try:
        accepted = custody.transfer_from(source, destination, amount)
    except Exception as exc:  # noqa: BLE001
        return _failed("transfer_from", destination, amount, repr(exc))
    if not accepted:
        return _failed("transfer_from", destination, amount, f"rejected for {source}")
    return Ok(None)
