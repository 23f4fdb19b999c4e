"""Core value types: UtcDatetime (every Timestamp) and Address (every Identity)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar, final

from irswap.core.result import Err, Ok


@final
@dataclass(frozen=True, slots=True, order=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))

    def isoformat(self) -> str:
        return self.value.isoformat()


_ZERO_ADDRESS_VALUE = "0x" + "0" * 40


@final
@dataclass(frozen=True, slots=True)
class Address:
    """Opaque, payable account reference for a party, liquidator or contract.

    The zero address is a legal value (it is how an unset party arrives at the
    boundary) but is never accepted as a swap counterparty.
    """

    value: str

    ZERO: ClassVar[Address]

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise TypeError(f"Address requires a non-empty string, got {self.value!r}")

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not isinstance(raw, str) or not raw.strip():
            return Err(f"Address requires a non-empty string, got {raw!r}")
        return Ok(Address(value=raw.strip()))

    @property
    def is_zero(self) -> bool:
        return self.value.lower() == _ZERO_ADDRESS_VALUE

    def __str__(self) -> str:
        return self.value


Address.ZERO = Address(value=_ZERO_ADDRESS_VALUE)
