"""Variable-rate feed built from periodic fixings.

Each fixing is an annualised rate (WAD) that applies for one accrual period.
Periods are consecutive month-based windows from an anchor date, generated
with relativedelta so month ends roll the same way an IRS schedule does.

Accrual over [start, end] is the sum over overlapping periods of
    rate * overlap_seconds / YEAR_SECONDS
in WAD arithmetic, rounding toward zero in each period.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import final

from dateutil.relativedelta import relativedelta

from irswap.core.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    RateUnavailableError,
)
from irswap.core.result import Err, Ok
from irswap.core.types import UtcDatetime
from irswap.core.wad import FixedPoint, checked_add, is_word, wad_div, wad_mul

YEAR_SECONDS: int = 365 * 24 * 3600


def generate_fixing_periods(
    anchor: datetime, months: int, count: int,
) -> tuple[tuple[datetime, datetime], ...]:
    """count consecutive (period_start, period_end) windows of months each."""
    if months <= 0:
        raise ValueError(f"months must be > 0, got {months}")
    periods: list[tuple[datetime, datetime]] = []
    for i in range(count):
        # Offset from the anchor, not chained, so month-end anchors do not drift.
        start = anchor + relativedelta(months=months * i)
        end = anchor + relativedelta(months=months * (i + 1))
        periods.append((start, end))
    return tuple(periods)


def _seconds(delta: timedelta) -> int:
    return delta // timedelta(seconds=1)


def _accrue(
    annual_rate: FixedPoint, seconds: int,
) -> Ok[FixedPoint] | Err[ArithmeticOverflowError | DivisionByZeroError]:
    """annual_rate * seconds / YEAR_SECONDS, year fraction taken first."""
    return wad_div(seconds, YEAR_SECONDS).and_then(
        lambda fraction: wad_mul(annual_rate, fraction),
    )


@final
@dataclass(frozen=True, slots=True)
class RateFixing:
    """One fixed period: annual rate in WAD applied over [start, end)."""

    start: datetime
    end: datetime
    annual_rate: FixedPoint

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise TypeError(f"RateFixing: end ({self.end}) must be after start ({self.start})")
        if not is_word(self.annual_rate):
            raise TypeError(f"RateFixing: annual_rate must be a WAD word, got {self.annual_rate!r}")


@final
class PeriodicFixingRateSource:
    """RateSource over a fixed schedule of consecutive rate fixings."""

    def __init__(self, fixings: tuple[RateFixing, ...]) -> None:
        if not fixings:
            raise ValueError("PeriodicFixingRateSource requires at least one fixing")
        for prev, cur in zip(fixings, fixings[1:], strict=False):
            if cur.start != prev.end:
                raise ValueError(
                    f"Fixings must be contiguous: {prev.end} != {cur.start}"
                )
        self._fixings = fixings

    @classmethod
    def from_schedule(
        cls,
        anchor: UtcDatetime,
        annual_rates: tuple[FixedPoint, ...],
        months: int = 3,
    ) -> PeriodicFixingRateSource:
        """One fixing per rate, each covering months months from anchor onwards."""
        periods = generate_fixing_periods(anchor.value, months, len(annual_rates))
        return cls(tuple(
            RateFixing(start=s, end=e, annual_rate=r)
            for (s, e), r in zip(periods, annual_rates, strict=True)
        ))

    @property
    def fixings(self) -> tuple[RateFixing, ...]:
        return self._fixings

    @property
    def coverage(self) -> tuple[datetime, datetime]:
        return self._fixings[0].start, self._fixings[-1].end

    def _unavailable(
        self, start: UtcDatetime, end: UtcDatetime, message: str, code: str,
    ) -> Err[RateUnavailableError]:
        return Err(RateUnavailableError(
            message=message,
            code=code,
            timestamp=UtcDatetime.now(),
            source="rate_feed.PeriodicFixingRateSource.rate_from_to",
            start=start.isoformat(),
            end=end.isoformat(),
        ))

    def rate_from_to(
        self, start: UtcDatetime, end: UtcDatetime,
    ) -> Ok[FixedPoint] | Err[RateUnavailableError]:
        if end < start:
            return self._unavailable(
                start, end, "Window end precedes start", "RATE_WINDOW_INVERTED",
            )
        first, last = self.coverage
        if start.value < first or end.value > last:
            return self._unavailable(
                start, end,
                f"Window outside fixing coverage [{first.isoformat()}, {last.isoformat()}]",
                "RATE_NOT_FIXED",
            )
        accrued: FixedPoint = 0
        for fixing in self._fixings:
            lo = max(fixing.start, start.value)
            hi = min(fixing.end, end.value)
            if hi <= lo:
                continue
            match _accrue(fixing.annual_rate, _seconds(hi - lo)).and_then(
                lambda piece, acc=accrued: checked_add(acc, piece),
            ):
                case Err(e):
                    return self._unavailable(start, end, e.message, "RATE_ACCRUAL_OVERFLOW")
                case Ok(total):
                    accrued = total
        return Ok(accrued)
