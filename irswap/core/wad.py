"""WAD fixed-point arithmetic on unsigned 256-bit words.

Real values are carried as ints scaled by WAD = 10**18. Every operand and
result must fit in [0, UINT256_MAX]; anything that would leave that range is
reported as ArithmeticOverflowError instead of wrapping or going negative.
Products and quotients round toward zero. No float anywhere.

Functions
---------
wad_mul      : a * b / WAD
wad_div      : a * WAD / b
checked_add  : a + b
checked_sub  : a - b, only when b <= a
to_wad       : exact decimal literal -> WAD int
from_wad     : WAD int -> exact Decimal (display only)
"""

from __future__ import annotations

from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    localcontext,
)

from irswap.core.errors import ArithmeticOverflowError, DivisionByZeroError
from irswap.core.result import Err, Ok
from irswap.core.types import UtcDatetime

type FixedPoint = int

WAD: FixedPoint = 10**18
UINT256_MAX: int = 2**256 - 1

# 78 digits cover UINT256_MAX; the rest is headroom for the 18-place shift.
WAD_DECIMAL_CONTEXT = Context(
    prec=100,
    Emin=-999999,
    Emax=999999,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

_SOURCE = "core.wad"


def _overflow(operation: str, *operands: object) -> Err[ArithmeticOverflowError]:
    return Err(ArithmeticOverflowError(
        message=f"{operation} leaves the unsigned 256-bit range",
        code="ARITHMETIC_OVERFLOW",
        timestamp=UtcDatetime.now(),
        source=f"{_SOURCE}.{operation}",
        operation=operation,
        operands=tuple(str(x) for x in operands),
    ))


def is_word(x: object) -> bool:
    """True for an int (not bool) inside [0, UINT256_MAX]."""
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= UINT256_MAX


def require_word(
    x: object, operation: str = "require_word",
) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
    """Ok(x) when x is a valid unsigned word, else ArithmeticOverflowError."""
    if not is_word(x):
        return _overflow(operation, x)
    return Ok(x)  # type: ignore[arg-type]


def wad_mul(a: FixedPoint, b: FixedPoint) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
    """a * b / WAD. Fails if either operand or the raw product a * b is out of range."""
    if not (is_word(a) and is_word(b)):
        return _overflow("wad_mul", a, b)
    product = a * b
    if product > UINT256_MAX:
        return _overflow("wad_mul", a, b)
    return Ok(product // WAD)


def wad_div(
    a: FixedPoint, b: FixedPoint,
) -> Ok[FixedPoint] | Err[ArithmeticOverflowError | DivisionByZeroError]:
    """a * WAD / b. Fails on b == 0 or when a * WAD is out of range."""
    if not (is_word(a) and is_word(b)):
        return _overflow("wad_div", a, b)
    if b == 0:
        return Err(DivisionByZeroError(
            message=f"wad_div by zero (dividend {a})",
            code="DIVISION_BY_ZERO",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.wad_div",
            dividend=str(a),
        ))
    scaled = a * WAD
    if scaled > UINT256_MAX:
        return _overflow("wad_div", a, b)
    return Ok(scaled // b)


def checked_add(a: FixedPoint, b: FixedPoint) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
    if not (is_word(a) and is_word(b)) or a + b > UINT256_MAX:
        return _overflow("checked_add", a, b)
    return Ok(a + b)


def checked_sub(a: FixedPoint, b: FixedPoint) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
    """a - b. Underflow (b > a) is an error, never a wrapped or negative value."""
    if not (is_word(a) and is_word(b)) or b > a:
        return _overflow("checked_sub", a, b)
    return Ok(a - b)


def to_wad(raw: Decimal | str | int) -> Ok[FixedPoint] | Err[str]:
    """Convert a decimal literal to WAD exactly.

    Rejects negatives, NaN/Infinity, more than 18 fractional digits and
    results above UINT256_MAX. Floats are refused outright.
    """
    if isinstance(raw, float):
        return Err(f"to_wad refuses float input {raw!r}; pass a str or Decimal")
    if isinstance(raw, bool):
        return Err(f"to_wad requires a number, got {raw!r}")
    with localcontext(WAD_DECIMAL_CONTEXT):
        try:
            d = Decimal(raw)
        except InvalidOperation:
            return Err(f"to_wad cannot parse {raw!r}")
        if not d.is_finite():
            return Err(f"to_wad requires a finite value, got {raw!r}")
        if d < 0:
            return Err(f"to_wad requires a non-negative value, got {raw!r}")
        scaled = d.scaleb(18)
        if scaled != scaled.to_integral_value():
            return Err(f"to_wad: {raw!r} has more than 18 fractional digits")
        value = int(scaled)
    if value > UINT256_MAX:
        return Err(f"to_wad: {raw!r} exceeds the unsigned 256-bit range")
    return Ok(value)


def from_wad(x: FixedPoint) -> Decimal:
    """Exact Decimal rendering of a WAD int. Not for arithmetic."""
    with localcontext(WAD_DECIMAL_CONTEXT):
        return Decimal(x).scaleb(-18)
