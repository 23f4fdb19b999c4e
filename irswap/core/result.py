"""Result values for irswap entry points.

Fallible operations return ``Ok(value)`` or ``Err(error)``; nothing in the
domain layers raises for an expected failure. Callers branch with ``match``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome."""

    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def and_then[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Chain another fallible step onto this value."""
        return f(self.value)

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:  # noqa: ARG002
        return self.value

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:  # noqa: ARG002
        return self


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying an error value."""

    error: E

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        return self

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """Short-circuit: the next step never runs."""
        return self

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"Called unwrap on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))


type Result[T, E] = Ok[T] | Err[E]


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Extract the Ok value or raise RuntimeError. Tests and boundaries only."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, Err):
        raise RuntimeError(f"unwrap on Err: {result.error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def map_result[T, U, E](result: Ok[T] | Err[E], f: Callable[[T], U]) -> Ok[U] | Err[E]:
    """Apply f to an Ok value; pass an Err through unchanged."""
    if isinstance(result, Ok):
        return Ok(f(result.value))
    return result
