"""Tests for irswap.core.result — Ok/Err values and their combinators."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from irswap.core.result import Err, Ok, map_result, unwrap


class TestOkBasics:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_pattern_match_ok(self) -> None:
        match Ok(42):
            case Ok(v):
                assert v == 42
            case _:
                pytest.fail("Should match Ok")


class TestErrBasics:
    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"

    def test_err_is_frozen(self) -> None:
        err = Err("fail")
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.error = "other"  # type: ignore[misc]

    def test_ok_and_err_never_equal(self) -> None:
        assert Ok(1) != Err(1)


class TestCombinators:
    def test_map_on_ok(self) -> None:
        assert Ok(2).map(lambda x: x * 3) == Ok(6)

    def test_map_on_err_is_identity(self) -> None:
        assert Err("e").map(lambda x: x * 3) == Err("e")

    def test_and_then_chains(self) -> None:
        assert Ok(2).and_then(lambda x: Ok(x + 1)) == Ok(3)
        assert Ok(2).and_then(lambda x: Err(f"bad {x}")) == Err("bad 2")

    def test_and_then_short_circuits(self) -> None:
        calls: list[int] = []

        def step(x: int) -> Ok[int]:
            calls.append(x)
            return Ok(x)

        assert Err("stop").and_then(step) == Err("stop")
        assert calls == []

    def test_unwrap_or(self) -> None:
        assert Ok(1).unwrap_or(5) == 1
        assert Err("e").unwrap_or(5) == 5

    def test_map_err(self) -> None:
        assert Err("e").map_err(str.upper) == Err("E")
        assert Ok(1).map_err(str.upper) == Ok(1)

    def test_unwrap_err_raises(self) -> None:
        with pytest.raises(RuntimeError):
            Err("boom").unwrap()
        with pytest.raises(RuntimeError):
            unwrap(Err("boom"))

    def test_unwrap_rejects_non_result(self) -> None:
        with pytest.raises(TypeError):
            unwrap(42)  # type: ignore[arg-type]

    def test_map_result(self) -> None:
        assert map_result(Ok(3), lambda x: x + 1) == Ok(4)
        assert map_result(Err("e"), lambda x: x + 1) == Err("e")


@given(st.integers())
def test_map_identity_law(x: int) -> None:
    assert Ok(x).map(lambda v: v) == Ok(x)


@given(st.integers())
def test_and_then_left_identity(x: int) -> None:
    def f(v: int) -> Ok[int]:
        return Ok(v * 2)

    assert Ok(x).and_then(f) == f(x)
