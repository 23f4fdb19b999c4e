"""Tests for irswap.core.types — UtcDatetime and Address."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given

from swap_support import FIXED, addresses
from irswap.core.result import Err, Ok, unwrap
from irswap.core.types import Address, UtcDatetime


class TestUtcDatetime:
    def test_rejects_naive(self) -> None:
        with pytest.raises(TypeError):
            UtcDatetime(value=datetime(2025, 1, 1))

    def test_parse_normalises_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        parsed = unwrap(UtcDatetime.parse(datetime(2025, 1, 1, 2, 0, tzinfo=plus_two)))
        assert parsed.value.utcoffset() == timedelta(0)
        assert parsed.value.hour == 0

    def test_parse_naive_is_err(self) -> None:
        assert isinstance(UtcDatetime.parse(datetime(2025, 1, 1)), Err)

    def test_ordering(self) -> None:
        earlier = UtcDatetime.now()
        later = UtcDatetime(value=earlier.value + timedelta(seconds=1))
        assert earlier < later
        assert min(later, earlier) == earlier


class TestAddress:
    def test_zero(self) -> None:
        assert Address.ZERO.is_zero
        assert Address(value="0x" + "0" * 40).is_zero
        assert not FIXED.is_zero

    def test_rejects_empty(self) -> None:
        with pytest.raises(TypeError):
            Address(value="  ")

    def test_parse_strips(self) -> None:
        assert Address.parse(" 0xabc ") == Ok(Address(value="0xabc"))
        assert isinstance(Address.parse(""), Err)

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            FIXED.value = "0x1"  # type: ignore[misc]

    def test_str(self) -> None:
        assert str(FIXED) == FIXED.value


@given(addresses())
def test_generated_addresses_are_usable(addr: Address) -> None:
    assert not addr.is_zero
    assert Address.parse(addr.value) == Ok(addr)
