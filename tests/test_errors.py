"""Tests for irswap.core.errors — error value hierarchy."""

from __future__ import annotations

import dataclasses
import json

import pytest

from irswap.core.errors import (
    AlreadySettledError,
    ArithmeticOverflowError,
    ConservationViolationError,
    CustodyTransferFailedError,
    InsufficientMarginError,
    InvalidPartyError,
    InvalidTermsError,
    MarginShortfallError,
    NotAPartyError,
    NotEligibleError,
    NotMaturedError,
    RateUnavailableError,
    SwapError,
)
from irswap.core.types import UtcDatetime


def _ts() -> UtcDatetime:
    return UtcDatetime.now()


def _make[E: SwapError](cls: type[E], **fields: object) -> E:
    return cls(
        message="m", code="C", timestamp=_ts(), source="test.fn", **fields,
    )


_SAMPLES: tuple[SwapError, ...] = (
    _make(SwapError),
    _make(InvalidPartyError, party="FixedPayer"),
    _make(InvalidTermsError, field="notional", actual_value="0"),
    _make(NotAPartyError, caller="0xabc"),
    _make(ArithmeticOverflowError, operation="wad_mul", operands=("1", "2")),
    _make(InsufficientMarginError, party="0xabc", required="5", available="4"),
    _make(MarginShortfallError, payer="0xabc", mark_to_market="5", margin="4"),
    _make(NotEligibleError, threshold="70"),
    _make(ConservationViolationError, law_name="x", expected="1", actual="2"),
    _make(AlreadySettledError),
    _make(NotMaturedError, maturity="t1", as_of="t0"),
    _make(CustodyTransferFailedError, operation="transfer", destination="0x1", amount="3"),
    _make(RateUnavailableError, start="t0", end="t1"),
)


class TestSwapErrorBase:
    def test_is_frozen(self) -> None:
        err = _SAMPLES[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            err.message = "changed"  # type: ignore[misc]

    def test_to_dict_keys(self) -> None:
        assert set(_SAMPLES[0].to_dict()) == {"message", "code", "timestamp", "source"}

    def test_with_context_prepends(self) -> None:
        err = _SAMPLES[1].with_context("initialize")
        assert err.message == "initialize: m"
        assert isinstance(err, InvalidPartyError)
        assert err.party == "FixedPayer"


class TestSubclasses:
    @pytest.mark.parametrize("err", _SAMPLES, ids=lambda e: type(e).__name__)
    def test_is_swap_error(self, err: SwapError) -> None:
        assert isinstance(err, SwapError)

    @pytest.mark.parametrize("err", _SAMPLES, ids=lambda e: type(e).__name__)
    def test_to_dict_json_serializable(self, err: SwapError) -> None:
        d = err.to_dict()
        json.dumps(d)
        assert d["code"] == "C"

    def test_subclass_fields_in_dict(self) -> None:
        d = _SAMPLES[5].to_dict()
        assert d["party"] == "0xabc"
        assert d["required"] == "5"
        assert d["available"] == "4"

    def test_overflow_operands_as_list(self) -> None:
        assert _SAMPLES[4].to_dict()["operands"] == ["1", "2"]

    def test_match_on_error_kind(self) -> None:
        match _SAMPLES[7]:
            case NotEligibleError(threshold=t):
                assert t == "70"
            case _:
                pytest.fail("Should match NotEligibleError")
