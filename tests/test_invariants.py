"""Property tests: conservation of value and non-negative margin.

Random sequences of entry-point calls are applied to a funded swap. After
every call, successful or not, the ledger must balance against what custody
actually holds and no bucket may be negative.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from swap_support import (
    FIXED,
    FLOATING,
    KEEPER,
    MATURITY,
    NOTIONAL,
    OUTSIDER,
    SWAP_ADDR,
    T0,
    at,
    rates,
    wad,
)
from irswap.core.result import Err, Ok, unwrap
from irswap.infra.memory_adapter import InMemoryToken, StaticRateSource
from irswap.swap.contract import SwapContract
from irswap.swap.lifecycle import SwapStatus
from irswap.swap.terms import SwapParameters

_ACTORS = (FIXED, FLOATING, KEEPER, OUTSIDER)


def _funded_swap(
    initial_margin_ratio: int, rate: int,
) -> tuple[SwapContract, InMemoryToken, StaticRateSource]:
    token = InMemoryToken()
    for party in (FIXED, FLOATING):
        token.mint(party, wad(10_000_000))
        token.as_account(party).approve(SWAP_ADDR, wad(10_000_000))
    rates_source = StaticRateSource(rate)
    parameters = SwapParameters(
        fixed_rate=wad("0.03"),
        margin_requirement_ratio=wad("0.07"),
        initial_margin_ratio=initial_margin_ratio,
        liquidation_fee_ratio=wad("0.005"),
    )
    contract = SwapContract(SWAP_ADDR, token.as_account(SWAP_ADDR), rates_source, parameters)
    unwrap(contract.initialize(FIXED, FIXED, FLOATING, NOTIONAL, MATURITY, T0))
    return contract, token, rates_source


_operations = st.one_of(
    st.tuples(st.just("post_margin"), st.sampled_from(_ACTORS), st.integers(0, wad(200_000))),
    st.tuples(st.just("liquidate"), st.sampled_from(_ACTORS), st.integers(0, 400)),
    st.tuples(st.just("settle"), st.sampled_from(_ACTORS), st.integers(300, 400)),
    st.tuples(st.just("withdraw"), st.sampled_from(_ACTORS), st.just(0)),
    st.tuples(st.just("donate"), st.just(KEEPER), st.integers(0, wad(1_000))),
    st.tuples(st.just("rate"), st.just(KEEPER), rates()),
)


@given(
    st.integers(min_value=wad("0.05"), max_value=wad("0.15")),
    rates(),
    st.lists(_operations, max_size=12),
)
def test_conservation_and_non_negativity(
    initial_margin_ratio: int, rate: int, ops: list[tuple[str, object, int]],
) -> None:
    contract, token, rates_source = _funded_swap(initial_margin_ratio, rate)
    paid_out = 0
    for name, actor, arg in ops:
        match name:
            case "post_margin":
                contract.post_margin(actor, arg)  # type: ignore[arg-type]
            case "liquidate":
                contract.liquidate(actor, at(arg))  # type: ignore[arg-type]
            case "settle":
                contract.settle_at_maturity(actor, at(arg))  # type: ignore[arg-type]
            case "withdraw":
                match contract.withdraw(actor):  # type: ignore[arg-type]
                    case Ok(amount):
                        paid_out += amount
                    case Err(_):
                        pass
            case "donate":
                token.mint(SWAP_ADDR, arg)
            case "rate":
                rates_source.rate = arg

        ledger = contract.ledger
        assert ledger is not None
        assert ledger.verify_conservation() == Ok(None)
        assert ledger.custodied() <= token.balance_of(SWAP_ADDR)
        for party in (FIXED, FLOATING):
            assert ledger.margin_of(party) >= 0
            assert ledger.payable_of(party) >= 0
        assert ledger.pool >= 0
        assert ledger.withdrawn == paid_out

    if contract.status is SwapStatus.SETTLED:
        assert contract.ledger is not None
        assert contract.ledger.total() == 0
