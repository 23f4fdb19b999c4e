"""Swap economics: reference parameters, immutable terms, counterparties.

Ratios and rates are WAD-scaled ints. The reference parameters are
    fixed rate 0.03, margin requirement 0.07 of notional,
    initial margin 0.10 of notional, liquidation fee 0.005 of notional.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from irswap.core.errors import ArithmeticOverflowError, InvalidPartyError, InvalidTermsError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint, is_word, wad_mul

_SOURCE = "swap.terms"


@final
@dataclass(frozen=True, slots=True)
class SwapParameters:
    """Economic constants shared by every swap created with them."""

    fixed_rate: FixedPoint
    margin_requirement_ratio: FixedPoint
    initial_margin_ratio: FixedPoint
    liquidation_fee_ratio: FixedPoint

    def __post_init__(self) -> None:
        for name in (
            "fixed_rate",
            "margin_requirement_ratio",
            "initial_margin_ratio",
            "liquidation_fee_ratio",
        ):
            if not is_word(getattr(self, name)):
                raise TypeError(
                    f"SwapParameters.{name} must be an unsigned WAD int, "
                    f"got {getattr(self, name)!r}"
                )


DEFAULT_PARAMETERS = SwapParameters(
    fixed_rate=30_000_000_000_000_000,
    margin_requirement_ratio=70_000_000_000_000_000,
    initial_margin_ratio=100_000_000_000_000_000,
    liquidation_fee_ratio=5_000_000_000_000_000,
)


@final
@dataclass(frozen=True, slots=True)
class SwapTerms:
    """Immutable terms, fixed once at initialization.

    Invariants: 0 < notional <= UINT256_MAX; maturity_time > creation_time.
    """

    notional: FixedPoint
    fixed_rate: FixedPoint
    creation_time: UtcDatetime
    maturity_time: UtcDatetime
    margin_requirement_ratio: FixedPoint
    initial_margin_ratio: FixedPoint
    liquidation_fee_ratio: FixedPoint

    def __post_init__(self) -> None:
        if not is_word(self.notional) or self.notional == 0:
            raise TypeError(f"SwapTerms.notional must be > 0, got {self.notional!r}")
        if self.maturity_time <= self.creation_time:
            raise TypeError(
                f"SwapTerms.maturity_time ({self.maturity_time.isoformat()}) must be "
                f"after creation_time ({self.creation_time.isoformat()})"
            )

    @staticmethod
    def create(
        notional: FixedPoint,
        creation_time: UtcDatetime,
        maturity_time: UtcDatetime,
        parameters: SwapParameters = DEFAULT_PARAMETERS,
    ) -> Ok[SwapTerms] | Err[InvalidTermsError]:
        if not is_word(notional) or notional == 0:
            return Err(InvalidTermsError(
                message=f"notional must be a positive WAD amount, got {notional!r}",
                code="INVALID_TERMS",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.SwapTerms.create",
                field="notional",
                actual_value=str(notional),
            ))
        if maturity_time <= creation_time:
            return Err(InvalidTermsError(
                message=(
                    f"maturity ({maturity_time.isoformat()}) must be after "
                    f"creation ({creation_time.isoformat()})"
                ),
                code="INVALID_TERMS",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.SwapTerms.create",
                field="maturity_time",
                actual_value=maturity_time.isoformat(),
            ))
        return Ok(SwapTerms(
            notional=notional,
            fixed_rate=parameters.fixed_rate,
            creation_time=creation_time,
            maturity_time=maturity_time,
            margin_requirement_ratio=parameters.margin_requirement_ratio,
            initial_margin_ratio=parameters.initial_margin_ratio,
            liquidation_fee_ratio=parameters.liquidation_fee_ratio,
        ))

    def initial_margin(self) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
        """Margin each party posts at initialization."""
        return wad_mul(self.initial_margin_ratio, self.notional)

    def margin_threshold(self) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
        """Margin below which a party is eligible for liquidation."""
        return wad_mul(self.margin_requirement_ratio, self.notional)

    def liquidation_fee(self) -> Ok[FixedPoint] | Err[ArithmeticOverflowError]:
        return wad_mul(self.liquidation_fee_ratio, self.notional)


class PartyRole(Enum):
    FIXED_PAYER = "FixedPayer"
    FLOATING_PAYER = "FloatingPayer"


@final
@dataclass(frozen=True, slots=True)
class Counterparties:
    """The two distinct, non-zero accounts on either side of the swap."""

    fixed_payer: Address
    floating_payer: Address

    def __post_init__(self) -> None:
        if self.fixed_payer.is_zero or self.floating_payer.is_zero:
            raise TypeError("Counterparties must not be the zero address")
        if self.fixed_payer == self.floating_payer:
            raise TypeError(f"Counterparties must differ, both are {self.fixed_payer}")

    @staticmethod
    def create(
        fixed_payer: Address, floating_payer: Address,
    ) -> Ok[Counterparties] | Err[InvalidPartyError]:
        for role, addr in (
            (PartyRole.FIXED_PAYER, fixed_payer),
            (PartyRole.FLOATING_PAYER, floating_payer),
        ):
            if addr.is_zero:
                return Err(InvalidPartyError(
                    message=f"{role.value} address must not be zero",
                    code="INVALID_PARTY",
                    timestamp=UtcDatetime.now(),
                    source=f"{_SOURCE}.Counterparties.create",
                    party=role.value,
                ))
        if fixed_payer == floating_payer:
            return Err(InvalidPartyError(
                message=f"fixed and floating payer must differ, both are {fixed_payer}",
                code="INVALID_PARTY",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.Counterparties.create",
                party=fixed_payer.value,
            ))
        return Ok(Counterparties(fixed_payer=fixed_payer, floating_payer=floating_payer))

    def role_of(self, account: Address) -> PartyRole | None:
        if account == self.fixed_payer:
            return PartyRole.FIXED_PAYER
        if account == self.floating_payer:
            return PartyRole.FLOATING_PAYER
        return None

    def ordered(self) -> tuple[Address, Address]:
        """(fixed_payer, floating_payer), the canonical iteration order."""
        return (self.fixed_payer, self.floating_payer)


@final
@dataclass(frozen=True, slots=True)
class PartyPosition:
    """Read-only view of one party: identity, role and current margin."""

    address: Address
    role: PartyRole
    margin: FixedPoint
