"""In-memory collaborators: a token ledger with account-bound custody handles,
and a static rate source.

Test doubles that let the swap run without a chain or a market-data feed.
All classes are @final. None of them are production code.
"""

from __future__ import annotations

from collections import defaultdict
from typing import final

from irswap.core.errors import RateUnavailableError
from irswap.core.result import Err, Ok
from irswap.core.types import Address, UtcDatetime
from irswap.core.wad import FixedPoint, is_word


@final
class InMemoryToken:
    """ERC-20-like token: balances, allowances, failure injection."""

    def __init__(self) -> None:
        self._balances: dict[Address, FixedPoint] = defaultdict(int)
        self._allowances: dict[tuple[Address, Address], FixedPoint] = defaultdict(int)
        self._frozen: set[Address] = set()
        self.transfer_count = 0

    def mint(self, holder: Address, amount: FixedPoint) -> None:
        """Test-only: create funds out of thin air."""
        self._balances[holder] += amount

    def freeze(self, account: Address) -> None:
        """Test-only: every transfer into or out of account is rejected."""
        self._frozen.add(account)

    def unfreeze(self, account: Address) -> None:
        self._frozen.discard(account)

    def balance_of(self, holder: Address) -> FixedPoint:
        return self._balances.get(holder, 0)

    def allowance(self, owner: Address, spender: Address) -> FixedPoint:
        return self._allowances.get((owner, spender), 0)

    def as_account(self, account: Address) -> InMemoryCustody:
        """Custody handle acting as account (the msg.sender of every call)."""
        return InMemoryCustody(token=self, account=account)

    def _move(self, source: Address, to: Address, amount: FixedPoint) -> bool:
        if not is_word(amount) or source in self._frozen or to in self._frozen:
            return False
        if self._balances.get(source, 0) < amount:
            return False
        self._balances[source] -= amount
        self._balances[to] += amount
        self.transfer_count += 1
        return True

    def _approve(self, owner: Address, spender: Address, amount: FixedPoint) -> bool:
        if not is_word(amount):
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def _transfer_from(
        self, spender: Address, source: Address, to: Address, amount: FixedPoint,
    ) -> bool:
        allowed = self._allowances.get((source, spender), 0)
        if not is_word(amount) or allowed < amount:
            return False
        if not self._move(source, to, amount):
            return False
        self._allowances[(source, spender)] = allowed - amount
        return True


@final
class InMemoryCustody:
    """Custody protocol implementation bound to one account of an InMemoryToken."""

    def __init__(self, token: InMemoryToken, account: Address) -> None:
        self._token = token
        self._account = account

    @property
    def account(self) -> Address:
        return self._account

    def approve(self, spender: Address, amount: FixedPoint) -> bool:
        return self._token._approve(self._account, spender, amount)

    def transfer(self, to: Address, amount: FixedPoint) -> bool:
        return self._token._move(self._account, to, amount)

    def transfer_from(self, source: Address, to: Address, amount: FixedPoint) -> bool:
        return self._token._transfer_from(self._account, source, to, amount)

    def balance_of(self, holder: Address) -> FixedPoint:
        return self._token.balance_of(holder)


@final
class StaticRateSource:
    """Returns one configured accrued rate for every window.

    rate=None models an unavailable feed. Every query is recorded.
    """

    def __init__(self, rate: FixedPoint | None) -> None:
        self.rate = rate
        self.queries: list[tuple[UtcDatetime, UtcDatetime]] = []

    def rate_from_to(
        self, start: UtcDatetime, end: UtcDatetime,
    ) -> Ok[FixedPoint] | Err[RateUnavailableError]:
        self.queries.append((start, end))
        if self.rate is None:
            return Err(RateUnavailableError(
                message="No rate configured",
                code="RATE_UNAVAILABLE",
                timestamp=UtcDatetime.now(),
                source="memory_adapter.StaticRateSource.rate_from_to",
                start=start.isoformat(),
                end=end.isoformat(),
            ))
        return Ok(self.rate)
