"""Wallet state and valuation output models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType


@dataclass(frozen=True)
class WalletSnapshot:
    """Balances held right after the transaction at ``time`` was applied.

    ``balances`` is a read-only view over a private copy of the input.
    """

    time: datetime
    balances: Mapping[str, Decimal]

    def __post_init__(self) -> None:
        object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))

    def balance(self, currency: str) -> Decimal:
        return self.balances.get(currency, Decimal("0"))


@dataclass(frozen=True)
class NetWorthSample:
    """Base-currency value of the wallet at a sampling instant.

    ``unvalued`` lists the currencies held at ``time`` for which no
    exchange rate was available; they contribute nothing to ``value``.
    """

    time: datetime
    value: Decimal
    unvalued: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_complete(self) -> bool:
        return not self.unvalued
