"""Exchange rate models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from networth.exceptions import MalformedRateError
from networth.models.transaction import parse_decimal, parse_timestamp


@dataclass(frozen=True)
class CurrencyPair:
    """Ordered currency pair as named in rate feeds (``CAD_BTC``).

    A rate for the pair is the number of ``base`` units equal to one
    unit of ``quote``.
    """

    base: str
    quote: str

    @classmethod
    def parse(cls, value: str | CurrencyPair) -> CurrencyPair:
        """Parse ``"CAD_BTC"`` (or ``"CAD/BTC"``) into a pair."""
        if isinstance(value, CurrencyPair):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid currency pair: {value!r}")
        parts = value.replace("/", "_").split("_")
        if len(parts) != 2 or not all(p.strip() for p in parts):
            raise ValueError(f"Invalid currency pair: {value!r}")
        return cls(base=parts[0].strip().upper(), quote=parts[1].strip().upper())

    def inverse(self) -> CurrencyPair:
        return CurrencyPair(base=self.quote, quote=self.base)

    def __str__(self) -> str:
        return f"{self.base}_{self.quote}"


@dataclass(frozen=True)
class ExchangeRateObservation:
    """A single mid-market rate observed at an instant."""

    pair: CurrencyPair
    rate: Decimal
    observed_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "observed_at", parse_timestamp(self.observed_at))

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        pair: CurrencyPair | None = None,
    ) -> ExchangeRateObservation:
        """Build an observation from a ``{pair, midMarketRate, createdAt}`` record.

        Parameters
        ----------
        record : Mapping[str, Any]
            Raw feed record.
        pair : CurrencyPair | None
            Pair to use when the record omits one.

        Raises
        ------
        MalformedRateError
            If the record is missing fields or the rate is not positive.
        """
        if not isinstance(record, Mapping):
            raise MalformedRateError(f"Rate record must be an object, got {type(record).__name__}")

        raw_pair = record.get("pair")
        try:
            if raw_pair is not None:
                parsed_pair = CurrencyPair.parse(raw_pair)
            elif pair is not None:
                parsed_pair = pair
            else:
                raise ValueError("Rate record has no pair")
            rate = parse_decimal(record.get("midMarketRate"))
            observed_at = parse_timestamp(record.get("createdAt"))
        except ValueError as exc:
            raise MalformedRateError(f"Invalid rate record {dict(record)!r}: {exc}") from exc

        if rate <= 0:
            raise MalformedRateError(f"Rate must be positive, got {rate} for {parsed_pair}")

        return cls(pair=parsed_pair, rate=rate, observed_at=observed_at)
