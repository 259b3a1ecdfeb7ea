"""Historical exchange rate series with asof lookups.

A series holds the observations of one currency pair sorted by
``observed_at``. Lookups are binary searches over the observation times:

- ``AsofDirection.FORWARD`` returns the first observation at or after
  the query instant
- ``AsofDirection.BACKWARD`` returns the last observation at or before it

When no observation qualifies, ``MissingRatePolicy`` decides the outcome.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from decimal import Decimal
from operator import attrgetter
from typing import Any

from networth.exceptions import RateSeriesError, RateUnavailableError
from networth.models.enums import AsofDirection, MissingRatePolicy
from networth.models.rate import CurrencyPair, ExchangeRateObservation
from networth.models.transaction import parse_timestamp

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


class ExchangeRateSeries:
    """Immutable, time-ordered observations for a single currency pair.

    Parameters
    ----------
    pair : CurrencyPair | str
        Pair every observation must belong to.
    observations : Iterable[ExchangeRateObservation]
        Observations in any order. They are stable-sorted by
        ``observed_at`` so equal instants keep their input order.
    strict : bool
        Reject empty or out-of-order input instead of sorting it.
    """

    def __init__(
        self,
        pair: CurrencyPair | str,
        observations: Iterable[ExchangeRateObservation],
        strict: bool = False,
    ) -> None:
        self._pair = CurrencyPair.parse(pair)
        items = tuple(observations)

        for obs in items:
            if obs.pair != self._pair:
                raise RateSeriesError(f"Observation for {obs.pair} does not belong to series {self._pair}")

        if strict:
            if not items:
                raise RateSeriesError(f"Series {self._pair} is empty")
            for prev, cur in zip(items, items[1:]):
                if cur.observed_at < prev.observed_at:
                    raise RateSeriesError(
                        f"Series {self._pair} is out of order at {cur.observed_at.isoformat()}"
                    )
        else:
            items = tuple(sorted(items, key=attrgetter("observed_at")))

        self._observations = items
        self._times = [obs.observed_at for obs in items]

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        pair: CurrencyPair | str | None = None,
        strict: bool = False,
    ) -> ExchangeRateSeries:
        """Build a series from ``{pair, midMarketRate, createdAt}`` feed records.

        The pair is taken from the first record when not given.
        """
        expected = CurrencyPair.parse(pair) if pair is not None else None
        observations = [ExchangeRateObservation.from_record(r, expected) for r in records]

        if expected is None:
            if not observations:
                raise RateSeriesError("Cannot infer the pair of an empty rate feed")
            expected = observations[0].pair

        return cls(expected, observations, strict=strict)

    @property
    def pair(self) -> CurrencyPair:
        return self._pair

    @property
    def observations(self) -> tuple[ExchangeRateObservation, ...]:
        return self._observations

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[ExchangeRateObservation]:
        return iter(self._observations)

    def __repr__(self) -> str:
        return f"ExchangeRateSeries({self._pair}, {len(self)} observations)"

    def lookup(
        self,
        at: datetime | str,
        direction: AsofDirection = AsofDirection.FORWARD,
    ) -> ExchangeRateObservation | None:
        """Find the observation that applies at ``at``, or None."""
        at = parse_timestamp(at)
        if direction == AsofDirection.FORWARD:
            idx = bisect_left(self._times, at)
            return self._observations[idx] if idx < len(self._observations) else None

        idx = bisect_right(self._times, at)
        return self._observations[idx - 1] if idx > 0 else None

    def rate_at(
        self,
        at: datetime | str,
        direction: AsofDirection = AsofDirection.FORWARD,
        policy: MissingRatePolicy = MissingRatePolicy.ZERO,
        spot_rate: Decimal | None = None,
    ) -> Decimal | None:
        """Rate that applies at ``at`` after the missing-rate policy.

        Returns None when the rate is unavailable and the policy leaves
        the amount unvalued.

        Raises
        ------
        RateUnavailableError
            If nothing qualifies and ``policy`` is ``RAISE``.
        """
        obs = self.lookup(at, direction)
        if obs is not None:
            return obs.rate
        return _resolve_missing(self._pair, at, policy, spot_rate, self._nearest(direction))

    def value_in_base(
        self,
        amount: Decimal,
        at: datetime | str,
        direction: AsofDirection = AsofDirection.FORWARD,
        policy: MissingRatePolicy = MissingRatePolicy.ZERO,
        spot_rate: Decimal | None = None,
    ) -> Decimal:
        """Value ``amount`` of the quote currency in the base currency at ``at``."""
        rate = self.rate_at(at, direction, policy, spot_rate)
        if rate is None:
            return ZERO
        return amount * rate

    def inverted(self) -> ExchangeRateSeries:
        """Series for the reversed pair, each rate replaced by its reciprocal."""
        pair = self._pair.inverse()
        return ExchangeRateSeries(
            pair,
            (
                ExchangeRateObservation(pair=pair, rate=ONE / obs.rate, observed_at=obs.observed_at)
                for obs in self._observations
            ),
        )

    def _nearest(self, direction: AsofDirection) -> ExchangeRateObservation | None:
        """Closest observation on the far side when a lookup misses."""
        if not self._observations:
            return None
        # Forward misses only past the last observation, backward only before the first
        if direction == AsofDirection.FORWARD:
            return self._observations[-1]
        return self._observations[0]


class RateBook:
    """Exchange rate series indexed by the foreign currency they price.

    Every series must involve the base currency. A series quoted the
    other way round (``BTC_CAD`` for base ``CAD``) is inverted on entry.

    Parameters
    ----------
    base_currency : str
        Currency all valuations are expressed in.
    series : Mapping[Any, ExchangeRateSeries] | Iterable[ExchangeRateSeries]
        Series to index. Mapping keys are ignored; each series knows its pair.
    spot_rates : Mapping[str, Decimal] | None
        Static base-per-unit rates used by ``MissingRatePolicy.SPOT``.
    """

    def __init__(
        self,
        base_currency: str,
        series: Mapping[Any, ExchangeRateSeries] | Iterable[ExchangeRateSeries] = (),
        spot_rates: Mapping[str, Decimal] | None = None,
    ) -> None:
        self.base_currency = base_currency.strip().upper()
        self._series: dict[str, ExchangeRateSeries] = {}
        self._spot_rates = {k.upper(): Decimal(str(v)) for k, v in (spot_rates or {}).items()}

        values = series.values() if isinstance(series, Mapping) else series
        for item in values:
            self.add(item)

    def add(self, series: ExchangeRateSeries) -> None:
        """Index a series under the foreign currency it prices."""
        pair = series.pair
        if pair.base == self.base_currency and pair.quote != self.base_currency:
            foreign = pair.quote
        elif pair.quote == self.base_currency and pair.base != self.base_currency:
            logger.debug("Inverting %s to price %s in %s", pair, pair.base, self.base_currency)
            foreign = pair.base
            series = series.inverted()
        else:
            raise RateSeriesError(f"Series {pair} does not price a currency in {self.base_currency}")

        if foreign in self._series:
            raise RateSeriesError(f"Duplicate rate series for {foreign}")
        self._series[foreign] = series

    @property
    def currencies(self) -> list[str]:
        """Foreign currencies this book can price."""
        return sorted(self._series)

    def series_for(self, currency: str) -> ExchangeRateSeries | None:
        return self._series.get(currency)

    def rate_at(
        self,
        currency: str,
        at: datetime | str,
        direction: AsofDirection = AsofDirection.FORWARD,
        policy: MissingRatePolicy = MissingRatePolicy.ZERO,
    ) -> Decimal | None:
        """Base units per unit of ``currency`` at ``at``; None when unvalued."""
        if currency == self.base_currency:
            return ONE

        spot_rate = self._spot_rates.get(currency)
        series = self._series.get(currency)
        if series is None:
            return _resolve_missing(currency, at, policy, spot_rate, None)
        return series.rate_at(at, direction, policy, spot_rate)

    def value_in_base(
        self,
        amount: Decimal,
        currency: str,
        at: datetime | str,
        direction: AsofDirection = AsofDirection.FORWARD,
        policy: MissingRatePolicy = MissingRatePolicy.ZERO,
    ) -> Decimal:
        """Value ``amount`` of ``currency``; the base currency is returned unchanged."""
        if currency == self.base_currency:
            return amount
        rate = self.rate_at(currency, at, direction, policy)
        if rate is None:
            return ZERO
        return amount * rate


def _resolve_missing(
    subject: object,
    at: datetime | str,
    policy: MissingRatePolicy,
    spot_rate: Decimal | None,
    nearest: ExchangeRateObservation | None,
) -> Decimal | None:
    if policy == MissingRatePolicy.LAST_KNOWN:
        return nearest.rate if nearest is not None else None
    if policy == MissingRatePolicy.SPOT:
        return spot_rate
    if policy == MissingRatePolicy.RAISE:
        when = at.isoformat() if isinstance(at, datetime) else at
        raise RateUnavailableError(f"No exchange rate for {subject} at {when}")
    return None
