"""Daily net worth sampling.

One sample is produced per calendar day, starting at local midnight of the
first transaction's day and stopping before the day of the last
transaction. For each day the wallet snapshot and the exchange rates are
found with the same asof direction.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from networth.exceptions import ConfigurationError
from networth.models.enums import AsofDirection, MissingRatePolicy
from networth.models.wallet import NetWorthSample, WalletSnapshot
from networth.rates import ExchangeRateSeries, RateBook

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE_DAY = timedelta(days=1)


def resolve_timezone(name: str | tzinfo) -> tzinfo:
    """Turn a zone name into a tzinfo (``"UTC"`` needs no tz database)."""
    if isinstance(name, tzinfo):
        return name
    if name.strip().upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from exc


def floor_to_day(moment: datetime, tz: tzinfo) -> datetime:
    """Local midnight of the calendar day containing ``moment``."""
    local = moment.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


class DailyNetWorthSampler:
    """Value a wallet history once per calendar day.

    Parameters
    ----------
    rate_book : RateBook
        Exchange rates for every foreign currency the wallet may hold.
    direction : AsofDirection
        Lookup direction used for both snapshots and rates.
    policy : MissingRatePolicy
        What to do when a held currency has no qualifying rate.
    timezone : str | tzinfo
        Zone whose midnights delimit calendar days.
    """

    def __init__(
        self,
        rate_book: RateBook,
        direction: AsofDirection = AsofDirection.FORWARD,
        policy: MissingRatePolicy = MissingRatePolicy.ZERO,
        timezone: str | tzinfo = "UTC",
    ) -> None:
        self.rate_book = rate_book
        self.direction = AsofDirection(direction)
        self.policy = MissingRatePolicy(policy)
        self.tz = resolve_timezone(timezone)

    def sample(self, snapshots: list[WalletSnapshot]) -> list[NetWorthSample]:
        """Produce one net worth sample per day of the ledger span.

        Parameters
        ----------
        snapshots : list[WalletSnapshot]
            Replayed wallet history in time order.

        Returns
        -------
        list[NetWorthSample]
            Samples at local midnight, first day included, last
            snapshot's day excluded. Empty for an empty history.
        """
        if not snapshots:
            return []

        times = [snapshot.time for snapshot in snapshots]
        start = floor_to_day(times[0], self.tz)
        end = floor_to_day(times[-1], self.tz)

        samples: list[NetWorthSample] = []
        day = start
        while day < end:
            snapshot = self._snapshot_at(snapshots, times, day)
            balances = snapshot.balances if snapshot is not None else {}
            value, unvalued = self.value_at(balances, day)
            samples.append(NetWorthSample(time=day, value=value, unvalued=unvalued))
            day = day + ONE_DAY

        self._report_gaps(samples)
        return samples

    def value_snapshots(self, snapshots: Iterable[WalletSnapshot]) -> list[NetWorthSample]:
        """Value each snapshot at its own instant (net worth after each transaction)."""
        samples = []
        for snapshot in snapshots:
            value, unvalued = self.value_at(snapshot.balances, snapshot.time)
            samples.append(NetWorthSample(time=snapshot.time, value=value, unvalued=unvalued))
        return samples

    def value_at(
        self,
        balances: Mapping[str, Decimal],
        at: datetime,
    ) -> tuple[Decimal, frozenset[str]]:
        """Base-currency value of ``balances`` at ``at`` and the currencies left unvalued."""
        total = ZERO
        unvalued: set[str] = set()
        base = self.rate_book.base_currency

        for currency in sorted(balances):
            amount = balances[currency]
            if currency == base:
                total += amount
                continue
            if amount == 0:
                continue
            rate = self.rate_book.rate_at(currency, at, self.direction, self.policy)
            if rate is None:
                unvalued.add(currency)
                continue
            total += amount * rate

        return total, frozenset(unvalued)

    def _snapshot_at(
        self,
        snapshots: list[WalletSnapshot],
        times: list[datetime],
        day: datetime,
    ) -> WalletSnapshot | None:
        if self.direction == AsofDirection.FORWARD:
            idx = bisect_left(times, day)
            return snapshots[idx] if idx < len(snapshots) else None

        idx = bisect_right(times, day)
        # Before the first transaction the wallet is empty
        return snapshots[idx - 1] if idx > 0 else None

    def _report_gaps(self, samples: list[NetWorthSample]) -> None:
        gaps = [s for s in samples if s.unvalued]
        if not gaps:
            return
        currencies = sorted(set().union(*(s.unvalued for s in gaps)))
        logger.warning(
            "%d of %d days have holdings without an exchange rate (%s), policy=%s",
            len(gaps),
            len(samples),
            ", ".join(currencies),
            self.policy.value,
        )


def sample_daily(
    snapshots: list[WalletSnapshot],
    rate_series_by_pair: Mapping[Any, ExchangeRateSeries] | Iterable[ExchangeRateSeries],
    base_currency: str,
    direction: AsofDirection = AsofDirection.FORWARD,
    policy: MissingRatePolicy = MissingRatePolicy.ZERO,
    timezone: str | tzinfo = "UTC",
    spot_rates: Mapping[str, Decimal] | None = None,
) -> list[NetWorthSample]:
    """Functional form of ``DailyNetWorthSampler.sample``."""
    rate_book = RateBook(base_currency, rate_series_by_pair, spot_rates=spot_rates)
    sampler = DailyNetWorthSampler(rate_book, direction=direction, policy=policy, timezone=timezone)
    return sampler.sample(snapshots)
