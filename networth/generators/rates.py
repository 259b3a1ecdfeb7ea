"""Exchange rate feed generator."""

import math
from datetime import datetime, timedelta
from decimal import Decimal

from networth.generators.base import BaseGenerator, format_timestamp
from networth.models.rate import CurrencyPair


class RateFeedGenerator(BaseGenerator):
    """Generate mid-market rate records following a geometric random walk."""

    def generate(
        self,
        pair: CurrencyPair | str,
        start: datetime,
        end: datetime,
        start_rate: Decimal,
        interval: timedelta = timedelta(hours=6),
        volatility: float = 0.02,
    ) -> list[dict]:
        """Generate rate records for ``pair`` from ``start`` up to ``end``.

        Parameters
        ----------
        pair : CurrencyPair | str
            Pair to quote (e.g. ``"CAD_BTC"``).
        start, end : datetime
            Time span; observations are spaced ``interval`` apart with jitter.
        start_rate : Decimal
            Rate of the first observation.
        interval : timedelta
            Average gap between observations.
        volatility : float
            Standard deviation of the log-return per observation.

        Returns
        -------
        list[dict]
            ``{pair, midMarketRate, createdAt}`` records in time order.
        """
        pair = CurrencyPair.parse(pair)
        rate = float(start_rate)
        records = []
        current = start

        while current < end:
            records.append(
                {
                    "pair": str(pair),
                    "midMarketRate": round(rate, 8),
                    "createdAt": format_timestamp(current),
                }
            )
            rate *= math.exp(self.rng.gauss(0, volatility))
            jitter = self.rng.uniform(0.5, 1.5)
            current += timedelta(seconds=interval.total_seconds() * jitter)

        return records
