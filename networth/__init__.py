"""Daily base-currency net worth of a multi-currency wallet."""

from networth.engine import NetWorthEngine, NetWorthReport
from networth.ledger import apply_transaction, replay
from networth.rates import ExchangeRateSeries, RateBook
from networth.sampler import DailyNetWorthSampler, sample_daily

__version__ = "0.1.0"

__all__ = [
    "DailyNetWorthSampler",
    "ExchangeRateSeries",
    "NetWorthEngine",
    "NetWorthReport",
    "RateBook",
    "apply_transaction",
    "replay",
    "sample_daily",
]
