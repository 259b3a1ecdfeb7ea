"""Net worth engine: parse, sort, replay and sample a ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from networth.config import EngineConfig
from networth.feeds import parse_transactions
from networth.ledger import final_balances, replay
from networth.models.rate import CurrencyPair
from networth.models.transaction import Transaction, sort_by_created_at
from networth.models.wallet import NetWorthSample, WalletSnapshot
from networth.rates import ExchangeRateSeries, RateBook
from networth.sampler import DailyNetWorthSampler

logger = logging.getLogger(__name__)


@dataclass
class NetWorthReport:
    """Everything one engine run produced."""

    transactions: list[Transaction] = field(default_factory=list)
    snapshots: list[WalletSnapshot] = field(default_factory=list)
    samples: list[NetWorthSample] = field(default_factory=list)

    @property
    def final_balances(self) -> dict[str, Decimal]:
        return final_balances(self.snapshots)

    @property
    def unvalued_days(self) -> list[NetWorthSample]:
        return [sample for sample in self.samples if sample.unvalued]


class NetWorthEngine:
    """Compute a daily base-currency net worth series from raw feeds.

    Parameters
    ----------
    config : EngineConfig | None
        Engine configuration. Defaults to ``EngineConfig()``.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.config.valuation.validate()

    def compute(
        self,
        transaction_records: list[Any],
        rate_records_by_pair: Mapping[CurrencyPair | str, Iterable[Mapping[str, Any]]],
    ) -> NetWorthReport:
        """Run the engine on raw feed records.

        Parameters
        ----------
        transaction_records : list[Any]
            Transaction feed records in any order.
        rate_records_by_pair : Mapping[CurrencyPair | str, Iterable[Mapping[str, Any]]]
            Rate feed records keyed by pair (``"CAD_BTC"``).

        Raises
        ------
        MalformedTransactionError
            If any transaction record is malformed.
        MalformedRateError
            If any rate record is malformed.
        """
        valuation = self.config.valuation
        transactions = parse_transactions(transaction_records, valuation.supported_currencies)
        series = [
            ExchangeRateSeries.from_records(records, pair=pair)
            for pair, records in rate_records_by_pair.items()
        ]
        return self.compute_from_models(transactions, series)

    def compute_from_models(
        self,
        transactions: Iterable[Transaction],
        series: Mapping[Any, ExchangeRateSeries] | Iterable[ExchangeRateSeries],
    ) -> NetWorthReport:
        """Run the engine on already parsed transactions and rate series."""
        valuation = self.config.valuation

        ordered = sort_by_created_at(transactions)
        snapshots = replay(ordered, valuation.supported_currencies)

        rate_book = RateBook(valuation.base_currency, series, spot_rates=valuation.spot_rates)
        sampler = DailyNetWorthSampler(
            rate_book,
            direction=valuation.asof_direction,
            policy=valuation.missing_rate_policy,
            timezone=valuation.timezone,
        )
        samples = sampler.sample(snapshots)

        if samples:
            logger.info(
                "Valued %d transactions over %d days (%s to %s) in %s",
                len(ordered),
                len(samples),
                samples[0].time.date().isoformat(),
                samples[-1].time.date().isoformat(),
                valuation.base_currency,
            )
        else:
            logger.info("No daily samples for %d transactions", len(ordered))

        return NetWorthReport(transactions=ordered, snapshots=snapshots, samples=samples)
