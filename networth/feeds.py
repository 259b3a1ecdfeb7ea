"""Loading of transaction and exchange rate feeds saved as JSON files.

Fetching the feeds is the caller's job; these helpers only read the
documents once they are on disk and hand them to the model parsers.
"""

import json
import logging
from collections.abc import Collection
from pathlib import Path
from typing import Any

from networth.exceptions import FeedError
from networth.models.rate import CurrencyPair
from networth.models.transaction import Transaction, parse_transaction
from networth.rates import ExchangeRateSeries

logger = logging.getLogger(__name__)


def load_json(path: str | Path) -> list[Any]:
    """Read a JSON document that must be an array of records."""
    file_path = Path(path)
    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise FeedError(f"Cannot read feed {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise FeedError(f"Feed {file_path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise FeedError(f"Feed {file_path} must contain a JSON array, got {type(data).__name__}")
    return data


def parse_transactions(
    records: list[Any],
    supported_currencies: Collection[str] | None = None,
) -> list[Transaction]:
    """Parse every record, failing the whole batch on the first bad one."""
    return [parse_transaction(record, supported_currencies) for record in records]


def load_transaction_feed(
    path: str | Path,
    supported_currencies: Collection[str] | None = None,
) -> list[Transaction]:
    """Load a transaction history file, in feed order."""
    transactions = parse_transactions(load_json(path), supported_currencies)
    logger.info("Loaded %d transactions from %s", len(transactions), path)
    return transactions


def load_rate_feed(
    path: str | Path,
    pair: CurrencyPair | str | None = None,
    strict: bool = False,
) -> ExchangeRateSeries:
    """Load an exchange rate history file into a series."""
    series = ExchangeRateSeries.from_records(load_json(path), pair=pair, strict=strict)
    logger.info("Loaded %d %s rates from %s", len(series), series.pair, path)
    return series
