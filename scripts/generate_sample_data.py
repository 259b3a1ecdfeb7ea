#!/usr/bin/env python3
"""Generate synthetic transaction and rate feeds for manual validation.

Writes ``transaction_history.json`` and one ``rates_<PAIR>.json`` per
tracked currency, in the same shape as the real feeds.
"""

import argparse
import json
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

from networth.generators import RateFeedGenerator, TransactionFeedGenerator
from networth.models.rate import CurrencyPair

REFERENCE_PRICES = {
    "BTC": Decimal("46472.34"),
    "ETH": Decimal("3085.12"),
}


def save_json(data: list, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"Saved {len(data)} records to {filepath}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate sample feeds")
    parser.add_argument("--output-dir", type=Path, default=Path("local"), help="Output directory (default: local)")
    parser.add_argument("--days", type=int, default=90, help="Length of the history in days (default: 90)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--base-currency", default="CAD", help="Base currency (default: CAD)")
    parser.add_argument("--per-day", type=float, default=1.0, help="Average transactions per day (default: 1.0)")
    args = parser.parse_args()

    args.output_dir.mkdir(parents=True, exist_ok=True)
    end = datetime(2024, 1, 1)
    start = end - timedelta(days=args.days)

    transaction_gen = TransactionFeedGenerator(REFERENCE_PRICES, base_currency=args.base_currency, seed=args.seed)
    save_json(
        transaction_gen.generate(start, end, avg_transactions_per_day=args.per_day),
        "transaction_history.json",
        args.output_dir,
    )

    rate_gen = RateFeedGenerator(seed=args.seed)
    for currency, price in REFERENCE_PRICES.items():
        pair = CurrencyPair(base=args.base_currency, quote=currency)
        # Rates run a day past the ledger so the last days are priced
        records = rate_gen.generate(pair, start, end + timedelta(days=1), start_rate=price)
        save_json(records, f"rates_{pair}.json", args.output_dir)


if __name__ == "__main__":
    main()
