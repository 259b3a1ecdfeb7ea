"""Tests for loading feeds from JSON files."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from networth.exceptions import FeedError, MalformedTransactionError
from networth.feeds import load_json, load_rate_feed, load_transaction_feed, parse_transactions
from networth.models import ConversionTransaction, CurrencyPair, PaymentTransaction


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadJson:
    """Tests for load_json."""

    def test_array(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "feed.json", [{"a": 1}])
        assert load_json(path) == [{"a": 1}]

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = write_json(tmp_path / "feed.json", {"a": 1})
        with pytest.raises(FeedError, match="JSON array"):
            load_json(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "feed.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(FeedError, match="not valid JSON"):
            load_json(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FeedError, match="Cannot read"):
            load_json(tmp_path / "missing.json")


class TestTransactionFeed:
    """Tests for transaction feeds."""

    def test_load(self, tmp_path: Path, payment_record: dict, conversion_record: dict) -> None:
        path = write_json(tmp_path / "transaction_history.json", [conversion_record, payment_record])
        transactions = load_transaction_feed(path)

        # Feed order is preserved; sorting is the engine's job
        assert isinstance(transactions[0], ConversionTransaction)
        assert isinstance(transactions[1], PaymentTransaction)

    def test_supported_currencies(self, tmp_path: Path, conversion_record: dict) -> None:
        path = write_json(tmp_path / "transaction_history.json", [conversion_record])
        with pytest.raises(MalformedTransactionError):
            load_transaction_feed(path, supported_currencies=("CAD",))

    def test_parse_transactions_fails_whole_batch(self, payment_record: dict) -> None:
        with pytest.raises(MalformedTransactionError):
            parse_transactions([payment_record, {"type": "conversion", "createdAt": "2021-01-01T00:00:00Z"}])


class TestRateFeed:
    """Tests for rate feeds."""

    def test_load(self, tmp_path: Path) -> None:
        records = [
            {"pair": "CAD_ETH", "midMarketRate": 3100.5, "createdAt": "2021-01-02T00:00:00.000Z"},
            {"pair": "CAD_ETH", "midMarketRate": 3085.12, "createdAt": "2021-01-01T00:00:00.000Z"},
        ]
        series = load_rate_feed(write_json(tmp_path / "rates_CAD_ETH.json", records))

        assert series.pair == CurrencyPair("CAD", "ETH")
        assert [o.rate for o in series] == [Decimal("3085.12"), Decimal("3100.5")]

    def test_explicit_pair_for_bare_records(self, tmp_path: Path) -> None:
        records = [{"midMarketRate": 1, "createdAt": "2021-01-01T00:00:00Z"}]
        series = load_rate_feed(write_json(tmp_path / "rates.json", records), pair="CAD_BTC")

        assert series.pair == CurrencyPair("CAD", "BTC")
