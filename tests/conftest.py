"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal

import pytest

from networth.models import (
    ConversionTransaction,
    CurrencyPair,
    Direction,
    ExchangeRateObservation,
    Leg,
    PaymentTransaction,
    TransactionType,
)
from networth.rates import ExchangeRateSeries


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def cad_btc() -> CurrencyPair:
    """Pair pricing BTC in CAD."""
    return CurrencyPair(base="CAD", quote="BTC")


@pytest.fixture
def payment_record() -> dict:
    """Raw external account deposit as found in the feed."""
    return {
        "createdAt": "2021-04-11T23:20:02.155Z",
        "amount": 500,
        "currency": "CAD",
        "type": "external account",
        "direction": "credit",
        "from": {},
        "to": {"toAddress": "0xabc123"},
    }


@pytest.fixture
def conversion_record() -> dict:
    """Raw CAD to BTC conversion as found in the feed."""
    return {
        "createdAt": "2021-04-12T10:00:00.000Z",
        "amount": 0.01,
        "currency": "BTC",
        "type": "conversion",
        "direction": None,
        "from": {"currency": "CAD", "amount": 460.5},
        "to": {"currency": "BTC", "amount": 0.01},
    }


@pytest.fixture
def make_payment():
    """Factory for payment transactions."""

    def _make(
        when: datetime,
        amount: str,
        currency: str = "CAD",
        direction: Direction | None = Direction.CREDIT,
        tx_type: TransactionType = TransactionType.EXTERNAL_ACCOUNT,
    ) -> PaymentTransaction:
        return PaymentTransaction(
            created_at=when,
            amount=Decimal(amount),
            currency=currency,
            type=tx_type,
            direction=direction,
        )

    return _make


@pytest.fixture
def make_conversion():
    """Factory for conversion transactions."""

    def _make(
        when: datetime,
        from_currency: str,
        from_amount: str,
        to_currency: str,
        to_amount: str,
    ) -> ConversionTransaction:
        return ConversionTransaction(
            created_at=when,
            amount=Decimal(to_amount),
            currency=to_currency,
            type=TransactionType.CONVERSION,
            direction=None,
            from_leg=Leg(currency=from_currency, amount=Decimal(from_amount)),
            to_leg=Leg(currency=to_currency, amount=Decimal(to_amount)),
        )

    return _make


@pytest.fixture
def make_series():
    """Factory for a series from ``(datetime, rate)`` points."""

    def _make(pair: CurrencyPair | str, points: list[tuple[datetime, str]]) -> ExchangeRateSeries:
        parsed = CurrencyPair.parse(pair)
        return ExchangeRateSeries(
            parsed,
            [ExchangeRateObservation(pair=parsed, rate=Decimal(rate), observed_at=at) for at, rate in points],
        )

    return _make
