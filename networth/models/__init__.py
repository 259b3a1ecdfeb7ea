"""Domain models for ledger replay and valuation."""

from networth.models.enums import AsofDirection, Direction, MissingRatePolicy, TransactionType
from networth.models.rate import CurrencyPair, ExchangeRateObservation
from networth.models.transaction import (
    ConversionTransaction,
    Leg,
    PaymentTransaction,
    Transaction,
    parse_timestamp,
    parse_transaction,
    sort_by_created_at,
)
from networth.models.wallet import NetWorthSample, WalletSnapshot

__all__ = [
    "AsofDirection",
    "ConversionTransaction",
    "CurrencyPair",
    "Direction",
    "ExchangeRateObservation",
    "Leg",
    "MissingRatePolicy",
    "NetWorthSample",
    "PaymentTransaction",
    "Transaction",
    "TransactionType",
    "WalletSnapshot",
    "parse_timestamp",
    "parse_transaction",
    "sort_by_created_at",
]
