"""Transaction models for the wallet ledger.

A ledger event is one of two closed variants:

- ``ConversionTransaction``: moves value between two currencies
- ``PaymentTransaction``: credits or debits a single currency

Raw feed records are turned into variants by ``parse_transaction``.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from operator import attrgetter
from typing import Any

from networth.exceptions import MalformedTransactionError
from networth.models.enums import Direction, TransactionType


@dataclass(frozen=True)
class Leg:
    """One side of a currency conversion."""

    currency: str
    amount: Decimal


@dataclass(frozen=True)
class Transaction:
    """Base ledger event. Use one of the concrete variants."""

    created_at: datetime
    amount: Decimal
    currency: str
    type: TransactionType
    direction: Direction | None

    def __post_init__(self) -> None:
        # Naive instants are taken as UTC so every ledger compares as aware
        object.__setattr__(self, "created_at", parse_timestamp(self.created_at))

    def is_conversion(self) -> bool:
        return False

    def is_credit(self) -> bool:
        return self.direction == Direction.CREDIT

    def is_debit(self) -> bool:
        return self.direction == Direction.DEBIT


@dataclass(frozen=True)
class ConversionTransaction(Transaction):
    """Exchange of ``from_leg`` for ``to_leg`` inside the wallet."""

    from_leg: Leg
    to_leg: Leg

    def is_conversion(self) -> bool:
        return True


@dataclass(frozen=True)
class PaymentTransaction(Transaction):
    """Credit or debit against an external account or a peer."""

    to_address: str | None = None  # opaque, not used for valuation


def sort_by_created_at(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Sort transactions by creation time.

    The sort is stable: transactions sharing an instant keep their input
    order, which is the order their deltas are applied in.
    """
    return sorted(transactions, key=attrgetter("created_at"))


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    A trailing ``Z`` is accepted. Naive values are taken as UTC.

    Raises
    ------
    ValueError
        If the value is not a datetime or an ISO-8601 string.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_decimal(value: Any) -> Decimal:
    """Convert a feed number to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def parse_transaction(
    record: Mapping[str, Any],
    supported_currencies: Collection[str] | None = None,
) -> Transaction:
    """Build exactly one transaction variant from a raw feed record.

    Parameters
    ----------
    record : Mapping[str, Any]
        Feed record with ``createdAt``, ``amount``, ``currency``, ``type``,
        ``direction``, ``from`` and ``to`` keys.
    supported_currencies : Collection[str] | None
        When given, every currency in the record must belong to it.

    Returns
    -------
    Transaction
        A ``ConversionTransaction`` or a ``PaymentTransaction``.

    Raises
    ------
    MalformedTransactionError
        If the record has an unknown type or misses fields its type needs.
    """
    if not isinstance(record, Mapping):
        raise MalformedTransactionError(f"Transaction record must be an object, got {type(record).__name__}")

    raw_type = record.get("type")
    try:
        tx_type = TransactionType(str(raw_type).strip().lower())
    except ValueError:
        raise MalformedTransactionError(f"Unrecognized transaction type: {raw_type!r}") from None

    try:
        created_at = parse_timestamp(record.get("createdAt"))
    except ValueError as exc:
        raise MalformedTransactionError(f"Invalid createdAt: {record.get('createdAt')!r}") from exc

    if tx_type == TransactionType.CONVERSION:
        return _parse_conversion(record, created_at, supported_currencies)
    return _parse_payment(record, tx_type, created_at, supported_currencies)


def _parse_conversion(
    record: Mapping[str, Any],
    created_at: datetime,
    supported_currencies: Collection[str] | None,
) -> ConversionTransaction:
    from_leg = _parse_leg(record.get("from"), "from", supported_currencies)
    to_leg = _parse_leg(record.get("to"), "to", supported_currencies)

    # Conversion records echo the received side at the top level
    if record.get("amount") is None:
        amount = to_leg.amount
    else:
        amount = _parse_amount(record.get("amount"))
    if record.get("currency") is None:
        currency = to_leg.currency
    else:
        currency = _parse_currency(record.get("currency"), supported_currencies)

    return ConversionTransaction(
        created_at=created_at,
        amount=amount,
        currency=currency,
        type=TransactionType.CONVERSION,
        direction=None,
        from_leg=from_leg,
        to_leg=to_leg,
    )


def _parse_payment(
    record: Mapping[str, Any],
    tx_type: TransactionType,
    created_at: datetime,
    supported_currencies: Collection[str] | None,
) -> PaymentTransaction:
    raw_direction = record.get("direction")
    if raw_direction is None:
        raise MalformedTransactionError(f"Payment of type {tx_type.value!r} is missing a direction")
    try:
        direction = Direction(str(raw_direction).strip().lower())
    except ValueError:
        raise MalformedTransactionError(f"Unrecognized direction: {raw_direction!r}") from None

    to = record.get("to")
    to_address = None
    if isinstance(to, Mapping):
        address = to.get("toAddress", to.get("address"))
        to_address = str(address) if address is not None else None

    return PaymentTransaction(
        created_at=created_at,
        amount=_parse_amount(record.get("amount")),
        currency=_parse_currency(record.get("currency"), supported_currencies),
        type=tx_type,
        direction=direction,
        to_address=to_address,
    )


def _parse_leg(
    raw: Any,
    side: str,
    supported_currencies: Collection[str] | None,
) -> Leg:
    if not isinstance(raw, Mapping) or "currency" not in raw or "amount" not in raw:
        raise MalformedTransactionError(f"Conversion is missing a complete '{side}' leg")

    amount = _parse_amount(raw["amount"])
    if amount <= 0:
        raise MalformedTransactionError(f"Conversion '{side}' amount must be positive, got {amount}")

    return Leg(
        currency=_parse_currency(raw["currency"], supported_currencies),
        amount=amount,
    )


def _parse_amount(raw: Any) -> Decimal:
    try:
        return parse_decimal(raw)
    except ValueError as exc:
        raise MalformedTransactionError(f"Invalid amount: {raw!r}") from exc


def _parse_currency(raw: Any, supported_currencies: Collection[str] | None) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedTransactionError(f"Invalid currency: {raw!r}")
    currency = raw.strip().upper()
    if supported_currencies is not None and currency not in supported_currencies:
        raise MalformedTransactionError(f"Unsupported currency: {currency}")
    return currency
