"""Transaction feed generator."""

from collections.abc import Mapping
from datetime import datetime, timedelta
from decimal import ROUND_DOWN, Decimal
from typing import Iterator

from networth.generators.base import BaseGenerator, format_timestamp
from networth.models.enums import Direction, TransactionType


class TransactionFeedGenerator(BaseGenerator):
    """Generate raw transaction history records for one wallet.

    Records follow the feed shape: payments to and from external accounts
    and peers, and conversions between the base currency and the foreign
    currencies. Debits and conversions never exceed the balance held.

    Parameters
    ----------
    prices : Mapping[str, Decimal]
        Base-currency price of one unit of each foreign currency; used to
        size conversions.
    base_currency : str
        Currency of deposits and withdrawals.
    seed : int | None
        Random seed for reproducibility.
    """

    KINDS = ["deposit", "withdrawal", "peer_credit", "peer_debit", "buy", "sell"]
    KIND_WEIGHTS = [0.25, 0.10, 0.10, 0.10, 0.30, 0.15]

    BASE_PLACES = Decimal("0.01")
    FOREIGN_PLACES = Decimal("0.00000001")

    def __init__(
        self,
        prices: Mapping[str, Decimal],
        base_currency: str = "CAD",
        seed: int | None = None,
    ) -> None:
        super().__init__(seed)
        self.base_currency = base_currency
        self.prices = {currency: Decimal(str(price)) for currency, price in prices.items()}
        self._balances: dict[str, Decimal] = {}

    def generate(
        self,
        start: datetime,
        end: datetime,
        avg_transactions_per_day: float = 1.0,
    ) -> list[dict]:
        """Generate a full history between ``start`` and ``end``.

        The first record is always a deposit so that later debits have
        something to draw on.
        """
        self._balances = {self.base_currency: Decimal("0")}
        self._balances.update({currency: Decimal("0") for currency in self.prices})

        records = [self._deposit(start)]
        records.extend(self._generate_between(start, end, avg_transactions_per_day))
        return records

    def _generate_between(
        self,
        start: datetime,
        end: datetime,
        avg_transactions_per_day: float,
    ) -> Iterator[dict]:
        current_date = start.replace(hour=0, minute=0, second=0, microsecond=0)

        while current_date < end:
            num_transactions = max(0, int(self.rng.expovariate(1 / avg_transactions_per_day)))
            timestamps = sorted(
                current_date.replace(
                    hour=self._weighted_hour(),
                    minute=self.rng.randint(0, 59),
                    second=self.rng.randint(0, 59),
                    microsecond=self.rng.randint(0, 999) * 1000,
                )
                for _ in range(num_transactions)
            )
            # Balances are tracked in time order so debits never overdraw
            for timestamp in timestamps:
                if timestamp <= start or timestamp >= end:
                    continue
                record = self._generate_one(timestamp)
                if record is not None:
                    yield record
            current_date += timedelta(days=1)

    def _generate_one(self, timestamp: datetime) -> dict | None:
        kind = self.rng.choices(self.KINDS, weights=self.KIND_WEIGHTS, k=1)[0]

        if kind == "deposit":
            return self._deposit(timestamp)
        if kind == "peer_credit":
            amount = self._base_amount(20, 500)
            return self._payment(timestamp, TransactionType.PEER, Direction.CREDIT, self.base_currency, amount)
        if kind in ("withdrawal", "peer_debit"):
            currency = self.rng.choice([self.base_currency, *self.prices])
            amount = self._fraction_of_balance(currency)
            if amount is None:
                return None
            tx_type = TransactionType.EXTERNAL_ACCOUNT if kind == "withdrawal" else TransactionType.PEER
            return self._payment(timestamp, tx_type, Direction.DEBIT, currency, amount)
        if not self.prices:
            return None

        foreign = self.rng.choice(list(self.prices))
        if kind == "buy":
            spend = self._fraction_of_balance(self.base_currency)
            if spend is None:
                return None
            received = (spend / self._price(foreign)).quantize(self.FOREIGN_PLACES, rounding=ROUND_DOWN)
            return self._conversion(timestamp, self.base_currency, spend, foreign, received)

        sold = self._fraction_of_balance(foreign)
        if sold is None:
            return None
        received = (sold * self._price(foreign)).quantize(self.BASE_PLACES, rounding=ROUND_DOWN)
        return self._conversion(timestamp, foreign, sold, self.base_currency, received)

    def _deposit(self, timestamp: datetime) -> dict:
        amount = self._base_amount(100, 5000)
        return self._payment(
            timestamp, TransactionType.EXTERNAL_ACCOUNT, Direction.CREDIT, self.base_currency, amount
        )

    def _payment(
        self,
        timestamp: datetime,
        tx_type: TransactionType,
        direction: Direction,
        currency: str,
        amount: Decimal,
    ) -> dict:
        sign = 1 if direction == Direction.CREDIT else -1
        self._balances[currency] += sign * amount

        if tx_type == TransactionType.PEER:
            to = {"toAddress": self.fake.email()}
        else:
            to = {"toAddress": "0x" + self.fake.sha1()}

        return {
            "createdAt": format_timestamp(timestamp),
            "amount": float(amount),
            "currency": currency,
            "type": tx_type.value,
            "direction": direction.value,
            "from": {},
            "to": to,
        }

    def _conversion(
        self,
        timestamp: datetime,
        from_currency: str,
        from_amount: Decimal,
        to_currency: str,
        to_amount: Decimal,
    ) -> dict | None:
        if to_amount <= 0:
            return None
        self._balances[from_currency] -= from_amount
        self._balances[to_currency] += to_amount

        return {
            "createdAt": format_timestamp(timestamp),
            "amount": float(to_amount),
            "currency": to_currency,
            "type": TransactionType.CONVERSION.value,
            "direction": None,
            "from": {"currency": from_currency, "amount": float(from_amount)},
            "to": {"currency": to_currency, "amount": float(to_amount)},
        }

    def _price(self, currency: str) -> Decimal:
        # Drift the reference price a little so conversions are not all at one rate
        return self.prices[currency] * Decimal(str(round(self.rng.uniform(0.9, 1.1), 4)))

    def _base_amount(self, low: int, high: int) -> Decimal:
        return Decimal(str(round(self.rng.uniform(low, high), 2)))

    def _fraction_of_balance(self, currency: str) -> Decimal | None:
        balance = self._balances.get(currency, Decimal("0"))
        places = self.BASE_PLACES if currency == self.base_currency else self.FOREIGN_PLACES
        amount = (balance * Decimal(str(round(self.rng.uniform(0.05, 0.5), 4)))).quantize(
            places, rounding=ROUND_DOWN
        )
        return amount if amount > 0 else None

    def _weighted_hour(self) -> int:
        """Generate hour weighted toward waking hours."""
        if self.rng.random() < 0.8:
            return self.rng.randint(8, 22)
        return self.rng.choice(list(range(0, 8)) + [23])
