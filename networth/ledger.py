"""Wallet ledger replay.

Wallet balances are never stored; they are rebuilt by folding the ordered
transaction log over an empty wallet, one snapshot per transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from networth.exceptions import CorruptTransactionError
from networth.models.transaction import ConversionTransaction, PaymentTransaction, Transaction
from networth.models.wallet import WalletSnapshot

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def apply_transaction(
    balances: Mapping[str, Decimal],
    transaction: Transaction,
) -> dict[str, Decimal]:
    """Return the balances that result from applying one transaction.

    The input mapping is left untouched.

    Raises
    ------
    CorruptTransactionError
        If a payment is neither a credit nor a debit, or the transaction
        is not a known variant.
    """
    updated = dict(balances)

    if isinstance(transaction, ConversionTransaction):
        source, target = transaction.from_leg, transaction.to_leg
        updated[source.currency] = updated.get(source.currency, ZERO) - source.amount
        updated[target.currency] = updated.get(target.currency, ZERO) + target.amount
    elif isinstance(transaction, PaymentTransaction):
        current = updated.get(transaction.currency, ZERO)
        if transaction.is_credit():
            updated[transaction.currency] = current + transaction.amount
        elif transaction.is_debit():
            updated[transaction.currency] = current - transaction.amount
        else:
            raise CorruptTransactionError(
                f"Payment at {transaction.created_at.isoformat()} has direction {transaction.direction!r}"
            )
    else:
        raise CorruptTransactionError(f"Unknown transaction variant: {type(transaction).__name__}")

    return updated


def replay(
    transactions: Iterable[Transaction],
    currencies: Iterable[str] = (),
) -> list[WalletSnapshot]:
    """Rebuild the wallet after every transaction.

    Parameters
    ----------
    transactions : Iterable[Transaction]
        Transactions in application order (see ``sort_by_created_at``).
    currencies : Iterable[str]
        Currencies to start at zero. Currencies first seen in the ledger
        are added at zero as they appear.

    Returns
    -------
    list[WalletSnapshot]
        One snapshot per transaction, in input order.
    """
    balances: dict[str, Decimal] = {currency: ZERO for currency in currencies}
    snapshots: list[WalletSnapshot] = []

    for transaction in transactions:
        balances = apply_transaction(balances, transaction)
        snapshots.append(WalletSnapshot(time=transaction.created_at, balances=balances))

    logger.debug("Replayed %d transactions", len(snapshots))
    return snapshots


def final_balances(snapshots: list[WalletSnapshot]) -> dict[str, Decimal]:
    """Balances after the last transaction (empty for an empty ledger)."""
    if not snapshots:
        return {}
    return dict(snapshots[-1].balances)
