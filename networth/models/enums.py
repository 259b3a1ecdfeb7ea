"""Enumeration types for ledger and valuation entities."""

from enum import Enum


class TransactionType(str, Enum):
    EXTERNAL_ACCOUNT = "external account"
    PEER = "peer"
    CONVERSION = "conversion"


class Direction(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class AsofDirection(str, Enum):
    """Which side of the query instant an asof lookup searches.

    - FORWARD: first observation at or after the instant
    - BACKWARD: last observation at or before the instant
    """

    FORWARD = "forward"
    BACKWARD = "backward"


class MissingRatePolicy(str, Enum):
    """What a valuation does when no exchange rate qualifies."""

    ZERO = "zero"
    LAST_KNOWN = "last_known"
    SPOT = "spot"
    RAISE = "raise"
