"""Custom exception hierarchy for networth."""


class NetWorthError(Exception):
    """Base exception for all networth errors."""


class MalformedTransactionError(NetWorthError):
    """Raised when a raw transaction record cannot be parsed."""


class CorruptTransactionError(NetWorthError):
    """Raised when a constructed transaction violates the model invariants."""


class MalformedRateError(NetWorthError):
    """Raised when a raw exchange rate record cannot be parsed."""


class RateSeriesError(NetWorthError):
    """Raised when an exchange rate series is empty, out of order or mixes pairs."""


class RateUnavailableError(NetWorthError):
    """Raised when no exchange rate qualifies and the policy forbids a fallback."""


class FeedError(NetWorthError):
    """Raised when a feed file cannot be read or has the wrong shape."""


class ConfigurationError(NetWorthError):
    """Raised when configuration is invalid or missing."""


class SinkError(NetWorthError):
    """Raised when a sink operation fails."""
