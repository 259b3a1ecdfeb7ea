"""Tests for custom exception hierarchy."""

import pytest

from networth.exceptions import (
    ConfigurationError,
    CorruptTransactionError,
    FeedError,
    MalformedRateError,
    MalformedTransactionError,
    NetWorthError,
    RateSeriesError,
    RateUnavailableError,
    SinkError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_net_worth_error_is_exception(self) -> None:
        assert isinstance(NetWorthError("test"), Exception)

    @pytest.mark.parametrize(
        "error_class",
        [
            ConfigurationError,
            CorruptTransactionError,
            FeedError,
            MalformedRateError,
            MalformedTransactionError,
            RateSeriesError,
            RateUnavailableError,
            SinkError,
        ],
    )
    def test_subclasses_net_worth_error(self, error_class: type) -> None:
        assert isinstance(error_class("test"), NetWorthError)

    def test_malformed_and_corrupt_are_distinct(self) -> None:
        assert not issubclass(MalformedTransactionError, CorruptTransactionError)
        assert not issubclass(CorruptTransactionError, MalformedTransactionError)

    def test_exception_message(self) -> None:
        err = MalformedTransactionError("Unrecognized transaction type: 'airdrop'")
        assert str(err) == "Unrecognized transaction type: 'airdrop'"
