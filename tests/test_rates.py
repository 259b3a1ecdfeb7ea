"""Tests for exchange rate series and the rate book."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from networth.exceptions import RateSeriesError, RateUnavailableError
from networth.models import AsofDirection, CurrencyPair, ExchangeRateObservation, MissingRatePolicy
from networth.rates import ExchangeRateSeries, RateBook

T0 = datetime(2023, 1, 1, tzinfo=timezone.utc)


def t(seconds: int) -> datetime:
    """Instant ``seconds`` after a fixed origin."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def series(make_series) -> ExchangeRateSeries:
    """Rates 2 at t=10 and 3 at t=20."""
    return make_series("CAD_BTC", [(t(10), "2"), (t(20), "3")])


class TestForwardLookup:
    """First observation at or after the query instant."""

    def test_before_first_observation(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(5)) == Decimal("10")

    def test_between_observations_uses_next(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(15)) == Decimal("15")

    def test_after_last_observation_is_zero(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(25)) == Decimal("0")
        assert series.rate_at(t(25)) is None

    def test_exact_instant(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(10)) == Decimal("10")

    def test_accepts_iso_string(self, series: ExchangeRateSeries) -> None:
        assert series.rate_at("2023-01-01T00:00:15Z") == Decimal("3")


class TestBackwardLookup:
    """Last observation at or before the query instant."""

    def test_between_observations_uses_previous(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(15), direction=AsofDirection.BACKWARD) == Decimal("10")

    def test_after_last_observation(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(25), direction=AsofDirection.BACKWARD) == Decimal("15")

    def test_before_first_observation_is_unavailable(self, series: ExchangeRateSeries) -> None:
        assert series.rate_at(t(5), direction=AsofDirection.BACKWARD) is None


class TestTies:
    """Observations sharing an instant keep input order."""

    def test_forward_takes_first_backward_takes_last(self, make_series) -> None:
        tied = make_series("CAD_BTC", [(t(10), "2"), (t(10), "4")])

        assert tied.rate_at(t(10)) == Decimal("2")
        assert tied.rate_at(t(10), direction=AsofDirection.BACKWARD) == Decimal("4")


class TestMissingRatePolicy:
    """Policies applied when no observation qualifies."""

    def test_last_known_forward(self, series: ExchangeRateSeries) -> None:
        value = series.value_in_base(Decimal("5"), t(25), policy=MissingRatePolicy.LAST_KNOWN)
        assert value == Decimal("15")

    def test_last_known_backward(self, series: ExchangeRateSeries) -> None:
        rate = series.rate_at(t(5), direction=AsofDirection.BACKWARD, policy=MissingRatePolicy.LAST_KNOWN)
        assert rate == Decimal("2")

    def test_spot(self, series: ExchangeRateSeries) -> None:
        value = series.value_in_base(
            Decimal("5"), t(25), policy=MissingRatePolicy.SPOT, spot_rate=Decimal("7")
        )
        assert value == Decimal("35")

    def test_spot_without_rate_is_zero(self, series: ExchangeRateSeries) -> None:
        assert series.value_in_base(Decimal("5"), t(25), policy=MissingRatePolicy.SPOT) == Decimal("0")

    def test_raise(self, series: ExchangeRateSeries) -> None:
        with pytest.raises(RateUnavailableError, match="CAD_BTC"):
            series.value_in_base(Decimal("5"), t(25), policy=MissingRatePolicy.RAISE)

    def test_policy_ignored_when_rate_found(self, series: ExchangeRateSeries) -> None:
        assert series.rate_at(t(15), policy=MissingRatePolicy.RAISE) == Decimal("3")


class TestSeriesConstruction:
    """Tests for building series."""

    def test_unsorted_input_is_sorted(self, make_series) -> None:
        s = make_series("CAD_BTC", [(t(20), "3"), (t(10), "2")])

        assert [o.rate for o in s] == [Decimal("2"), Decimal("3")]
        assert len(s) == 2

    def test_strict_rejects_out_of_order(self, cad_btc: CurrencyPair) -> None:
        observations = [
            ExchangeRateObservation(pair=cad_btc, rate=Decimal("3"), observed_at=t(20)),
            ExchangeRateObservation(pair=cad_btc, rate=Decimal("2"), observed_at=t(10)),
        ]
        with pytest.raises(RateSeriesError, match="out of order"):
            ExchangeRateSeries(cad_btc, observations, strict=True)

    def test_strict_allows_ties(self, cad_btc: CurrencyPair) -> None:
        observations = [
            ExchangeRateObservation(pair=cad_btc, rate=Decimal("3"), observed_at=t(10)),
            ExchangeRateObservation(pair=cad_btc, rate=Decimal("2"), observed_at=t(10)),
        ]
        assert len(ExchangeRateSeries(cad_btc, observations, strict=True)) == 2

    def test_strict_rejects_empty(self, cad_btc: CurrencyPair) -> None:
        with pytest.raises(RateSeriesError, match="empty"):
            ExchangeRateSeries(cad_btc, [], strict=True)

    def test_empty_series_never_finds_a_rate(self, cad_btc: CurrencyPair) -> None:
        empty = ExchangeRateSeries(cad_btc, [])

        assert empty.lookup(t(0)) is None
        assert empty.rate_at(t(0), policy=MissingRatePolicy.LAST_KNOWN) is None

    def test_rejects_foreign_observations(self, cad_btc: CurrencyPair) -> None:
        eth = ExchangeRateObservation(pair=CurrencyPair("CAD", "ETH"), rate=Decimal("1"), observed_at=t(0))
        with pytest.raises(RateSeriesError):
            ExchangeRateSeries(cad_btc, [eth])

    def test_from_records_infers_pair(self, cad_btc: CurrencyPair) -> None:
        s = ExchangeRateSeries.from_records(
            [
                {"pair": "CAD_BTC", "midMarketRate": 3, "createdAt": "2023-01-01T00:00:20Z"},
                {"pair": "CAD_BTC", "midMarketRate": 2, "createdAt": "2023-01-01T00:00:10Z"},
            ]
        )

        assert s.pair == cad_btc
        assert s.observations[0].rate == Decimal("2")

    def test_from_records_empty_needs_pair(self) -> None:
        with pytest.raises(RateSeriesError):
            ExchangeRateSeries.from_records([])
        assert len(ExchangeRateSeries.from_records([], pair="CAD_BTC")) == 0

    def test_inverted(self, series: ExchangeRateSeries) -> None:
        inverse = series.inverted()

        assert inverse.pair == CurrencyPair("BTC", "CAD")
        assert [o.rate for o in inverse] == [Decimal("0.5"), Decimal("1") / Decimal("3")]
        assert [o.observed_at for o in inverse] == [t(10), t(20)]


class TestRateBook:
    """Tests for RateBook."""

    def test_base_currency_is_identity(self) -> None:
        book = RateBook("CAD")

        assert book.value_in_base(Decimal("12.5"), "CAD", t(0)) == Decimal("12.5")
        assert book.rate_at("CAD", t(0)) == Decimal("1")

    def test_direct_series(self, series: ExchangeRateSeries) -> None:
        book = RateBook("CAD", {"CAD_BTC": series})

        assert book.currencies == ["BTC"]
        assert book.value_in_base(Decimal("5"), "BTC", t(15)) == Decimal("15")

    def test_inverse_series(self, make_series) -> None:
        book = RateBook("CAD", [make_series("BTC_CAD", [(t(10), "0.5")])])

        assert book.series_for("BTC").pair == CurrencyPair("CAD", "BTC")
        assert book.value_in_base(Decimal("3"), "BTC", t(0)) == Decimal("6")

    def test_duplicate_series(self, series: ExchangeRateSeries, make_series) -> None:
        with pytest.raises(RateSeriesError, match="Duplicate"):
            RateBook("CAD", [series, make_series("BTC_CAD", [(t(10), "0.5")])])

    def test_unrelated_pair(self, make_series) -> None:
        with pytest.raises(RateSeriesError):
            RateBook("CAD", [make_series("USD_BTC", [(t(10), "1")])])

    def test_missing_series_follows_policy(self) -> None:
        book = RateBook("CAD", spot_rates={"eth": "3000"})

        assert book.rate_at("ETH", t(0)) is None
        assert book.value_in_base(Decimal("2"), "ETH", t(0)) == Decimal("0")
        assert book.value_in_base(Decimal("2"), "ETH", t(0), policy=MissingRatePolicy.SPOT) == Decimal("6000")
        with pytest.raises(RateUnavailableError):
            book.rate_at("ETH", t(0), policy=MissingRatePolicy.RAISE)

    def test_spot_rates_reach_series(self, series: ExchangeRateSeries) -> None:
        book = RateBook("CAD", [series], spot_rates={"BTC": Decimal("40000")})
        rate = book.rate_at("BTC", t(25), policy=MissingRatePolicy.SPOT)
        assert rate == Decimal("40000")
