"""Configuration management for networth."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from networth.exceptions import ConfigurationError
from networth.models.enums import AsofDirection, MissingRatePolicy


@dataclass
class ValuationConfig:
    """Currencies and lookup policies used to value a wallet."""

    base_currency: str = "CAD"
    tracked_currencies: tuple[str, ...] = ("BTC", "ETH")
    timezone: str = "UTC"
    asof_direction: AsofDirection = AsofDirection.FORWARD
    missing_rate_policy: MissingRatePolicy = MissingRatePolicy.ZERO
    spot_rates: dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.normalize()

    def normalize(self) -> None:
        """Upper-case and strip every currency code, as the feeds are parsed."""
        self.base_currency = (self.base_currency or "").strip().upper()
        self.tracked_currencies = tuple((c or "").strip().upper() for c in self.tracked_currencies)
        self.spot_rates = {k.strip().upper(): v for k, v in self.spot_rates.items()}

    @property
    def supported_currencies(self) -> tuple[str, ...]:
        """Base currency followed by the tracked currencies."""
        return (self.base_currency, *[c for c in self.tracked_currencies if c != self.base_currency])

    def validate(self) -> None:
        """Check the configuration is usable.

        Raises
        ------
        ConfigurationError
            If a currency code is blank, or a spot rate is not positive
            or prices an unsupported currency.
        """
        self.normalize()
        if not self.base_currency:
            raise ConfigurationError("Base currency must be set")
        for currency in self.tracked_currencies:
            if not currency:
                raise ConfigurationError("Tracked currency codes must not be blank")
        for currency, rate in self.spot_rates.items():
            if currency not in self.supported_currencies:
                raise ConfigurationError(f"Spot rate given for unsupported currency {currency}")
            if Decimal(str(rate)) <= 0:
                raise ConfigurationError(f"Spot rate for {currency} must be positive")


@dataclass
class OutputConfig:
    """Output configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class EngineConfig:
    """Main configuration for networth."""

    valuation: ValuationConfig = field(default_factory=ValuationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables."""
        import json
        import os

        tracked = os.getenv("NETWORTH_TRACKED_CURRENCIES", "BTC,ETH")
        spot_rates_str = os.getenv("NETWORTH_SPOT_RATES")

        try:
            direction = AsofDirection(os.getenv("NETWORTH_ASOF_DIRECTION", "forward").lower())
            policy = MissingRatePolicy(os.getenv("NETWORTH_MISSING_RATE_POLICY", "zero").lower())
            raw_spot_rates = json.loads(spot_rates_str) if spot_rates_str else {}
            if not isinstance(raw_spot_rates, dict):
                raise ConfigurationError("NETWORTH_SPOT_RATES must be a JSON object")
            spot_rates = {k.upper(): Decimal(str(v)) for k, v in raw_spot_rates.items()}
        except (ValueError, ArithmeticError) as exc:
            raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc

        valuation = ValuationConfig(
            base_currency=os.getenv("NETWORTH_BASE_CURRENCY", "CAD").strip().upper(),
            tracked_currencies=tuple(c.strip().upper() for c in tracked.split(",") if c.strip()),
            timezone=os.getenv("NETWORTH_TIMEZONE", "UTC"),
            asof_direction=direction,
            missing_rate_policy=policy,
            spot_rates=spot_rates,
        )

        output = OutputConfig(
            output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            valuation=valuation,
            output=output,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
