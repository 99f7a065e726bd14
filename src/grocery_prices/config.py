"""Configuration management for Grocery Prices."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .models import Unit

DEFAULT_CEILINGS: dict[Unit, float] = {
    Unit.KILOGRAM: 100.0,
    Unit.LITER: 80.0,
    Unit.PIECE: 50.0,
    Unit.METER: 50.0,
    Unit.ROLL: 25.0,
    Unit.TABLET: 25.0,
}

DEFAULT_FLOORS: dict[Unit, float] = {
    Unit.KILOGRAM: 0.10,
    Unit.LITER: 0.10,
    Unit.PIECE: 0.05,
    Unit.METER: 0.10,
    Unit.ROLL: 0.10,
    Unit.TABLET: 0.05,
}


@dataclass
class DataConfig:
    """Snapshot location configuration."""

    snapshot_path: Path


@dataclass
class AnomalyConfig:
    """Thresholds for the price plausibility check.

    Ceilings and floors are per standard unit (kilogram, liter, piece, ...).
    """

    warn_deviation_pct: float = 50.0
    block_deviation_pct: float = 200.0
    min_samples: int = 2
    ceilings: dict[Unit, float] = field(default_factory=lambda: dict(DEFAULT_CEILINGS))
    floors: dict[Unit, float] = field(default_factory=lambda: dict(DEFAULT_FLOORS))


@dataclass
class InsightsConfig:
    """Settings for the overview analyses."""

    stale_after_days: int = 14
    top_products_limit: int = 10
    comparison_limit: int = 5


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    anomaly: AnomalyConfig
    insights: InsightsConfig


def _unit_table(defaults: dict[Unit, float], overrides: dict[str, Any]) -> dict[Unit, float]:
    """Merge a TOML table keyed by unit name over the default table."""
    table = dict(defaults)
    for unit_name, value in overrides.items():
        table[Unit(unit_name)] = float(value)
    return table


class ConfigManager:
    """Manages application configuration from TOML files."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        """Get data configuration."""
        return self._config.data

    @property
    def anomaly(self) -> AnomalyConfig:
        """Get anomaly threshold configuration."""
        return self._config.anomaly

    @property
    def insights(self) -> InsightsConfig:
        """Get insights configuration."""
        return self._config.insights

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "grocery-prices" / "config.toml",
            Path.home() / ".grocery-prices" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "grocery-prices" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return self._default_config()

        with open(self.config_path, "rb") as f:
            data = tomllib.load(f)

        anomaly = data.get("anomaly", {})
        insights = data.get("insights", {})

        return Config(
            data=DataConfig(
                snapshot_path=Path(
                    data.get("data", {}).get("snapshot_path", "~/grocery-prices/snapshot.json")
                ).expanduser(),
            ),
            anomaly=AnomalyConfig(
                warn_deviation_pct=anomaly.get("warn_deviation_pct", 50.0),
                block_deviation_pct=anomaly.get("block_deviation_pct", 200.0),
                min_samples=anomaly.get("min_samples", 2),
                ceilings=_unit_table(DEFAULT_CEILINGS, anomaly.get("ceilings", {})),
                floors=_unit_table(DEFAULT_FLOORS, anomaly.get("floors", {})),
            ),
            insights=InsightsConfig(
                stale_after_days=insights.get("stale_after_days", 14),
                top_products_limit=insights.get("top_products_limit", 10),
                comparison_limit=insights.get("comparison_limit", 5),
            ),
        )

    def _default_config(self) -> Config:
        """Return default configuration."""
        return Config(
            data=DataConfig(snapshot_path=Path.home() / "grocery-prices" / "snapshot.json"),
            anomaly=AnomalyConfig(),
            insights=InsightsConfig(),
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'anomaly.warn_deviation_pct'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if hasattr(value, key):
                value = getattr(value, key)
            elif isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default
