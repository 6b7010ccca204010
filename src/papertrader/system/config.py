"""System configuration.

One configuration for the whole simulator, loaded from YAML.

Search order for the configuration file:
1. Explicit path passed to SystemConfig.load()
2. PAPERTRADER_CONFIG environment variable
3. ./config/system.yaml (project-local override)
4. Built-in defaults: src/papertrader/config/system.yaml
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from papertrader.system.log_system import LoggingConfig

CONFIG_ENV_VAR = "PAPERTRADER_CONFIG"
BUILTIN_CONFIG_PATH = Path(__file__).parent.parent / "config" / "system.yaml"
LOCAL_CONFIG_PATH = Path("config") / "system.yaml"


class LedgerSettings(BaseModel):
    """Ledger engine settings."""

    initial_balance: Decimal = Field(default=Decimal("10000.00"), description="Cash credited to new accounts")
    transaction_limit: int = Field(default=50, description="Max transactions returned by history queries")
    store: Literal["memory", "sql"] = Field(default="memory", description="Ledger store backend")
    database_url: str = Field(default="sqlite:///data/papertrader.db", description="SQLAlchemy URL for the sql store")

    @field_validator("initial_balance")
    @classmethod
    def validate_initial_balance(cls, v: Decimal) -> Decimal:
        """Validate initial balance is positive."""
        if v <= 0:
            raise ValueError(f"Initial balance must be positive, got {v}")
        return v

    @field_validator("transaction_limit")
    @classmethod
    def validate_transaction_limit(cls, v: int) -> int:
        """Validate transaction limit is positive."""
        if v < 1:
            raise ValueError(f"Transaction limit must be >= 1, got {v}")
        return v


class MarketDataSettings(BaseModel):
    """Market data provider settings."""

    timeout_seconds: float = Field(default=10.0, gt=0, description="Network timeout per provider call")
    quote_retries: int = Field(default=1, ge=0, description="Extra quote attempts during summary aggregation")
    search_limit: int = Field(default=10, ge=1, description="Max search results returned")


class SystemConfig(BaseModel):
    """Complete system configuration.

    Example:
        >>> config = SystemConfig.load()
        >>> config.ledger.initial_balance
        Decimal('10000.00')
    """

    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    market_data: MarketDataSettings = Field(default_factory=MarketDataSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def resolve_path(cls, path: Path | str | None = None) -> Path | None:
        """Return the first configuration file found in search order, or None."""
        if path is not None:
            return Path(path)

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        if LOCAL_CONFIG_PATH.exists():
            return LOCAL_CONFIG_PATH

        if BUILTIN_CONFIG_PATH.exists():
            return BUILTIN_CONFIG_PATH

        return None

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML.

        Args:
            path: Explicit config file; falls back to the search order above

        Returns:
            Validated SystemConfig (defaults if no file found)

        Raises:
            FileNotFoundError: If an explicit path does not exist
            ValueError: If the YAML is not a mapping or fails validation
        """
        config_path = cls.resolve_path(path)
        if config_path is None:
            return cls()

        if not config_path.exists():
            raise FileNotFoundError(f"System config not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"System config must be a mapping, got {type(data).__name__}: {config_path}")

        return cls(**data)


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the cached system configuration, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
