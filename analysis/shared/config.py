"""
Configuration management for the deviation monitor.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from .types import SimulationParams


class ThresholdConfig(BaseSettings):
    """Deviation threshold configuration."""
    static_threshold: float = 0.02
    static_band_half_width: float = 0.005
    adaptive_lookback: int = 10
    adaptive_volatility_cap: float = 0.01
    cde_threshold: float = 500.0  # PE


class BufferConfig(BaseSettings):
    """Tick buffer configuration."""
    capacity: int = 1000
    cde_mode: Literal["batch", "incremental"] = "batch"


class FeedConfig(BaseSettings):
    """Inbound feed configuration."""
    product_id: str = "BTC-USD"
    oracle_poll_interval_s: int = 30
    oracle_decimals: int = 8


class MonitoringConfig(BaseSettings):
    """Monitoring configuration."""
    log_level: str = "INFO"
    json_logs: bool = False


class SimulationConfig(BaseSettings):
    """Simulator defaults."""
    duration: int = 300
    base_price: float = 100.0
    use_random_walk: bool = False
    volatility: float = 0.02
    oracle_lag: int = 0
    oracle_noise: float = 0.5
    drift: float = 0.0
    seed: int | None = None

    def to_params(self) -> SimulationParams:
        """Build simulation parameters from these defaults."""
        return SimulationParams(
            duration=self.duration,
            base_price=self.base_price,
            use_random_walk=self.use_random_walk,
            volatility=self.volatility,
            oracle_lag=self.oracle_lag,
            oracle_noise=self.oracle_noise,
            drift=self.drift,
        )


class MonitorConfig(BaseSettings):
    """Main deviation monitor configuration."""

    model_config = {"env_prefix": "DEVIATION_", "env_nested_delimiter": "__"}

    # Environment
    environment: str = Field(default="development")

    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"


@lru_cache
def get_config() -> MonitorConfig:
    """Get cached configuration instance."""
    # Load .env file if present
    from dotenv import load_dotenv
    load_dotenv()

    return MonitorConfig()
