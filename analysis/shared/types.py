"""
Shared types for the deviation monitor.
"""

from dataclasses import dataclass
from enum import Enum


class OracleSource(str, Enum):
    """Where the published oracle value came from."""
    REFERENCE = "reference"
    EXTERNAL = "external"


@dataclass(frozen=True)
class PricePoint:
    """One observation of the reference price and the oracle quote."""
    t: int  # Milliseconds
    ref: float
    oracle: float

    @property
    def deviation(self) -> float:
        """Absolute gap between reference and oracle."""
        return abs(self.ref - self.oracle)


@dataclass(frozen=True)
class TriggerPoint:
    """Moment the static deviation threshold was exceeded."""
    t: int
    value: float


@dataclass(frozen=True)
class ThresholdBand:
    """Deviation band around a price at one instant."""
    upper: float
    lower: float

    @classmethod
    def around(cls, center: float, fraction: float) -> "ThresholdBand":
        """Band of +/- fraction around center, ordered so upper >= lower."""
        a = center * (1 + fraction)
        b = center * (1 - fraction)
        return cls(upper=max(a, b), lower=min(a, b))

    @property
    def half_width(self) -> float:
        return (self.upper - self.lower) / 2


@dataclass
class SimulationParams:
    """Configuration for a simulated price path."""
    duration: int = 300  # Ticks
    base_price: float = 100.0
    use_random_walk: bool = False
    volatility: float = 0.02
    oracle_lag: int = 0  # Ticks
    oracle_noise: float = 0.5
    drift: float = 0.0


@dataclass(frozen=True)
class OracleSelection:
    """Adaptive oracle decision for one tick."""
    value: float
    source: OracleSource
    deviation: float
    threshold_deviation: float


@dataclass(frozen=True)
class CDEAlert:
    """CDE crossed above the configured alerting bound."""
    t: int
    cde: float
    threshold: float
