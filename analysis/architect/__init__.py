"""
ARCHITECT - Price Path Simulator

"The first Matrix I designed was quite naturally perfect."

Builds synthetic worlds for the Oracle to watch: reference price paths
with a lagged, noisy oracle trailing behind.
"""

from .simulator import PriceSimulator, simulate_prices

__all__ = ["PriceSimulator", "simulate_prices"]
