"""
ORACLE - Deviation Analytics Engine

"You didn't come here to make the choice. You've already made it."

Watches the gap between a fast reference price and a slow oracle quote,
measures how much exposure that gap builds up, and decides which of the
two should be trusted on each tick.
"""

from .buffer import TickBuffer
from .cde import CDEAccumulator, compute_cde, compute_cde_series
from .monitor import DeviationMonitor
from .selector import AdaptiveOracleSelector

__all__ = [
    "TickBuffer",
    "CDEAccumulator",
    "compute_cde",
    "compute_cde_series",
    "AdaptiveOracleSelector",
    "DeviationMonitor",
]
