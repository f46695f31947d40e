"""
Deviation Monitor Shared - Common types and utilities for the analytics core.
"""

from .config import MonitorConfig, get_config
from .errors import DeviationMonitorError, InvalidQuoteError, MalformedTickError
from .logger import AgentLogger, configure_logging, get_logger
from .types import (
    CDEAlert,
    OracleSelection,
    OracleSource,
    PricePoint,
    SimulationParams,
    ThresholdBand,
    TriggerPoint,
)

__all__ = [
    # Types
    "PricePoint",
    "TriggerPoint",
    "ThresholdBand",
    "SimulationParams",
    "OracleSource",
    "OracleSelection",
    "CDEAlert",
    # Errors
    "DeviationMonitorError",
    "MalformedTickError",
    "InvalidQuoteError",
    # Config
    "get_config",
    "MonitorConfig",
    # Logger
    "get_logger",
    "configure_logging",
    "AgentLogger",
]
