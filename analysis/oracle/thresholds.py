"""
ORACLE - Threshold Engine

Static and volatility-adaptive deviation bands, plus the static deviation
trigger that compares a live external quote against the tick price.
"""

from collections.abc import Sequence

import numpy as np

from shared import PricePoint, ThresholdBand, TriggerPoint

DEFAULT_HALF_WIDTH = 0.005
DEFAULT_LOOKBACK = 10
DEFAULT_VOLATILITY_CAP = 0.01
DEFAULT_STATIC_THRESHOLD = 0.02


def static_band(
    series: Sequence[PricePoint],
    half_width: float = DEFAULT_HALF_WIDTH,
) -> ThresholdBand:
    """Fixed +/- half_width band around the latest oracle value."""
    if not series:
        return ThresholdBand(upper=0.0, lower=0.0)
    return ThresholdBand.around(series[-1].oracle, half_width)


def check_static_deviation(
    tick_price: float,
    external_quote: float | None,
    t: int,
    threshold: float = DEFAULT_STATIC_THRESHOLD,
) -> TriggerPoint | None:
    """
    Compare an external quote with the live tick price.

    Returns a trigger at the tick price when
    ``|quote - price| / price`` exceeds ``threshold``.
    """
    if not external_quote or tick_price <= 0:
        return None

    deviation = abs(external_quote - tick_price) / tick_price
    if deviation > threshold:
        return TriggerPoint(t=t, value=tick_price)
    return None


def volatility_factor(
    window: Sequence[float],
    cap: float = DEFAULT_VOLATILITY_CAP,
) -> float:
    """
    Coefficient of variation of ``window``, clamped to [0, cap].

    Uses the population standard deviation. A zero mean has no defined
    ratio and is treated as maximum volatility.
    """
    values = np.asarray(window, dtype=float)
    mean = float(np.mean(values))
    if mean == 0:
        return cap

    std_dev = float(np.std(values))
    return min(cap, max(0.0, std_dev / mean))


def adaptive_band_at(
    series: Sequence[PricePoint],
    index: int,
    lookback: int = DEFAULT_LOOKBACK,
    cap: float = DEFAULT_VOLATILITY_CAP,
    base_half_width: float = DEFAULT_HALF_WIDTH,
) -> ThresholdBand:
    """Adaptive band for a single point of ``series``."""
    point = series[index]
    if index == 0:
        return ThresholdBand.around(point.oracle, base_half_width)

    window = min(lookback, index)
    recent = [p.oracle for p in series[index - window: index + 1]]
    return ThresholdBand.around(point.oracle, volatility_factor(recent, cap))


def adaptive_bands(
    series: Sequence[PricePoint],
    lookback: int = DEFAULT_LOOKBACK,
    cap: float = DEFAULT_VOLATILITY_CAP,
    base_half_width: float = DEFAULT_HALF_WIDTH,
) -> list[ThresholdBand]:
    """Adaptive band for every point, aligned index-for-index with ``series``."""
    return [
        adaptive_band_at(series, i, lookback, cap, base_half_width)
        for i in range(len(series))
    ]
