"""
ORACLE - Cumulative Deviation Exposure

CDE integrates the absolute gap between the reference price and the oracle
price over elapsed time, in price-units x seconds ("PE").

For an ordered sequence p[0..n-1]:

    CDE = sum_{i>=1} |p[i].ref - p[i].oracle| * (p[i].t - p[i-1].t) / 1000

Each rectangle uses the deviation at the later point. Timestamps that go
backwards produce a negative term; it is kept as is.
"""

from collections.abc import Sequence

from shared import PricePoint


def _term(prev: PricePoint, curr: PricePoint) -> float:
    return (abs(curr.ref - curr.oracle) * (curr.t - prev.t)) / 1000


def compute_cde(series: Sequence[PricePoint]) -> float:
    """CDE of a whole sequence. Fewer than two points gives 0."""
    if len(series) < 2:
        return 0.0

    total = 0.0
    for i in range(1, len(series)):
        total += _term(series[i - 1], series[i])
    return total


def compute_cde_series(series: Sequence[PricePoint]) -> list[float]:
    """
    CDE of every prefix ``series[0..i]``, aligned with ``series``.

    Indices 0 and 1 are reported as 0. Each later prefix is recomputed
    from scratch, which is quadratic over the sequence.
    """
    return [
        0.0 if i < 2 else compute_cde(series[: i + 1])
        for i in range(len(series))
    ]


class CDEAccumulator:
    """
    Running CDE, one term per added point.

    Terms are summed in the same order as ``compute_cde`` so the running
    total matches the batch result exactly.
    """

    def __init__(self):
        self.total = 0.0
        self.count = 0
        self._last: PricePoint | None = None

    def add(self, point: PricePoint) -> float:
        """Add a point and return the running total."""
        if self._last is not None:
            self.total += _term(self._last, point)
        self._last = point
        self.count += 1
        return self.total

    def reset(self) -> None:
        self.total = 0.0
        self.count = 0
        self._last = None


def compute_cde_series_incremental(series: Sequence[PricePoint]) -> list[float]:
    """Linear-time equivalent of ``compute_cde_series``."""
    acc = CDEAccumulator()
    values = []
    for i, point in enumerate(series):
        total = acc.add(point)
        values.append(0.0 if i < 2 else total)
    return values
