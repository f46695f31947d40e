"""
ARCHITECT - Price Path Simulator

Generates synthetic reference/oracle price paths and replays them through
the deviation monitor without a live feed.
"""

import math

import numpy as np

from oracle.monitor import DeviationMonitor
from shared import AgentLogger, PricePoint, SimulationParams


def simulate_prices(
    params: SimulationParams,
    rng: np.random.Generator | int | None = None,
) -> list[PricePoint]:
    """
    Simulate ``params.duration`` points with ``t`` running from 0.

    The reference price is either a random walk seeded at ``base_price``
    or ``base_price + 2*sin(t/10) + drift*t``. The oracle observes the
    reference ``oracle_lag`` ticks back (clamped at t=0) plus uniform
    noise of width ``oracle_noise``. A negative lag is treated as 0.
    """
    if params.duration <= 0:
        return []

    rng = np.random.default_rng(rng)
    lag = max(0, params.oracle_lag)

    ref_prices: list[float] = []
    points: list[PricePoint] = []
    last_ref = params.base_price

    for t in range(params.duration):
        if params.use_random_walk:
            ref = last_ref + (rng.random() - 0.5) * params.volatility * params.base_price
        else:
            ref = params.base_price + 2 * math.sin(t / 10) + params.drift * t

        ref_prices.append(ref)
        last_ref = ref

        lagged = ref_prices[max(0, t - lag)]
        oracle = lagged + (rng.random() - 0.5) * params.oracle_noise

        points.append(PricePoint(t=t, ref=ref, oracle=oracle))

    return points


class PriceSimulator:
    """
    Alternate tick source for the deviation monitor.

    Holds a random generator so repeated runs with the same seed produce
    the same paths.
    """

    def __init__(self, seed: int | None = None):
        self.logger = AgentLogger("ARCHITECT")
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        # Statistics
        self.paths_generated = 0
        self.points_replayed = 0

        self.logger.info("Price simulator initialized", seed=seed)

    def generate(self, params: SimulationParams) -> list[PricePoint]:
        """Generate one price path."""
        points = simulate_prices(params, self.rng)
        self.paths_generated += 1
        self.logger.debug(
            "Price path generated",
            duration=params.duration,
            random_walk=params.use_random_walk,
            oracle_lag=params.oracle_lag,
        )
        return points

    def replay(
        self,
        monitor: DeviationMonitor,
        points: list[PricePoint],
        time_scale_ms: int = 1,
        start_ms: int = 0,
    ) -> DeviationMonitor:
        """
        Feed points through the monitor in order.

        Simulated ``t`` is a tick index; it is mapped to
        ``start_ms + t * time_scale_ms`` before ingestion.
        """
        for point in points:
            monitor.ingest_point(PricePoint(
                t=start_ms + point.t * time_scale_ms,
                ref=point.ref,
                oracle=point.oracle,
            ))
            self.points_replayed += 1

        self.logger.info(
            "Replay completed",
            points=len(points),
            cde=round(monitor.cde, 4),
            triggers=len(monitor.triggers),
        )
        return monitor

    def run(
        self,
        params: SimulationParams,
        monitor: DeviationMonitor | None = None,
        time_scale_ms: int = 1000,
    ) -> DeviationMonitor:
        """Generate a path and replay it through a (new) monitor."""
        monitor = monitor or DeviationMonitor()
        return self.replay(monitor, self.generate(params), time_scale_ms=time_scale_ms)

    def get_stats(self) -> dict:
        """Get simulator statistics."""
        return {
            "seed": self.seed,
            "paths_generated": self.paths_generated,
            "points_replayed": self.points_replayed,
        }
