"""
ORACLE - Tick Buffer

Bounded, arrival-ordered store of ingested price points.
"""

from collections import deque

from shared import AgentLogger, PricePoint


class TickBuffer:
    """
    Keeps the most recent ``capacity`` price points, oldest first.

    Points are kept in arrival order. A point older than the last one is
    still accepted; it is counted and logged so the CDE engine's negative
    time term can be traced back to the feed.
    """

    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.logger = AgentLogger("ORACLE-BUFFER")
        self.capacity = capacity

        self._points: deque[PricePoint] = deque(maxlen=capacity)

        # Bumped on every append; derived results key on it
        self.version = 0

        # Statistics
        self.points_appended = 0
        self.points_evicted = 0
        self.out_of_order = 0

    def append(self, point: PricePoint) -> None:
        """Append a point, evicting the oldest one when full."""
        last = self._points[-1] if self._points else None
        if last is not None and point.t < last.t:
            self.out_of_order += 1
            self.logger.debug(
                "Out-of-order tick accepted",
                t=point.t,
                last_t=last.t,
            )

        if len(self._points) == self.capacity:
            self.points_evicted += 1

        self._points.append(point)
        self.points_appended += 1
        self.version += 1

    def snapshot(self) -> tuple[PricePoint, ...]:
        """Read-only view of the buffer in arrival order."""
        return tuple(self._points)

    @property
    def latest(self) -> PricePoint | None:
        return self._points[-1] if self._points else None

    def clear(self) -> None:
        self._points.clear()
        self.version += 1

    def __len__(self) -> int:
        return len(self._points)

    def get_stats(self) -> dict:
        """Get buffer statistics."""
        return {
            "size": len(self._points),
            "capacity": self.capacity,
            "points_appended": self.points_appended,
            "points_evicted": self.points_evicted,
            "out_of_order": self.out_of_order,
        }
