"""
ORACLE - Adaptive Oracle Selector

Chooses, per tick, whether the published oracle value follows the live
reference price or the slower external quote.
"""

from collections.abc import Callable

from shared import AgentLogger, OracleSelection, OracleSource, PricePoint, ThresholdBand


class AdaptiveOracleSelector:
    """
    Publishes the reference price when it has moved further from the
    external quote than the current adaptive band allows.

    The decision uses only the inputs of the current tick. ``published``
    is the output of the last decision and is left alone when no quote is
    available.
    """

    def __init__(self):
        self.logger = AgentLogger("ORACLE-SELECTOR")

        self.published: float | None = None
        self.last_selection: OracleSelection | None = None

        self.selection_handlers: list[Callable[[OracleSelection], None]] = []

        # Statistics
        self.decisions = 0
        self.reference_selected = 0
        self.skipped = 0

    def on_selection(self, handler: Callable[[OracleSelection], None]) -> None:
        """Register selection handler."""
        self.selection_handlers.append(handler)

    @staticmethod
    def decide(
        latest: PricePoint,
        band: ThresholdBand,
        external_quote: float,
    ) -> OracleSelection:
        """Pure selection rule for one tick."""
        deviation = abs(latest.ref - external_quote) / external_quote
        threshold_deviation = (band.upper - band.lower) / (2 * external_quote)

        if deviation > threshold_deviation:
            return OracleSelection(
                value=latest.ref,
                source=OracleSource.REFERENCE,
                deviation=deviation,
                threshold_deviation=threshold_deviation,
            )
        return OracleSelection(
            value=external_quote,
            source=OracleSource.EXTERNAL,
            deviation=deviation,
            threshold_deviation=threshold_deviation,
        )

    def select(
        self,
        latest: PricePoint | None,
        band: ThresholdBand | None,
        external_quote: float | None,
    ) -> OracleSelection | None:
        """Decide and publish. Returns None when there is nothing to decide on."""
        if latest is None or band is None or not external_quote:
            self.skipped += 1
            return None

        selection = self.decide(latest, band, external_quote)

        previous_source = self.last_selection.source if self.last_selection else None
        if selection.source != previous_source:
            self.logger.info(
                "Published oracle source changed",
                source=selection.source.value,
                value=selection.value,
                deviation=round(selection.deviation, 6),
                threshold_deviation=round(selection.threshold_deviation, 6),
            )

        self.published = selection.value
        self.last_selection = selection
        self.decisions += 1
        if selection.source == OracleSource.REFERENCE:
            self.reference_selected += 1

        for handler in self.selection_handlers:
            try:
                handler(selection)
            except Exception as e:
                self.logger.error("Handler error", error=str(e))

        return selection

    def get_stats(self) -> dict:
        """Get selector statistics."""
        return {
            "decisions": self.decisions,
            "reference_selected": self.reference_selected,
            "skipped": self.skipped,
            "published": self.published,
        }
