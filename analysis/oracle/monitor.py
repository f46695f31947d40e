"""
ORACLE - Deviation Monitor

Per-tick pipeline: buffer append, CDE and threshold recompute, adaptive
oracle selection, static trigger detection and the CDE alert.
"""

import math
import threading
import time
from collections.abc import Callable, Mapping

from shared import (
    AgentLogger,
    CDEAlert,
    InvalidQuoteError,
    MalformedTickError,
    MonitorConfig,
    OracleSelection,
    PricePoint,
    ThresholdBand,
    TriggerPoint,
    get_config,
)

from .buffer import TickBuffer
from .cde import compute_cde, compute_cde_series, compute_cde_series_incremental
from .feed import is_usable_price, parse_ticker, validate_price, validate_quote
from .selector import AdaptiveOracleSelector
from .thresholds import adaptive_bands, check_static_deviation, static_band


def _now_ms() -> int:
    return int(time.time() * 1000)


class DeviationMonitor:
    """
    Tracks divergence between a reference price feed and an oracle quote.

    Every inbound tick triggers a full recompute of the derived outputs.
    Each reaction runs under one lock, so readers never see a half-updated
    state; the last good outputs stay in place when a tick is dropped.
    """

    def __init__(
        self,
        config: MonitorConfig | None = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.logger = AgentLogger("ORACLE-MONITOR")
        self.config = config or get_config()
        self.clock = clock

        thresholds = self.config.thresholds
        self.static_threshold = thresholds.static_threshold
        self.cde_threshold = thresholds.cde_threshold
        self.band_half_width = thresholds.static_band_half_width
        self.lookback = thresholds.adaptive_lookback
        self.volatility_cap = thresholds.adaptive_volatility_cap
        self.cde_mode = self.config.buffer.cde_mode

        self.buffer = TickBuffer(capacity=self.config.buffer.capacity)
        self.selector = AdaptiveOracleSelector()

        self._lock = threading.RLock()

        # Inputs
        self.oracle_quote: float | None = None
        self.current_price: float | None = None

        # Outputs
        self.cde: float = 0.0
        self.cde_series: list[float] = []
        self.static_band = ThresholdBand(upper=0.0, lower=0.0)
        self.adaptive_bands: list[ThresholdBand] = []
        self.triggers: list[TriggerPoint] = []
        self.cde_alerts: list[CDEAlert] = []
        self._cde_breached = False

        # Callbacks
        self.trigger_handlers: list[Callable[[TriggerPoint], None]] = []
        self.cde_alert_handlers: list[Callable[[CDEAlert], None]] = []

        # Statistics
        self.ticks_ingested = 0
        self.ticks_dropped = 0
        self.messages_ignored = 0
        self.quote_updates = 0
        self.quote_failures = 0

        self.logger.info(
            "Deviation monitor initialized",
            capacity=self.buffer.capacity,
            static_threshold=self.static_threshold,
            cde_threshold=self.cde_threshold,
            cde_mode=self.cde_mode,
        )

    def on_trigger(self, handler: Callable[[TriggerPoint], None]) -> None:
        """Register static trigger handler."""
        self.trigger_handlers.append(handler)

    def on_cde_alert(self, handler: Callable[[CDEAlert], None]) -> None:
        """Register CDE alert handler."""
        self.cde_alert_handlers.append(handler)

    def on_selection(self, handler: Callable[[OracleSelection], None]) -> None:
        """Register adaptive oracle selection handler."""
        self.selector.on_selection(handler)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def on_message(self, payload: str | bytes | Mapping) -> PricePoint | None:
        """
        Handle a raw reference feed message.

        Malformed tickers are logged and dropped without touching the
        buffer. Non-ticker messages are ignored.
        """
        try:
            ticker = parse_ticker(payload)
        except MalformedTickError as e:
            self._drop(e)
            return None

        if ticker is None:
            with self._lock:
                self.messages_ignored += 1
            return None

        return self.ingest_price(ticker.price)

    def ingest_price(
        self,
        price: float,
        timestamp_ms: int | None = None,
    ) -> PricePoint | None:
        """
        Ingest a live reference price.

        The point's oracle value is the current external quote, or the
        price itself until a quote has been received. Unusable prices are
        dropped and None is returned.
        """
        try:
            price = validate_price(price)
        except MalformedTickError as e:
            self._drop(e)
            return None

        with self._lock:
            t = self.clock() if timestamp_ms is None else timestamp_ms
            self.current_price = price
            quote = self.oracle_quote
            point = PricePoint(t=t, ref=price, oracle=quote or price)
            self._process(point, quote)
            return point

    def ingest_point(self, point: PricePoint) -> PricePoint | None:
        """
        Ingest a complete point, e.g. from a replay.

        The point's own oracle value is the quote for this tick only; the
        live quote and current price are left alone. A non-positive oracle
        value counts as no quote.
        """
        try:
            validate_price(point.ref)
        except MalformedTickError as e:
            self._drop(e)
            return None

        if not math.isfinite(point.oracle):
            self._drop(MalformedTickError(f"oracle is not finite: {point.oracle}", point))
            return None

        quote = point.oracle if is_usable_price(point.oracle) else None
        with self._lock:
            self._process(point, quote)
            return point

    def _drop(self, error: MalformedTickError) -> None:
        with self._lock:
            self.ticks_dropped += 1
        self.logger.warning("Dropped malformed tick", reason=error.reason)

    def update_oracle_quote(self, value: float) -> bool:
        """Store a new external quote. Returns False if it was rejected."""
        try:
            quote = validate_quote(value)
        except InvalidQuoteError as e:
            self.mark_oracle_unavailable(str(e))
            return False

        with self._lock:
            self.oracle_quote = quote
            self.quote_updates += 1
        self.logger.debug("Oracle quote updated", quote=quote)
        return True

    def mark_oracle_unavailable(self, reason: str) -> None:
        """Record a failed quote fetch. The last good quote is kept."""
        with self._lock:
            self.quote_failures += 1
        self.logger.warning(
            "Oracle quote unavailable",
            reason=reason,
            last_quote=self.oracle_quote,
        )

    def clear_oracle_quote(self) -> None:
        """Forget the external quote; decisions are skipped until a new one."""
        with self._lock:
            self.oracle_quote = None

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    def _process(self, point: PricePoint, quote: float | None) -> None:
        self.buffer.append(point)
        self.ticks_ingested += 1

        series = self.buffer.snapshot()
        self._recompute(series)

        self.selector.select(
            series[-1],
            self.adaptive_bands[-1] if self.adaptive_bands else None,
            quote,
        )

        trigger = check_static_deviation(
            point.ref, quote, point.t, self.static_threshold
        )
        if trigger is not None:
            self._emit_trigger(trigger, quote)

        self._check_cde(point.t)

    def _recompute(self, series: tuple[PricePoint, ...]) -> None:
        self.cde = compute_cde(series)
        if self.cde_mode == "incremental":
            self.cde_series = compute_cde_series_incremental(series)
        else:
            self.cde_series = compute_cde_series(series)

        self.static_band = static_band(series, self.band_half_width)
        self.adaptive_bands = adaptive_bands(
            series,
            lookback=self.lookback,
            cap=self.volatility_cap,
            base_half_width=self.band_half_width,
        )

    def _emit_trigger(self, trigger: TriggerPoint, quote: float) -> None:
        self.triggers.append(trigger)
        self.logger.info(
            "Static deviation threshold exceeded",
            t=trigger.t,
            price=trigger.value,
            quote=quote,
            threshold=self.static_threshold,
        )

        for handler in self.trigger_handlers:
            try:
                handler(trigger)
            except Exception as e:
                self.logger.error("Handler error", error=str(e))

    def _check_cde(self, t: int) -> None:
        if self.cde <= self.cde_threshold:
            self._cde_breached = False
            return
        if self._cde_breached:
            return

        self._cde_breached = True
        alert = CDEAlert(t=t, cde=self.cde, threshold=self.cde_threshold)
        self.cde_alerts.append(alert)
        self.logger.info(
            "CDE threshold exceeded",
            cde=round(self.cde, 4),
            threshold=self.cde_threshold,
        )

        for handler in self.cde_alert_handlers:
            try:
                handler(alert)
            except Exception as e:
                self.logger.error("Handler error", error=str(e))

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    @property
    def published_oracle(self) -> float | None:
        return self.selector.published

    @property
    def selection(self) -> OracleSelection | None:
        return self.selector.last_selection

    def snapshot(self) -> tuple[PricePoint, ...]:
        return self.buffer.snapshot()

    def deviation_value(self) -> float:
        """External quote minus the current price, 0 when either is missing."""
        if not self.current_price or not self.oracle_quote:
            return 0.0
        return self.oracle_quote - self.current_price

    def deviation_pct(self) -> float:
        """Signed quote deviation as a percentage of the current price."""
        if not self.current_price or not self.oracle_quote:
            return 0.0
        return (self.oracle_quote - self.current_price) / self.current_price * 100

    def get_stats(self) -> dict:
        """Get monitor statistics."""
        return {
            "ticks_ingested": self.ticks_ingested,
            "ticks_dropped": self.ticks_dropped,
            "messages_ignored": self.messages_ignored,
            "quote_updates": self.quote_updates,
            "quote_failures": self.quote_failures,
            "triggers": len(self.triggers),
            "cde_alerts": len(self.cde_alerts),
            "cde": round(self.cde, 4),
            "buffer": self.buffer.get_stats(),
            "selector": self.selector.get_stats(),
        }
