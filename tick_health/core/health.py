"""
Health monitor for a fixed-rate tick loop.

The monitor has two independent field groups:

- cached OS gauges (CPU, CPU steal, RAM, swap), refreshed at most once per
  cache interval by whichever thread reads them;
- tick cadence state (TPS and SPT accumulators, missed-tick windows),
  mutated only by the tick loop through record_tick().

Each group has its own lock.
"""
import logging
import math
import threading
import time
from typing import Callable, List, Optional

from .extrema import ExtremaAccumulator, ExtremaSummary
from .options import validate_tick_period
from .resource_probe import ResourceProbe


logger = logging.getLogger(__name__)


def _clamp(value: float, lo: float, hi: float) -> float:
    if math.isnan(value):
        return lo
    return min(hi, max(lo, value))


class HealthMonitor:
    # Getting gauges is relatively expensive.
    CACHE_INTERVAL = 30.0
    MISSED_TICKS_WINDOW = 30.0
    TPS_WINDOW = 1.0
    MAX_TICK_SECONDS = 10.0

    def __init__(
        self,
        tick_period_secs: float,
        probe=None,
        transport=None,
        clock: Callable[[], float] = time.monotonic,
        cache_interval: float = CACHE_INTERVAL,
        missed_ticks_window: float = MISSED_TICKS_WINDOW,
        probe_timeout: float = 2.0,
    ):
        self.tick_period_secs = validate_tick_period(tick_period_secs)
        self.cache_interval = float(cache_interval)
        self.missed_ticks_window = float(missed_ticks_window)
        self.probe_timeout = float(probe_timeout)
        self._probe = probe if probe is not None else ResourceProbe()
        self._transport = transport
        self._clock = clock
        now = clock()

        # Gauge group. Starts in the past so the first read refreshes.
        self._gauge_lock = threading.Lock()
        self._last_refresh = now - self.cache_interval * 2
        self._probe_thread: Optional[threading.Thread] = None
        self._cpu = 0.0
        self._cpu_steal = 0.0
        self._ram = 0.0
        self._swap = 0.0

        # Tick group.
        self._tick_lock = threading.Lock()
        self._missed_ticks = 0.0
        self._missed_ticks_start = now
        self._ticks_for_missed_ticks = 0
        self._spt = ExtremaAccumulator()
        self._tps = ExtremaAccumulator()
        self._ticks = 0
        self._tps_start = now

    # ----- Gauges -----

    def cpu(self) -> float:
        """CPU usage from 0 to 1 (possibly cached)."""
        self.refresh_if_necessary()
        with self._gauge_lock:
            return self._cpu

    def cpu_steal(self) -> float:
        self.refresh_if_necessary()
        with self._gauge_lock:
            return self._cpu_steal

    def ram(self) -> float:
        """RAM usage from 0 to 1 (possibly cached)."""
        self.refresh_if_necessary()
        with self._gauge_lock:
            return self._ram

    def swap(self) -> float:
        self.refresh_if_necessary()
        with self._gauge_lock:
            return self._swap

    def missed_ticks(self) -> float:
        """Fraction of scheduled ticks missed during the last closed window."""
        self.refresh_if_necessary()
        with self._tick_lock:
            return self._missed_ticks

    def bandwidth_rx(self) -> int:
        if self._transport is None:
            return 0
        return self._transport.bandwidth_rx()

    def bandwidth_tx(self) -> int:
        if self._transport is None:
            return 0
        return self._transport.bandwidth_tx()

    def connections(self) -> int:
        if self._transport is None:
            return 0
        return self._transport.connections()

    def refresh_if_necessary(self):
        with self._gauge_lock:
            now = self._clock()
            if now - self._last_refresh <= self.cache_interval:
                return
            self._last_refresh = now

            if self._probe_thread is not None and self._probe_thread.is_alive():
                logger.warning("[HealthMonitor] previous probe still running; keeping cached gauges")
                return
            if not self._run_probe():
                return

            self._cpu = self._read_gauge("cpu", self._probe.cpu_usage, self._cpu)
            self._cpu_steal = self._read_gauge("cpu_steal", self._probe.cpu_stolen_usage, self._cpu_steal)
            self._ram = self._read_gauge("ram", self._probe.ram_usage, self._ram)
            self._swap = self._read_gauge("swap", self._probe.ram_swap_usage, self._swap)

    def _run_probe(self) -> bool:
        """
        Run probe.update() on a helper thread, waiting at most probe_timeout.

        Returns False when the probe did not finish in time; the gauges must
        not be read while it is still writing them. A probe that finished with
        an error returns True because gauges it did sample are still valid.
        """
        errors: List[Exception] = []

        def update():
            try:
                self._probe.update()
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=update, name="health-probe", daemon=True)
        self._probe_thread = thread
        thread.start()
        thread.join(self.probe_timeout)
        if thread.is_alive():
            logger.warning("[HealthMonitor] probe did not finish within %.1fs; keeping cached gauges", self.probe_timeout)
            return False
        if errors:
            logger.error("[HealthMonitor] error updating health: %s", errors[0])
        return True

    def _read_gauge(self, name: str, accessor: Callable[[], Optional[float]], previous: float) -> float:
        try:
            value = accessor()
        except Exception as e:
            logger.error("[HealthMonitor] reading %s failed: %s", name, e)
            return previous
        if value is None or math.isnan(value):
            return previous
        return _clamp(float(value), 0.0, 1.0)

    # ----- Tick cadence -----

    def take_tps(self) -> ExtremaSummary:
        """Drain ticks-per-second samples collected since the last call."""
        with self._tick_lock:
            return self._tps.take()

    def take_spt(self) -> ExtremaSummary:
        """Drain seconds-per-tick samples collected since the last call."""
        with self._tick_lock:
            return self._spt.take()

    def tps_summary(self) -> ExtremaSummary:
        with self._tick_lock:
            return self._tps.summary()

    def spt_summary(self) -> ExtremaSummary:
        with self._tick_lock:
            return self._spt.summary()

    def record_tick(self, now: float, elapsed: float, tick_period: Optional[float] = None):
        """
        Call once per completed tick, in wall-clock order.

        Args:
            now: Clock reading at the end of the tick (same clock as the monitor's).
            elapsed: Wall-clock seconds the tick took.
            tick_period: Nominal seconds per tick; defaults to the configured value.
        """
        if tick_period is None:
            period = self.tick_period_secs
        else:
            period = validate_tick_period(tick_period)

        with self._tick_lock:
            self._ticks_for_missed_ticks += 1
            self._spt.push(_clamp(float(elapsed), 0.0, self.MAX_TICK_SECONDS))

            # Windows close within half a tick of a full second.
            tps_elapsed = now - self._tps_start
            if tps_elapsed >= self.TPS_WINDOW - period * 0.5:
                if tps_elapsed >= self.TPS_WINDOW:
                    self._ticks += 1
                    self._tps.push(self._ticks)
                    self._ticks = 0
                else:
                    # Current tick seeds the next window.
                    self._tps.push(self._ticks)
                    self._ticks = 1
                self._tps_start = now
            else:
                self._ticks += 1

            missed_ticks_elapsed = now - self._missed_ticks_start
            if missed_ticks_elapsed > self.missed_ticks_window:
                scheduled_ticks = missed_ticks_elapsed / period
                missed = max(0.0, scheduled_ticks - self._ticks_for_missed_ticks) / scheduled_ticks
                self._missed_ticks = _clamp(missed, 0.0, 1.0)
                self._ticks_for_missed_ticks = 0
                self._missed_ticks_start = now
