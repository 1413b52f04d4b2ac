import logging
import threading
import time
from typing import Callable, Optional

from .health import HealthMonitor
from .options import validate_tick_period


logger = logging.getLogger(__name__)


class TickLoop(threading.Thread):
    """Fixed-rate host loop reporting every completed tick to a HealthMonitor."""

    def __init__(self, monitor: HealthMonitor, tick_period_secs: float, on_tick: Optional[Callable[[], None]] = None, clock: Callable[[], float] = time.monotonic, sleep: Callable[[float], None] = time.sleep):
        super().__init__(daemon=True, name="tick-loop")
        self.monitor = monitor
        self.tick_period_secs = validate_tick_period(tick_period_secs)
        self.on_tick = on_tick
        self.clock = clock
        self.sleep = sleep
        self.ticks = 0
        self._running = threading.Event()
        self._running.set()

    def run(self):
        next_deadline = self.clock()
        while self._running.is_set():
            start = time.perf_counter()
            if self.on_tick:
                try:
                    self.on_tick()
                except Exception:
                    logger.exception("[TickLoop] tick callback failed")
            elapsed = time.perf_counter() - start
            self.monitor.record_tick(self.clock(), elapsed)
            self.ticks += 1
            next_deadline += self.tick_period_secs
            sleep_time = next_deadline - self.clock()
            if sleep_time > 0:
                self.sleep(sleep_time)
            elif sleep_time < -self.tick_period_secs:
                # Fell more than a tick behind: resync rather than burst.
                next_deadline = self.clock()

    def stop(self):
        self._running.clear()
