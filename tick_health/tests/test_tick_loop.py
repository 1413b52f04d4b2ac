import time

import pytest

from tick_health.core.health import HealthMonitor
from tick_health.core.resource_probe import FixedResourceProbe
from tick_health.core.tick_loop import TickLoop
from tick_health import main as entry


def test_tick_loop_records_every_tick():
    m = HealthMonitor(0.01, probe=FixedResourceProbe())
    calls = []
    loop = TickLoop(m, 0.01, on_tick=lambda: calls.append(1))
    loop.start()
    time.sleep(0.2)
    loop.stop()
    loop.join(timeout=2)
    assert not loop.is_alive()
    assert loop.ticks > 0
    assert len(calls) == loop.ticks
    spt = m.take_spt()
    assert spt.count == loop.ticks
    assert 0.0 <= spt.max <= 10.0


class SteppingClock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t

    def sleep(self, seconds):
        self.t += seconds


class RecordingMonitor:
    """Costs 20ms of clock time per record_tick call."""

    def __init__(self, clock, stop_after):
        self.clock = clock
        self.stop_after = stop_after
        self.times = []
        self.loop = None

    def record_tick(self, now, elapsed):
        self.times.append(now)
        self.clock.t += 0.02
        if len(self.times) == self.stop_after:
            self.loop.stop()


def test_tick_schedule_absorbs_reporting_overhead():
    clock = SteppingClock()
    monitor = RecordingMonitor(clock, stop_after=10)

    def step():
        clock.t += 0.03

    loop = TickLoop(monitor, 0.1, on_tick=step, clock=clock, sleep=clock.sleep)
    monitor.loop = loop
    loop.run()
    assert loop.ticks == 10
    gaps = [b - a for a, b in zip(monitor.times, monitor.times[1:])]
    assert gaps == pytest.approx([0.1] * 9)


def test_tick_schedule_resyncs_after_stall():
    clock = SteppingClock()
    monitor = RecordingMonitor(clock, stop_after=3)
    costs = [0.5, 0.0, 0.0]

    def step():
        clock.t += costs[loop.ticks]

    loop = TickLoop(monitor, 0.1, on_tick=step, clock=clock, sleep=clock.sleep)
    monitor.loop = loop
    loop.run()
    gaps = [b - a for a, b in zip(monitor.times, monitor.times[1:])]
    # No burst of back-to-back ticks after the stall.
    assert gaps[1] == pytest.approx(0.1)


def test_failing_tick_callback_keeps_loop_running():
    m = HealthMonitor(0.01, probe=FixedResourceProbe())

    def explode():
        raise RuntimeError("simulation step failed")

    loop = TickLoop(m, 0.01, on_tick=explode)
    loop.start()
    time.sleep(0.1)
    loop.stop()
    loop.join(timeout=2)
    assert loop.ticks > 1
    assert m.take_spt().count == loop.ticks


def test_main_rejects_invalid_configuration(capsys):
    assert entry.main(["--tick-rate", "0"]) == 2
    assert "invalid configuration" in capsys.readouterr().err


def test_main_runs_for_duration():
    started = time.monotonic()
    assert entry.main(["--fixed-gauges", "--tick-rate", "50", "--duration", "0.2", "--report-interval", "0.1"]) == 0
    assert time.monotonic() - started < 5


def test_main_stops_at_duration_before_next_report():
    started = time.monotonic()
    assert entry.main(["--fixed-gauges", "--duration", "0.2", "--report-interval", "2"]) == 0
    assert time.monotonic() - started < 1.0


def test_build_monitor_uses_fixed_gauges():
    opts = entry.parse_options(["--fixed-gauges"])
    m = entry.build_monitor(opts)
    assert m.cpu() == 0.15
    assert m.connections() == 100
