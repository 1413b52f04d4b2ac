import argparse
import logging
import math
from dataclasses import dataclass
from typing import List, Optional


class InvalidConfiguration(ValueError):
    pass


def validate_tick_period(tick_period_secs: float) -> float:
    """Return the tick period as a float, or raise InvalidConfiguration."""
    try:
        period = float(tick_period_secs)
    except (TypeError, ValueError):
        raise InvalidConfiguration(f"tick period must be a number, got {tick_period_secs!r}")
    if not math.isfinite(period) or period <= 0:
        raise InvalidConfiguration(f"tick period must be positive, got {tick_period_secs!r}")
    return period


@dataclass
class ServerOptions:
    tick_rate: float = 10.0
    duration: float = 0.0  # 0 runs until interrupted
    report_interval: float = 5.0
    fixed_gauges: bool = False
    probe_timeout: float = 2.0
    log_level: str = "info"

    @property
    def tick_period_secs(self) -> float:
        return 1.0 / self.tick_rate

    def validate(self) -> "ServerOptions":
        if not math.isfinite(self.tick_rate) or self.tick_rate <= 0:
            raise InvalidConfiguration(f"--tick-rate must be positive, got {self.tick_rate}")
        validate_tick_period(self.tick_period_secs)
        if not math.isfinite(self.duration) or self.duration < 0:
            raise InvalidConfiguration(f"--duration must be non-negative, got {self.duration}")
        if not math.isfinite(self.report_interval) or self.report_interval <= 0:
            raise InvalidConfiguration(f"--report-interval must be positive, got {self.report_interval}")
        if not math.isfinite(self.probe_timeout) or self.probe_timeout <= 0:
            raise InvalidConfiguration(f"--probe-timeout must be positive, got {self.probe_timeout}")
        return self

    def log_level_value(self) -> int:
        level = logging.getLevelName(str(self.log_level).upper())
        if isinstance(level, int):
            return level
        return logging.INFO


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tick_health", description="Run a fixed-rate tick loop and report its health.")
    parser.add_argument("--tick-rate", type=float, default=10.0, help="Nominal ticks per second.")
    parser.add_argument("--duration", type=float, default=0.0, help="Seconds to run (0 runs until interrupted).")
    parser.add_argument("--report-interval", type=float, default=5.0, help="Seconds between status reports.")
    parser.add_argument("--fixed-gauges", action="store_true", help="Report constant gauges instead of probing the OS.")
    parser.add_argument("--probe-timeout", type=float, default=2.0, help="Seconds to wait for the OS probe.")
    parser.add_argument("--log-level", default="info", help="Logging level (debug, info, warning, error).")
    return parser


def parse_options(argv: Optional[List[str]] = None) -> ServerOptions:
    args = build_parser().parse_args(argv)
    options = ServerOptions(
        tick_rate=args.tick_rate,
        duration=args.duration,
        report_interval=args.report_interval,
        fixed_gauges=args.fixed_gauges,
        probe_timeout=args.probe_timeout,
        log_level=args.log_level,
    )
    return options.validate()
