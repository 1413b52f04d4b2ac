import logging
import sys
import time
from typing import List, Optional

from tick_health.core.health import HealthMonitor
from tick_health.core.options import InvalidConfiguration, ServerOptions, parse_options
from tick_health.core.resource_probe import FixedResourceProbe, ResourceProbe
from tick_health.core.status import collect_status
from tick_health.core.tick_loop import TickLoop
from tick_health.core.transport import FixedTransportCounters, TransportCounters


logger = logging.getLogger("tick_health")


def build_monitor(options: ServerOptions) -> HealthMonitor:
    if options.fixed_gauges:
        probe = FixedResourceProbe()
        transport = FixedTransportCounters()
    else:
        probe = ResourceProbe()
        transport = TransportCounters()
    return HealthMonitor(
        options.tick_period_secs,
        probe=probe,
        transport=transport,
        probe_timeout=options.probe_timeout,
    )


def run(options: ServerOptions):
    monitor = build_monitor(options)
    loop = TickLoop(monitor, options.tick_period_secs)
    loop.start()
    logger.info("[main] tick loop started at %.1f ticks/s", options.tick_rate)
    deadline = time.monotonic() + options.duration if options.duration > 0 else None
    try:
        while True:
            wait = options.report_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                wait = min(wait, remaining)
            time.sleep(wait)
            logger.info("[main] health: %s", collect_status(monitor).to_json(indent=None))
    except KeyboardInterrupt:
        logger.info("[main] interrupted")
    finally:
        loop.stop()
        loop.join(timeout=max(1.0, options.tick_period_secs * 2))
        logger.info("[main] tick loop stopped after %d ticks", loop.ticks)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        options = parse_options(argv)
    except InvalidConfiguration as e:
        print(f"[main] invalid configuration: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=options.log_level_value(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    run(options)
    return 0


if __name__ == "__main__":
    sys.exit(main())
