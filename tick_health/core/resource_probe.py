"""
OS resource probes used by the health monitor.

ResourceProbe samples the host through psutil. FixedResourceProbe reports
constant values and is meant for local development and tests, where the
real gauges are either meaningless or unavailable.
"""
from typing import Dict, List, Optional, Callable

import psutil


class ProbeError(Exception):
    """One or more gauges could not be sampled."""

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = failures
        details = ", ".join(f"{name}: {err}" for name, err in failures.items())
        super().__init__(f"resource probe failed ({details})")


def _percent_to_fraction(percent: float) -> float:
    return float(percent) / 100.0


def _sample_cpu() -> float:
    # Non-blocking: compares against the previous call.
    return _percent_to_fraction(psutil.cpu_percent(interval=None))


def _sample_cpu_steal() -> Optional[float]:
    times = psutil.cpu_times_percent(interval=None)
    steal = getattr(times, "steal", None)
    if steal is None:
        return None
    return _percent_to_fraction(steal)


def _sample_ram() -> float:
    return _percent_to_fraction(psutil.virtual_memory().percent)


def _sample_swap() -> float:
    return _percent_to_fraction(psutil.swap_memory().percent)


class ResourceProbe:
    def __init__(self):
        self._values: Dict[str, Optional[float]] = {
            "cpu": None,
            "cpu_steal": None,
            "ram": None,
            "swap": None,
        }
        self._samplers: Dict[str, Callable[[], Optional[float]]] = {
            "cpu": _sample_cpu,
            "cpu_steal": _sample_cpu_steal,
            "ram": _sample_ram,
            "swap": _sample_swap,
        }
        self._prime()

    def _prime(self):
        # The first interval=None call measures nothing and returns 0.0.
        try:
            psutil.cpu_percent(interval=None)
            psutil.cpu_times_percent(interval=None)
        except (psutil.Error, OSError):
            # update() reports the same failure when it samples.
            return

    def update(self):
        """
        Sample every gauge.

        Gauges are sampled independently: one failing does not prevent the
        others from being stored. Raises ProbeError listing the failures.
        """
        failures: Dict[str, Exception] = {}
        for name, sampler in self._samplers.items():
            try:
                self._values[name] = sampler()
            except (psutil.Error, OSError, AttributeError, ValueError) as e:
                failures[name] = e
        if failures:
            raise ProbeError(failures)

    def gauge_names(self) -> List[str]:
        return list(self._values)

    def cpu_usage(self) -> Optional[float]:
        return self._values["cpu"]

    def cpu_stolen_usage(self) -> Optional[float]:
        return self._values["cpu_steal"]

    def ram_usage(self) -> Optional[float]:
        return self._values["ram"]

    def ram_swap_usage(self) -> Optional[float]:
        return self._values["swap"]


class FixedResourceProbe:
    CPU = 0.15
    CPU_STEAL = 0.0
    RAM = 0.3
    SWAP = 0.0

    def update(self):
        pass

    def cpu_usage(self) -> Optional[float]:
        return self.CPU

    def cpu_stolen_usage(self) -> Optional[float]:
        return self.CPU_STEAL

    def ram_usage(self) -> Optional[float]:
        return self.RAM

    def ram_swap_usage(self) -> Optional[float]:
        return self.SWAP
