from dataclasses import dataclass, field
from typing import Dict, Any
import json

from .extrema import ExtremaSummary
from .health import HealthMonitor


@dataclass
class HealthStatus:
    cpu: float = 0.0
    cpu_steal: float = 0.0
    ram: float = 0.0
    swap: float = 0.0
    missed_ticks: float = 0.0
    bandwidth_rx: int = 0
    bandwidth_tx: int = 0
    connections: int = 0
    tps: ExtremaSummary = field(default_factory=ExtremaSummary)
    spt: ExtremaSummary = field(default_factory=ExtremaSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpu": self.cpu,
            "cpu_steal": self.cpu_steal,
            "ram": self.ram,
            "swap": self.swap,
            "missed_ticks": self.missed_ticks,
            "bandwidth_rx": self.bandwidth_rx,
            "bandwidth_tx": self.bandwidth_tx,
            "connections": self.connections,
            "tps": self.tps.to_dict(),
            "spt": self.spt.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


def collect_status(monitor: HealthMonitor, drain: bool = True) -> HealthStatus:
    """Read every gauge and counter; drains TPS/SPT unless drain is False."""
    if drain:
        tps = monitor.take_tps()
        spt = monitor.take_spt()
    else:
        tps = monitor.tps_summary()
        spt = monitor.spt_summary()
    return HealthStatus(
        cpu=monitor.cpu(),
        cpu_steal=monitor.cpu_steal(),
        ram=monitor.ram(),
        swap=monitor.swap(),
        missed_ticks=monitor.missed_ticks(),
        bandwidth_rx=monitor.bandwidth_rx(),
        bandwidth_tx=monitor.bandwidth_tx(),
        connections=monitor.connections(),
        tps=tps,
        spt=spt,
    )


class StaticHealthResponder:
    """Liveness responder that always reports healthy, independent of any monitor."""

    def respond(self) -> Dict[str, Any]:
        return {"status": "ok"}
