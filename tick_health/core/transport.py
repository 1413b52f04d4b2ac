import threading
from typing import Optional


class TransportCounters:
    """Byte rates and connection count published by the transport layer."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bytes_in_per_sec = 0
        self._bytes_out_per_sec = 0
        self._connections = 0

    def update(self, bytes_in_per_sec: Optional[int] = None, bytes_out_per_sec: Optional[int] = None, connections: Optional[int] = None):
        values = {
            "bytes_in_per_sec": bytes_in_per_sec,
            "bytes_out_per_sec": bytes_out_per_sec,
            "connections": connections,
        }
        for name, value in values.items():
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        with self._lock:
            if bytes_in_per_sec is not None:
                self._bytes_in_per_sec = int(bytes_in_per_sec)
            if bytes_out_per_sec is not None:
                self._bytes_out_per_sec = int(bytes_out_per_sec)
            if connections is not None:
                self._connections = int(connections)

    def bandwidth_rx(self) -> int:
        with self._lock:
            return self._bytes_in_per_sec

    def bandwidth_tx(self) -> int:
        with self._lock:
            return self._bytes_out_per_sec

    def connections(self) -> int:
        with self._lock:
            return self._connections


class FixedTransportCounters:
    BANDWIDTH_RX = 100_000_000
    BANDWIDTH_TX = 50_000_000
    CONNECTIONS = 100

    def bandwidth_rx(self) -> int:
        return self.BANDWIDTH_RX

    def bandwidth_tx(self) -> int:
        return self.BANDWIDTH_TX

    def connections(self) -> int:
        return self.CONNECTIONS
