import math
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional


@dataclass
class ExtremaSummary:
    count: int = 0
    min: Optional[float] = None
    max: Optional[float] = None
    total: float = 0.0

    @property
    def average(self) -> Optional[float]:
        if self.count == 0:
            return None
        return self.total / self.count

    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["average"] = self.average
        return result


class ExtremaAccumulator:
    """Tracks min, max and mean of pushed samples since the last take()."""

    def __init__(self):
        self._reset()

    def _reset(self):
        self._count = 0
        self._min: Optional[float] = None
        self._max: Optional[float] = None
        self._total = 0.0

    def __len__(self) -> int:
        return self._count

    def push(self, sample: float):
        sample = float(sample)
        if math.isnan(sample):
            return
        self._count += 1
        self._total += sample
        if self._min is None or sample < self._min:
            self._min = sample
        if self._max is None or sample > self._max:
            self._max = sample

    def summary(self) -> ExtremaSummary:
        return ExtremaSummary(count=self._count, min=self._min, max=self._max, total=self._total)

    def take(self) -> ExtremaSummary:
        """Return the summary so far and reset to empty."""
        result = self.summary()
        self._reset()
        return result
