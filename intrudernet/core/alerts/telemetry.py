"""Rolling confidence series for dashboards.

Purely observational: nothing in the decision path reads it back.
"""

from __future__ import annotations

import time
from collections import deque

from intrudernet.core.types import TelemetrySample

DEFAULT_TELEMETRY_SIZE = 30
DANGER_LEVEL = 100
SAFE_LEVEL = 20


class TelemetryBuffer:
    def __init__(self, size: int = DEFAULT_TELEMETRY_SIZE) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self._samples: deque[TelemetrySample] = deque(maxlen=int(size))

    def append(self, confidence: float, danger: bool, now: float | None = None) -> TelemetrySample:
        ts = time.time() if now is None else now
        sample = TelemetrySample(
            time=time.strftime("%H:%M:%S", time.localtime(ts)),
            confidence=round(float(confidence) * 100.0, 1),
            danger=DANGER_LEVEL if danger else SAFE_LEVEL,
        )
        self._samples.append(sample)
        return sample

    def samples(self) -> list[TelemetrySample]:
        return list(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)
