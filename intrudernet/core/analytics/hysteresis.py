from __future__ import annotations

from dataclasses import dataclass

from intrudernet.core.types import ActionLabel, FrameVerdict

BASE_FRAMES = 15
MIN_FRAMES = 1


def frames_required(sensitivity: int) -> int:
    """Counter value that must be exceeded before crawling is declared."""

    return max(MIN_FRAMES, BASE_FRAMES - int(sensitivity))


@dataclass
class HysteresisState:
    """Consecutive crawling-candidate counter for one stream."""

    counter: int = 0

    def update(self, verdict: FrameVerdict) -> int:
        # No-subject frames never reach here; they are filtered upstream.
        if verdict is FrameVerdict.CRAWLING_CANDIDATE:
            self.counter += 1
        else:
            self.counter = max(0, self.counter - 1)
        return self.counter

    def label(self, sensitivity: int) -> ActionLabel:
        if self.counter > frames_required(sensitivity):
            return ActionLabel.CRAWLING
        return ActionLabel.WALKING

    def reset(self) -> None:
        self.counter = 0
