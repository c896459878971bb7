"""Shared type definitions used across the pipeline.

This module centralizes small, stable types (keypoints, pose frames, zones,
labels and events) so the analytics, alert and host code can stay strongly typed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

Frame = np.ndarray

BBox = tuple[float, float, float, float]
Point = tuple[float, float]

# MediaPipe Pose topology.
LANDMARK_COUNT = 33


class ActionLabel(str, Enum):
    """Stable action label attached to a subject."""

    WALKING = "walking"
    CRAWLING = "crawling"
    LOITERING_OUTSIDE_ZONE = "loitering outside zone"
    NONE = "none"


class SecurityStatus(str, Enum):
    SAFE = "SAFE"
    DANGER = "DANGER"


class FrameVerdict(str, Enum):
    """Per-frame scorer output, before temporal filtering."""

    CRAWLING_CANDIDATE = "crawling_candidate"
    WALKING_CANDIDATE = "walking_candidate"
    NO_SUBJECT = "no_subject"


@dataclass(frozen=True)
class Keypoint:
    """One joint estimate in normalized image coordinates."""

    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0


@dataclass(frozen=True)
class PoseFrame:
    """Landmarks for a single subject in a single video frame.

    `landmarks` has shape (N, 4) -> x, y, z, visibility with x/y normalized to
    the frame. `world_landmarks` is only consumed by visualizations.
    """

    landmarks: np.ndarray
    width: int
    height: int
    world_landmarks: np.ndarray | None = None

    @classmethod
    def from_keypoints(
        cls,
        keypoints: list[Keypoint],
        width: int,
        height: int,
        world_keypoints: list[Keypoint] | None = None,
    ) -> PoseFrame:
        arr = np.array([[k.x, k.y, k.z, k.visibility] for k in keypoints], dtype=np.float64)
        world = None
        if world_keypoints is not None:
            world = np.array(
                [[k.x, k.y, k.z, k.visibility] for k in world_keypoints], dtype=np.float64
            )
        return cls(landmarks=arr.reshape(-1, 4), width=int(width), height=int(height), world_landmarks=world)

    def __len__(self) -> int:
        return int(self.landmarks.shape[0]) if self.landmarks.ndim == 2 else 0

    def keypoint(self, index: int) -> Keypoint:
        x, y, z, v = self.landmarks[index]
        return Keypoint(x=float(x), y=float(y), z=float(z), visibility=float(v))

    def to_pixels(self, index: int) -> Point:
        """Return the (x, y) pixel position of a landmark."""

        x, y = self.landmarks[index, 0], self.landmarks[index, 1]
        return float(x) * float(self.width), float(y) * float(self.height)


@dataclass(frozen=True)
class ZoneRect:
    """Operator-drawn restricted zone in frame pixel coordinates."""

    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        if not all(math.isfinite(v) for v in (self.x, self.y, self.w, self.h)):
            raise ValueError("zone coordinates must be finite")
        if self.w < 0 or self.h < 0:
            raise ValueError("zone width/height must be >= 0")


@dataclass(frozen=True)
class RedactionDisc:
    """Face region to blur, in pixels."""

    center: Point
    radius: float


@dataclass(frozen=True)
class FrameDecision:
    """Per-frame pipeline output consumed by sinks and overlays."""

    frame_id: int
    timestamp: float
    verdict: FrameVerdict
    label: ActionLabel
    status: SecurityStatus
    confidence: float
    score: int | None = None
    counter: int = 0
    bbox: BBox | None = None
    center: Point | None = None
    in_zone: bool = True
    redaction: RedactionDisc | None = None


@dataclass(frozen=True)
class DetectionEvent:
    """A discrete, user-visible record in the event log."""

    id: str
    timestamp: float
    type: ActionLabel
    confidence: float
    status: SecurityStatus
    message: str
    thumbnail: str | None = None  # base64 JPEG


@dataclass(frozen=True)
class TelemetrySample:
    time: str
    confidence: float  # percent
    danger: int


@dataclass(frozen=True)
class SpokenWarning:
    """Request for the host to announce a detected action."""

    action: ActionLabel

    @property
    def text(self) -> str:
        return f"Warning. Suspicious {self.action.value} detected."


def event_to_dict(event: DetectionEvent) -> dict[str, object]:
    """Convert an event to a JSON-friendly dict."""

    return {
        "id": event.id,
        "timestamp": event.timestamp,
        "type": event.type.value,
        "confidence": event.confidence,
        "status": event.status.value,
        "message": event.message,
        "thumbnail": event.thumbnail,
    }
