"""Geometric features derived from pose landmarks.

Features are computed once per frame from the 33-landmark MediaPipe topology
and consumed by the action scorer, the zone gate and overlays. A frame without a
usable subject yields `None` rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from intrudernet.core.types import LANDMARK_COUNT, BBox, Point, PoseFrame
from intrudernet.core.zone import bbox_center, bbox_size

NOSE = 0
LEFT_EYE = 2
RIGHT_EYE = 5
LEFT_SHOULDER = 11
RIGHT_SHOULDER = 12
LEFT_WRIST = 15
RIGHT_WRIST = 16
LEFT_HIP = 23
RIGHT_HIP = 24

# Minimum visibility for a single landmark to take part in a predicate.
LANDMARK_VISIBILITY_MIN = 0.5


@dataclass(frozen=True)
class PoseFeatures:
    """Per-frame features. Midpoints and deltas are in normalized coordinates."""

    bbox: BBox  # pixels
    center: Point  # pixels
    aspect_ratio: float
    shoulder_mid: Point
    hip_mid: Point
    spine_dx: float
    spine_dy: float
    left_wrist_below_hip: bool
    right_wrist_below_hip: bool
    head_hip_ratio: float | None
    visibility: float

    @property
    def wrist_below_hip(self) -> bool:
        return self.left_wrist_below_hip or self.right_wrist_below_hip


def _midpoint(lm: np.ndarray, a: int, b: int) -> Point:
    return float((lm[a, 0] + lm[b, 0]) / 2.0), float((lm[a, 1] + lm[b, 1]) / 2.0)


def _aspect_ratio(box_w: float, box_h: float) -> float:
    if box_h > 0:
        return box_w / box_h
    return float("inf") if box_w > 0 else 0.0


def _wrist_below_hip(lm: np.ndarray, index: int, hip_y: float) -> bool:
    return bool(lm[index, 3] > LANDMARK_VISIBILITY_MIN and lm[index, 1] > hip_y)


def extract_features(frame: PoseFrame | None) -> PoseFeatures | None:
    """Compute features for a frame, or `None` when there is no usable subject."""

    if frame is None or len(frame) < LANDMARK_COUNT:
        return None

    lm = frame.landmarks
    w = float(frame.width)
    h = float(frame.height)

    xs = lm[:, 0]
    ys = lm[:, 1]
    min_x, max_x = float(xs.min()), float(xs.max())
    min_y, max_y = float(ys.min()), float(ys.max())
    bbox = (min_x * w, min_y * h, max_x * w, max_y * h)
    box_w, box_h = bbox_size(bbox)

    shoulder_mid = _midpoint(lm, LEFT_SHOULDER, RIGHT_SHOULDER)
    hip_mid = _midpoint(lm, LEFT_HIP, RIGHT_HIP)

    head_hip_ratio: float | None = None
    norm_box_h = max_y - min_y
    if lm[NOSE, 3] > LANDMARK_VISIBILITY_MIN and norm_box_h > 0:
        head_hip_ratio = abs(float(lm[NOSE, 1]) - hip_mid[1]) / norm_box_h

    return PoseFeatures(
        bbox=bbox,
        center=bbox_center(bbox),
        aspect_ratio=_aspect_ratio(box_w, box_h),
        shoulder_mid=shoulder_mid,
        hip_mid=hip_mid,
        spine_dx=abs(shoulder_mid[0] - hip_mid[0]),
        spine_dy=abs(shoulder_mid[1] - hip_mid[1]),
        left_wrist_below_hip=_wrist_below_hip(lm, LEFT_WRIST, hip_mid[1]),
        right_wrist_below_hip=_wrist_below_hip(lm, RIGHT_WRIST, hip_mid[1]),
        head_hip_ratio=head_hip_ratio,
        visibility=float(lm[:LANDMARK_COUNT, 3].mean()),
    )
