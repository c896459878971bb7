from __future__ import annotations

import numpy as np
import pytest

from intrudernet.core.types import LANDMARK_COUNT, PoseFrame

# Crawling-like posture: torso horizontal, wrists under the hips, head at hip height.
CRAWLING_POINTS = {
    0: (0.2, 0.55, 0.9),  # nose
    11: (0.3, 0.5, 0.9),  # shoulders
    12: (0.3, 0.5, 0.9),
    15: (0.25, 0.7, 0.9),  # wrists
    16: (0.25, 0.7, 0.9),
    23: (0.6, 0.6, 0.9),  # hips
    24: (0.6, 0.6, 0.9),
}

# Upright posture: vertical spine, hands above the hips, head far above the hips.
STANDING_POINTS = {
    0: (0.5, 0.15, 0.9),
    11: (0.5, 0.3, 0.9),
    12: (0.5, 0.3, 0.9),
    15: (0.45, 0.5, 0.9),
    16: (0.45, 0.5, 0.9),
    23: (0.5, 0.55, 0.9),
    24: (0.5, 0.55, 0.9),
    27: (0.5, 0.9, 0.9),  # ankles
    28: (0.5, 0.9, 0.9),
}


def build_pose(
    points: dict[int, tuple[float, float, float]],
    default: tuple[float, float, float] = (0.5, 0.5, 0.9),
    width: int = 640,
    height: int = 480,
) -> PoseFrame:
    lm = np.zeros((LANDMARK_COUNT, 4), dtype=np.float64)
    lm[:, 0], lm[:, 1], lm[:, 3] = default
    for idx, (x, y, v) in points.items():
        lm[idx] = [x, y, 0.0, v]
    return PoseFrame(landmarks=lm, width=width, height=height)


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def crawling_pose() -> PoseFrame:
    # Default landmarks sit inside the torso so the box is set by the named joints.
    return build_pose(CRAWLING_POINTS, default=(0.4, 0.6, 0.9))


@pytest.fixture
def standing_pose() -> PoseFrame:
    return build_pose(STANDING_POINTS)
