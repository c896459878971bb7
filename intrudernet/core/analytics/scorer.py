"""Heuristic per-frame action scorer.

The score is a sum of integer-weighted geometric predicates. Thresholds that
describe "how far from upright" the subject is are scaled by
`sensitivity / 5`, so sensitivity 5 reproduces the nominal constants.
"""

from __future__ import annotations

from dataclasses import dataclass

from intrudernet.core.analytics.features import PoseFeatures
from intrudernet.core.types import FrameVerdict

NOMINAL_SENSITIVITY = 5.0
CRAWL_SCORE_THRESHOLD = 2.5

SPINE_RATIO = 0.8
WIDE_ASPECT = 0.9
VERY_WIDE_ASPECT = 1.2
HEAD_HIP_RATIO = 0.4

SPINE_WEIGHT = 2
WIDE_WEIGHT = 1
VERY_WIDE_WEIGHT = 1
WRIST_WEIGHT = 1
HEAD_HIP_WEIGHT = 1


@dataclass(frozen=True)
class ActionScore:
    total: int
    reasons: tuple[str, ...] = ()


def sensitivity_factor(sensitivity: float) -> float:
    return float(sensitivity) / NOMINAL_SENSITIVITY


def score_features(features: PoseFeatures, sensitivity: float = NOMINAL_SENSITIVITY) -> ActionScore:
    """Sum the weighted posture predicates for one frame."""

    factor = sensitivity_factor(sensitivity)
    total = 0
    reasons: list[str] = []

    if features.spine_dx > features.spine_dy * SPINE_RATIO / factor:
        total += SPINE_WEIGHT
        reasons.append("horizontal_spine")
    if features.aspect_ratio > WIDE_ASPECT:
        total += WIDE_WEIGHT
        reasons.append("wide_box")
    if features.aspect_ratio > VERY_WIDE_ASPECT / factor:
        total += VERY_WIDE_WEIGHT
        reasons.append("very_wide_box")
    if features.wrist_below_hip:
        total += WRIST_WEIGHT
        reasons.append("wrist_below_hip")
    if features.head_hip_ratio is not None and features.head_hip_ratio < HEAD_HIP_RATIO * factor:
        total += HEAD_HIP_WEIGHT
        reasons.append("head_near_hip")

    return ActionScore(total=total, reasons=tuple(reasons))


def classify_features(
    features: PoseFeatures | None,
    sensitivity: float = NOMINAL_SENSITIVITY,
    confidence_threshold: float = 0.5,
) -> tuple[FrameVerdict, ActionScore | None]:
    """Return the per-frame verdict and the score that produced it.

    Frames whose mean visibility is below `confidence_threshold` are treated as
    having no subject and are not scored.
    """

    if features is None or features.visibility < confidence_threshold:
        return FrameVerdict.NO_SUBJECT, None
    score = score_features(features, sensitivity)
    if score.total >= CRAWL_SCORE_THRESHOLD:
        return FrameVerdict.CRAWLING_CANDIDATE, score
    return FrameVerdict.WALKING_CANDIDATE, score
