"""Privacy redaction decision.

Produces a disc over the subject's face that renderers must blur on the live
view and on any evidence snapshot. It never influences scoring.
"""

from __future__ import annotations

from intrudernet.core.analytics.features import LEFT_EYE, LANDMARK_VISIBILITY_MIN, NOSE, RIGHT_EYE
from intrudernet.core.types import LANDMARK_COUNT, PoseFrame, RedactionDisc

EYE_DISTANCE_SCALE = 4.0
MIN_DIAMETER_PX = 60.0


def compute_redaction(frame: PoseFrame | None, enabled: bool) -> RedactionDisc | None:
    """Return the face redaction disc for `frame`, or `None` when nothing is redacted."""

    if not enabled or frame is None or len(frame) < LANDMARK_COUNT:
        return None
    lm = frame.landmarks
    if lm[NOSE, 3] <= LANDMARK_VISIBILITY_MIN:
        return None

    eye_dist = abs(float(lm[LEFT_EYE, 0]) - float(lm[RIGHT_EYE, 0])) * float(frame.width)
    diameter = max(eye_dist * EYE_DISTANCE_SCALE, MIN_DIAMETER_PX)
    return RedactionDisc(center=frame.to_pixels(NOSE), radius=diameter / 2.0)
