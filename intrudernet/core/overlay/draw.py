"""Overlay drawing helpers (OpenCV).

Used for the live view and for evidence snapshots. Privacy redaction is painted
first so every image leaving this module is already redacted.
"""

from __future__ import annotations

import base64
import logging

import cv2
import numpy as np

from intrudernet.core.types import FrameDecision, RedactionDisc, SecurityStatus, ZoneRect
from intrudernet.core.zone import clamp_zone

logger = logging.getLogger(__name__)

# BGR
DANGER_COLOR = (94, 63, 244)
IN_ZONE_COLOR = (129, 185, 16)
OUT_OF_ZONE_COLOR = (139, 116, 100)
ZONE_COLOR = (68, 68, 239)
TEXT_COLOR = (255, 255, 255)

REDACTION_BLUR_SIGMA = 15.0
REDACTION_WHITE_ALPHA = 0.8
ZONE_FILL_ALPHA = 0.15
LABEL_BAND_H = 30


def apply_redaction(img: np.ndarray, disc: RedactionDisc) -> None:
    """Blur and frost the disc region of `img` in place."""

    h, w = img.shape[:2]
    cx, cy = disc.center
    r = disc.radius
    x1 = max(0, int(np.floor(cx - r)))
    y1 = max(0, int(np.floor(cy - r)))
    x2 = min(w, int(np.ceil(cx + r)) + 1)
    y2 = min(h, int(np.ceil(cy + r)) + 1)
    if x2 <= x1 or y2 <= y1:
        return

    roi = img[y1:y2, x1:x2]
    blurred = cv2.GaussianBlur(roi, (0, 0), REDACTION_BLUR_SIGMA)
    white = np.full_like(blurred, 255)
    frosted = cv2.addWeighted(blurred, 1.0 - REDACTION_WHITE_ALPHA, white, REDACTION_WHITE_ALPHA, 0)
    mask = np.zeros(roi.shape[:2], dtype=np.uint8)
    cv2.circle(mask, (int(round(cx)) - x1, int(round(cy)) - y1), int(round(r)), 255, -1)
    roi[mask > 0] = frosted[mask > 0]


def draw_zone(img: np.ndarray, zone: ZoneRect) -> None:
    h, w = img.shape[:2]
    z = clamp_zone(zone, w, h)
    x1, y1 = int(z.x), int(z.y)
    x2, y2 = int(z.x + z.w), int(z.y + z.h)
    roi = img[y1:y2, x1:x2]
    if roi.size > 0:
        tint = np.full_like(roi, ZONE_COLOR)
        cv2.addWeighted(tint, ZONE_FILL_ALPHA, roi, 1.0 - ZONE_FILL_ALPHA, 0, roi)
    cv2.rectangle(img, (x1, y1), (x2, y2), ZONE_COLOR, 2)
    cv2.putText(
        img,
        "RESTRICTED ZONE",
        (x1, max(y1 - 5, 0)),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.5,
        ZONE_COLOR,
        1,
        cv2.LINE_AA,
    )


def subject_color(decision: FrameDecision) -> tuple[int, int, int]:
    if decision.status is SecurityStatus.DANGER:
        return DANGER_COLOR
    return IN_ZONE_COLOR if decision.in_zone else OUT_OF_ZONE_COLOR


def draw_subject(img: np.ndarray, decision: FrameDecision) -> None:
    if decision.bbox is None:
        return
    x1, y1, x2, y2 = map(int, decision.bbox)
    color = subject_color(decision)
    cv2.rectangle(img, (x1, y1), (x2, y2), color, 3)
    cv2.rectangle(img, (x1, max(y1 - LABEL_BAND_H, 0)), (x2, y1), color, -1)
    label = f"{decision.label.value.upper()} {decision.confidence * 100:.0f}%"
    cv2.putText(
        img,
        label,
        (x1 + 5, max(y1 - 10, 0)),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.5,
        TEXT_COLOR,
        1,
        cv2.LINE_AA,
    )


def draw_overlays(
    frame: np.ndarray,
    decision: FrameDecision,
    zone: ZoneRect | None = None,
    overlays: bool = True,
) -> np.ndarray:
    """Return a copy of `frame` with redaction, zone and subject box drawn.

    With `overlays=False` only the redaction is applied.
    """

    if decision.redaction is None and (not overlays or (zone is None and decision.bbox is None)):
        return frame

    img = frame.copy()
    if decision.redaction is not None:
        apply_redaction(img, decision.redaction)
    if overlays:
        if zone is not None:
            draw_zone(img, zone)
        draw_subject(img, decision)
    return img


def encode_snapshot(img: np.ndarray, quality: int = 60) -> str | None:
    """JPEG-encode `img` and return it base64-encoded (None on failure)."""

    ok, jpg = cv2.imencode(".jpg", img, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        logger.warning("Snapshot JPEG encoding failed")
        return None
    return base64.b64encode(jpg.tobytes()).decode("ascii")
