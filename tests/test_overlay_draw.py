from __future__ import annotations

import base64

import numpy as np

from intrudernet.core.overlay.draw import (
    DANGER_COLOR,
    IN_ZONE_COLOR,
    OUT_OF_ZONE_COLOR,
    apply_redaction,
    draw_overlays,
    encode_snapshot,
    subject_color,
)
from intrudernet.core.types import (
    ActionLabel,
    FrameDecision,
    FrameVerdict,
    RedactionDisc,
    SecurityStatus,
    ZoneRect,
)


def _decision(**kw) -> FrameDecision:
    base = dict(
        frame_id=1,
        timestamp=0.0,
        verdict=FrameVerdict.WALKING_CANDIDATE,
        label=ActionLabel.WALKING,
        status=SecurityStatus.SAFE,
        confidence=0.9,
    )
    base.update(kw)
    return FrameDecision(**base)


def test_draw_overlays_fast_path_returns_same_object():
    frame = np.zeros((10, 10, 3), dtype=np.uint8)
    out = draw_overlays(frame, _decision())
    assert out is frame

    # Overlays disabled and nothing to redact.
    out = draw_overlays(frame, _decision(bbox=(1, 1, 5, 5)), zone=ZoneRect(0, 0, 5, 5), overlays=False)
    assert out is frame


def test_draw_overlays_draws_subject_and_zone_returns_copy():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    out = draw_overlays(frame, _decision(bbox=(40, 40, 80, 80)), zone=ZoneRect(0, 0, 50, 50))
    assert out is not frame
    assert out.shape == frame.shape
    assert frame.sum() == 0
    assert out.sum() > 0


def test_zone_outside_frame_is_clamped():
    frame = np.zeros((20, 20, 3), dtype=np.uint8)
    out = draw_overlays(frame, _decision(), zone=ZoneRect(100, 100, 10, 10))
    assert out.shape == frame.shape


def test_redaction_frosts_the_disc_only():
    img = np.zeros((100, 100, 3), dtype=np.uint8)
    apply_redaction(img, RedactionDisc(center=(50.0, 50.0), radius=20.0))
    assert abs(int(img[50, 50, 0]) - 204) <= 1
    assert img[5, 5].tolist() == [0, 0, 0]
    assert img[50, 75].tolist() == [0, 0, 0]


def test_redaction_near_edge_is_clipped():
    img = np.zeros((40, 40, 3), dtype=np.uint8)
    apply_redaction(img, RedactionDisc(center=(0.0, 0.0), radius=30.0))
    assert img[0, 0, 0] > 0
    apply_redaction(img, RedactionDisc(center=(-100.0, -100.0), radius=5.0))


def test_redaction_applies_even_without_overlays():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    disc = RedactionDisc(center=(50.0, 50.0), radius=20.0)
    out = draw_overlays(frame, _decision(redaction=disc), overlays=False)
    assert out is not frame
    assert out[50, 50, 0] > 150
    assert frame[50, 50, 0] == 0


def test_subject_color():
    assert subject_color(_decision(status=SecurityStatus.DANGER)) == DANGER_COLOR
    assert subject_color(_decision()) == IN_ZONE_COLOR
    assert subject_color(_decision(in_zone=False)) == OUT_OF_ZONE_COLOR


def test_encode_snapshot_is_base64_jpeg():
    img = np.full((32, 32, 3), 127, dtype=np.uint8)
    data = encode_snapshot(img, quality=60)
    assert data is not None
    raw = base64.b64decode(data)
    assert raw[:2] == b"\xff\xd8"
