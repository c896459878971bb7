from __future__ import annotations

from intrudernet.core.types import ActionLabel, BBox, Point, SecurityStatus, ZoneRect


def _clamp(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else hi if v > hi else v


def bbox_center(bbox: BBox) -> Point:
    x1, y1, x2, y2 = bbox
    return ((x1 + x2) / 2.0, (y1 + y2) / 2.0)


def bbox_size(bbox: BBox) -> tuple[float, float]:
    x1, y1, x2, y2 = bbox
    return max(0.0, x2 - x1), max(0.0, y2 - y1)


def zone_from_drag(start: Point, end: Point) -> ZoneRect:
    """Build a zone from a drag gesture, whichever corner it started from."""

    sx, sy = start
    ex, ey = end
    return ZoneRect(x=min(sx, ex), y=min(sy, ey), w=abs(ex - sx), h=abs(ey - sy))


def zone_from_values(values: tuple[float, float, float, float] | list[float] | None) -> ZoneRect | None:
    """Build a zone from an `[x, y, w, h]` sequence (None -> no zone)."""

    if values is None:
        return None
    x, y, w, h = (float(v) for v in values)
    return ZoneRect(x=x, y=y, w=w, h=h)


def clamp_zone(zone: ZoneRect, frame_w: int, frame_h: int) -> ZoneRect:
    """Clip a zone to the frame; the result may be zero-area."""

    x1 = _clamp(zone.x, 0.0, float(frame_w))
    y1 = _clamp(zone.y, 0.0, float(frame_h))
    x2 = _clamp(zone.x + zone.w, 0.0, float(frame_w))
    y2 = _clamp(zone.y + zone.h, 0.0, float(frame_h))
    return ZoneRect(x=x1, y=y1, w=max(0.0, x2 - x1), h=max(0.0, y2 - y1))


def in_zone(point: Point, zone: ZoneRect | None) -> bool:
    """Return whether `point` is inside `zone` (boundary inclusive).

    No zone means the whole frame is in-bounds; a zero-area zone contains nothing.
    """

    if zone is None:
        return True
    if zone.w <= 0 or zone.h <= 0:
        return False
    x, y = point
    return zone.x <= x <= zone.x + zone.w and zone.y <= y <= zone.y + zone.h


def apply_zone_policy(
    label: ActionLabel, inside: bool
) -> tuple[ActionLabel, SecurityStatus]:
    """Map a stable label and zone membership to (effective label, status).

    A zone only restricts where crawling is actionable; it never raises a
    non-crawling label to danger.
    """

    if label is ActionLabel.CRAWLING:
        if inside:
            return ActionLabel.CRAWLING, SecurityStatus.DANGER
        return ActionLabel.LOITERING_OUTSIDE_ZONE, SecurityStatus.SAFE
    return label, SecurityStatus.SAFE
