"""Alert deduplication.

Turns the stream of stabilized per-frame decisions into discrete, rate-limited
events. All windows are wall-clock comparisons against stored timestamps, so the
gate is a pure function of `now` and the previous emissions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from intrudernet.core.types import ActionLabel, DetectionEvent, SecurityStatus, SpokenWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertConfig:
    update_interval_ms: float = 200.0
    danger_cooldown_ms: float = 3000.0
    info_cooldown_ms: float = 10000.0
    snapshot_interval_ms: float = 5000.0
    info_min_confidence: float = 0.6


@dataclass(frozen=True)
class AlertOutcome:
    """Result of submitting one update.

    `accepted` is False when the update was dropped by the update throttle; in
    that case nothing else is set and sinks must not change.
    """

    accepted: bool
    status: SecurityStatus = SecurityStatus.SAFE
    event: DetectionEvent | None = None
    warning: SpokenWarning | None = None


def _elapsed_ms(now: float, since: float | None) -> float:
    if since is None:
        return float("inf")
    return (now - since) * 1000.0


class AlertDeduplicator:
    """Owns the update/event/snapshot timestamps for one stream."""

    def __init__(self, config: AlertConfig | None = None) -> None:
        self.config = config or AlertConfig()
        self._last_update_at: float | None = None
        self._last_event_at: float | None = None
        self._last_snapshot_at: float | None = None

    @property
    def last_event_at(self) -> float | None:
        return self._last_event_at

    @property
    def last_snapshot_at(self) -> float | None:
        return self._last_snapshot_at

    def reset(self) -> None:
        self._last_update_at = None
        self._last_event_at = None
        self._last_snapshot_at = None

    def submit(
        self,
        label: ActionLabel,
        status: SecurityStatus,
        confidence: float,
        now: float,
        snapshot: Callable[[], str | None] | None = None,
    ) -> AlertOutcome:
        """Apply throttle and dedup rules to one stabilized update.

        `snapshot` is only called when a DANGER event is created and the
        snapshot window is open.
        """

        cfg = self.config
        if _elapsed_ms(now, self._last_update_at) < cfg.update_interval_ms:
            return AlertOutcome(accepted=False)
        self._last_update_at = now

        if label is ActionLabel.NONE:
            return AlertOutcome(accepted=True, status=SecurityStatus.SAFE)

        since_event = _elapsed_ms(now, self._last_event_at)

        if status is SecurityStatus.DANGER:
            if since_event < cfg.danger_cooldown_ms:
                return AlertOutcome(accepted=True, status=status)
            thumbnail: str | None = None
            if snapshot is not None and _elapsed_ms(now, self._last_snapshot_at) >= cfg.snapshot_interval_ms:
                thumbnail = snapshot()
                if thumbnail is not None:
                    self._last_snapshot_at = now
            event = self._make_event(
                now, label, confidence, status, f"Suspicious {label.value} pattern detected", thumbnail
            )
            logger.info("DANGER event %s: %s (confidence %.2f)", event.id, label.value, confidence)
            return AlertOutcome(accepted=True, status=status, event=event, warning=SpokenWarning(label))

        if confidence > cfg.info_min_confidence and since_event > cfg.info_cooldown_ms:
            event = self._make_event(
                now, label, confidence, SecurityStatus.SAFE, f"Activity monitored: {label.value}", None
            )
            return AlertOutcome(accepted=True, status=SecurityStatus.SAFE, event=event)

        return AlertOutcome(accepted=True, status=status)

    def _make_event(
        self,
        now: float,
        label: ActionLabel,
        confidence: float,
        status: SecurityStatus,
        message: str,
        thumbnail: str | None,
    ) -> DetectionEvent:
        self._last_event_at = now
        return DetectionEvent(
            id=str(int(round(now * 1000.0))),
            timestamp=now,
            type=label,
            confidence=float(confidence),
            status=status,
            message=message,
            thumbnail=thumbnail,
        )
