"""Threat pipeline orchestration.

This module ties together feature extraction, scoring, hysteresis, the zone and
privacy gates, and alert deduplication into a single per-frame processing step
for one monitored stream.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, replace
from typing import Protocol

import numpy as np

from intrudernet.core.alerts.dedup import AlertConfig, AlertDeduplicator, AlertOutcome
from intrudernet.core.analytics.features import extract_features
from intrudernet.core.analytics.hysteresis import HysteresisState
from intrudernet.core.analytics.privacy import compute_redaction
from intrudernet.core.analytics.scorer import classify_features
from intrudernet.core.config.settings import clamp_confidence_threshold, clamp_sensitivity
from intrudernet.core.overlay.draw import draw_overlays, encode_snapshot
from intrudernet.core.types import (
    ActionLabel,
    DetectionEvent,
    FrameDecision,
    FrameVerdict,
    PoseFrame,
    SecurityStatus,
    SpokenWarning,
    ZoneRect,
)
from intrudernet.core.zone import apply_zone_policy, in_zone

logger = logging.getLogger(__name__)


def _is_finite(name: str, value: float) -> bool:
    if math.isfinite(float(value)):
        return True
    logger.warning("Ignoring non-finite %s: %r", name, value)
    return False


class PoseEstimator(Protocol):
    """Minimal pose model interface expected by hosts.

    Implementations wrap an external model and return `None` when no subject
    is detected.
    """

    def estimate(self, image: np.ndarray) -> PoseFrame | None:
        """Return the landmarks of the main subject in `image`."""


@dataclass(frozen=True)
class PipelineConfig:
    """Operator-tunable settings, swapped atomically as a whole."""

    sensitivity: int = 5
    confidence_threshold: float = 0.5
    privacy_mode: bool = False
    zone: ZoneRect | None = None
    enable_overlays: bool = True
    snapshot_jpeg_quality: int = 60


@dataclass(frozen=True)
class PipelineResult:
    decision: FrameDecision
    accepted: bool
    status: SecurityStatus
    event: DetectionEvent | None = None
    warning: SpokenWarning | None = None
    image: np.ndarray | None = None


class ThreatPipeline:
    """End-to-end per-frame threat classification for one stream.

    Responsibilities:
    - extract features and score the frame
    - debounce per-frame verdicts through the hysteresis counter
    - apply the zone policy and the privacy redaction decision
    - rate-limit and dedupe the resulting updates into events

    State (counter and alert timestamps) is owned by this instance; create one
    pipeline per monitored stream.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        alert_config: AlertConfig | None = None,
    ) -> None:
        self._config = config or PipelineConfig()
        self._config_lock = threading.Lock()
        self.hysteresis = HysteresisState()
        self.alerts = AlertDeduplicator(alert_config)
        self.frame_id = 0

    @property
    def config(self) -> PipelineConfig:
        with self._config_lock:
            return self._config

    def update_config(
        self,
        *,
        sensitivity: float | None = None,
        confidence_threshold: float | None = None,
        privacy_mode: bool | None = None,
        enable_overlays: bool | None = None,
    ) -> PipelineConfig:
        """Apply operator changes atomically.

        Numeric values are clamped to range; non-finite ones are ignored with a
        warning and the current value is kept.
        """

        with self._config_lock:
            cfg = self._config
            if sensitivity is not None and _is_finite("sensitivity", sensitivity):
                cfg = replace(cfg, sensitivity=clamp_sensitivity(sensitivity))
            if confidence_threshold is not None and _is_finite("confidence_threshold", confidence_threshold):
                cfg = replace(cfg, confidence_threshold=clamp_confidence_threshold(confidence_threshold))
            if privacy_mode is not None:
                cfg = replace(cfg, privacy_mode=bool(privacy_mode))
            if enable_overlays is not None:
                cfg = replace(cfg, enable_overlays=bool(enable_overlays))
            self._config = cfg
            return cfg

    def configure(self, config: PipelineConfig) -> None:
        """Replace the whole configuration (e.g. after a settings reload)."""

        with self._config_lock:
            current = self._config
            sensitivity = current.sensitivity
            if _is_finite("sensitivity", config.sensitivity):
                sensitivity = clamp_sensitivity(config.sensitivity)
            threshold = current.confidence_threshold
            if _is_finite("confidence_threshold", config.confidence_threshold):
                threshold = clamp_confidence_threshold(config.confidence_threshold)
            self._config = replace(config, sensitivity=sensitivity, confidence_threshold=threshold)

    def set_zone(self, zone: ZoneRect | None) -> None:
        with self._config_lock:
            self._config = replace(self._config, zone=zone)

    def reset(self) -> None:
        """Forget all per-stream state (counter, throttle, event and snapshot times)."""

        self.hysteresis.reset()
        self.alerts.reset()
        self.frame_id = 0
        logger.debug("Pipeline state reset")

    def _decide(self, frame: PoseFrame | None, cfg: PipelineConfig, now: float) -> FrameDecision:
        self.frame_id += 1
        features = extract_features(frame)
        verdict, score = classify_features(features, cfg.sensitivity, cfg.confidence_threshold)
        redaction = compute_redaction(frame, cfg.privacy_mode)

        if features is None or verdict is FrameVerdict.NO_SUBJECT:
            return FrameDecision(
                frame_id=self.frame_id,
                timestamp=now,
                verdict=FrameVerdict.NO_SUBJECT,
                label=ActionLabel.NONE,
                status=SecurityStatus.SAFE,
                confidence=0.0,
                counter=self.hysteresis.counter,
                redaction=redaction,
            )

        counter = self.hysteresis.update(verdict)
        stable = self.hysteresis.label(cfg.sensitivity)
        inside = in_zone(features.center, cfg.zone)
        label, status = apply_zone_policy(stable, inside)
        return FrameDecision(
            frame_id=self.frame_id,
            timestamp=now,
            verdict=verdict,
            label=label,
            status=status,
            confidence=features.visibility,
            score=score.total if score is not None else None,
            counter=counter,
            bbox=features.bbox,
            center=features.center,
            in_zone=inside,
            redaction=redaction,
        )

    def process(
        self,
        frame: PoseFrame | None,
        image: np.ndarray | None = None,
        now: float | None = None,
    ) -> PipelineResult:
        """Process one frame callback.

        Args:
            frame: Landmarks for the subject, or None when nothing was detected.
            image: Optional BGR video frame; when given, the returned result
                carries the redacted (and optionally annotated) live view, and
                DANGER events may carry an evidence snapshot of it.
            now: Wall-clock time in seconds (defaults to `time.time()`).
        """

        ts = time.time() if now is None else float(now)
        cfg = self.config
        decision = self._decide(frame, cfg, ts)

        rendered: np.ndarray | None = None
        if image is not None:
            rendered = draw_overlays(image, decision, zone=cfg.zone, overlays=cfg.enable_overlays)

        def _snapshot() -> str | None:
            if rendered is None:
                return None
            return encode_snapshot(rendered, quality=cfg.snapshot_jpeg_quality)

        outcome: AlertOutcome = self.alerts.submit(
            decision.label,
            decision.status,
            decision.confidence,
            ts,
            snapshot=_snapshot,
        )
        return PipelineResult(
            decision=decision,
            accepted=outcome.accepted,
            status=outcome.status,
            event=outcome.event,
            warning=outcome.warning,
            image=rendered,
        )
