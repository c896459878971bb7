from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import numpy as np

from intrudernet.core.alerts.event_log import EventLog
from intrudernet.core.alerts.report import format_report, write_report
from intrudernet.core.alerts.telemetry import TelemetryBuffer
from intrudernet.core.analytics.pipeline import (
    PipelineConfig,
    PipelineResult,
    PoseEstimator,
    ThreatPipeline,
)
from intrudernet.core.config.presets import preset_patch
from intrudernet.core.config.settings import MonitorSettings, alert_config_from_settings
from intrudernet.core.types import (
    ActionLabel,
    DetectionEvent,
    Point,
    PoseFrame,
    SecurityStatus,
    SpokenWarning,
    TelemetrySample,
    ZoneRect,
)
from intrudernet.core.zone import zone_from_drag, zone_from_values

logger = logging.getLogger(__name__)


class AudioChannel(Protocol):
    """Speech output owned by the host (e.g. a TTS engine)."""

    def is_speaking(self) -> bool:
        """Return whether an utterance is currently playing."""

    def speak(self, text: str) -> None:
        """Start speaking `text` without blocking."""


@dataclass(frozen=True)
class SessionStats:
    fps: float
    uptime: str
    total_alerts: int
    status: SecurityStatus
    source: str | None
    running: bool
    last_error: str | None = None


def pipeline_config_from_settings(settings: MonitorSettings) -> PipelineConfig:
    return PipelineConfig(
        sensitivity=int(settings.sensitivity),
        confidence_threshold=float(settings.confidence_threshold),
        privacy_mode=bool(settings.privacy_mode),
        zone=zone_from_values(settings.zone),
        enable_overlays=bool(settings.enable_overlays),
        snapshot_jpeg_quality=int(settings.snapshot_jpeg_quality),
    )


def format_uptime(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"


class MonitorSession:
    """Hosts one monitored stream: the pipeline plus its event and telemetry sinks.

    Frames are pushed by the external pose source through `on_pose_result()` (or
    `on_image()` when a `PoseEstimator` is injected). Operator calls may come
    from other threads; every access to pipeline state and sinks is serialized
    by one lock, so a frame never observes a half-applied change.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        estimator: PoseEstimator | None = None,
        audio: AudioChannel | None = None,
        stream_id: str = "default",
    ) -> None:
        self.settings = settings
        self.stream_id = stream_id
        self.estimator = estimator
        self.audio = audio
        self.pipeline = ThreatPipeline(
            config=pipeline_config_from_settings(settings),
            alert_config=alert_config_from_settings(settings),
        )
        self.event_log = EventLog(settings.max_events)
        self.telemetry_buffer = TelemetryBuffer(settings.telemetry_size)
        self.running = False
        self.source: str | None = None
        self.status = SecurityStatus.SAFE
        self.total_alerts = 0
        self.last_error: str | None = None
        self._started_at: float | None = None
        self._fps = 0.0
        self._fps_alpha = 0.1
        self._last_frame_at: float | None = None
        self._latest_result: PipelineResult | None = None
        self._lock = threading.Lock()

    # --- lifecycle ---------------------------------------------------------

    def _reset_stream_locked(self) -> None:
        self.pipeline.reset()
        self.status = SecurityStatus.SAFE
        self._fps = 0.0
        self._last_frame_at = None
        self._latest_result = None

    def start(self, source: str | None = None, now: float | None = None) -> None:
        """Start (or restart) monitoring; per-stream state always starts fresh."""

        with self._lock:
            self._reset_stream_locked()
            self.source = source
            self.running = True
            self.last_error = None
            self._started_at = time.time() if now is None else now
        logger.debug("Monitoring started on %s (source=%s)", self.stream_id, source)

    def switch_source(self, source: str | None) -> None:
        """Change the input source; stale detector state never carries over."""

        with self._lock:
            self._reset_stream_locked()
            self.source = source
        logger.debug("Source switched on %s (source=%s)", self.stream_id, source)

    def stop(self) -> None:
        with self._lock:
            self.running = False
            self._reset_stream_locked()
        logger.debug("Monitoring stopped on %s", self.stream_id)

    # --- frame path --------------------------------------------------------

    def on_image(self, image: np.ndarray, now: float | None = None) -> PipelineResult | None:
        """Run the injected estimator on `image`, then process the result.

        Estimator failures are treated as frames without a subject.
        """

        frame: PoseFrame | None = None
        error: str | None = None
        if self.estimator is None:
            error = "No pose estimator configured"
        else:
            try:
                frame = self.estimator.estimate(image)
            except Exception:
                error = "Pose estimation failed"
                logger.exception(error)
        if error is not None:
            with self._lock:
                self.last_error = error
        return self.on_pose_result(frame, image=image, now=now)

    def on_pose_result(
        self,
        frame: PoseFrame | None,
        image: np.ndarray | None = None,
        now: float | None = None,
    ) -> PipelineResult | None:
        """Process one pose callback.

        Returns None when monitoring is stopped or the frame could not be
        processed; otherwise the pipeline result (possibly a dropped update).
        """

        with self._lock:
            if not self.running:
                return None
            ts = time.time() if now is None else float(now)
            try:
                result = self.pipeline.process(frame, image=image, now=ts)
            except Exception:
                self.last_error = "Pipeline processing failed"
                logger.exception(self.last_error)
                return None
            self._update_fps(ts)
            self._latest_result = result
            if not result.accepted:
                return result

            self.status = result.status
            decision = result.decision
            if decision.label is not ActionLabel.NONE:
                self.telemetry_buffer.append(
                    decision.confidence, decision.status is SecurityStatus.DANGER, now=ts
                )
            if result.event is not None:
                self.event_log.append(result.event)
                if result.event.status is SecurityStatus.DANGER:
                    self.total_alerts += 1
            warning = result.warning

        if warning is not None:
            self._announce(warning)
        return result

    def _update_fps(self, now: float) -> None:
        if self._last_frame_at is not None:
            dt = now - self._last_frame_at
            if dt > 0:
                instant = 1.0 / dt
                self._fps = (
                    instant
                    if self._fps == 0.0
                    else (self._fps * (1.0 - self._fps_alpha) + instant * self._fps_alpha)
                )
        self._last_frame_at = now

    def _announce(self, warning: SpokenWarning) -> None:
        if self.audio is None or not self.settings.audio_enabled or not self.running:
            return
        try:
            if self.audio.is_speaking():
                return
            self.audio.speak(warning.text)
        except Exception:
            logger.exception("Audio warning failed")

    # --- operator controls -------------------------------------------------

    def set_zone(self, zone: ZoneRect | None) -> None:
        self.pipeline.set_zone(zone)

    def set_zone_values(self, x: float, y: float, w: float, h: float) -> bool:
        """Set the zone from raw values; negative or non-finite values are rejected."""

        try:
            zone = zone_from_values((x, y, w, h))
        except ValueError:
            logger.warning("Rejected invalid zone: %s", (x, y, w, h))
            return False
        self.pipeline.set_zone(zone)
        return True

    def set_zone_from_drag(self, start: Point, end: Point) -> ZoneRect | None:
        try:
            zone = zone_from_drag(start, end)
        except ValueError:
            logger.warning("Rejected invalid zone drag: %s -> %s", start, end)
            return None
        self.pipeline.set_zone(zone)
        return zone

    def clear_zone(self) -> None:
        self.pipeline.set_zone(None)

    def set_privacy(self, enabled: bool) -> None:
        self.pipeline.update_config(privacy_mode=enabled)

    def update_settings(
        self,
        sensitivity: float | None = None,
        confidence_threshold: float | None = None,
    ) -> PipelineConfig:
        return self.pipeline.update_config(
            sensitivity=sensitivity, confidence_threshold=confidence_threshold
        )

    def apply_preset(self, preset_id: str) -> PipelineConfig:
        patch = preset_patch(preset_id)
        return self.update_settings(
            sensitivity=patch.get("sensitivity"),
            confidence_threshold=patch.get("confidence_threshold"),
        )

    def apply_settings(self, settings: MonitorSettings) -> None:
        """Hot-apply reloaded settings without resetting the stream.

        Sink capacities only take effect for new sessions.
        """

        with self._lock:
            self.settings = settings
            self.pipeline.configure(pipeline_config_from_settings(settings))
            self.pipeline.alerts.config = alert_config_from_settings(settings)

    def dismiss_event(self, event_id: str) -> bool:
        with self._lock:
            return self.event_log.dismiss(event_id)

    # --- sinks -------------------------------------------------------------

    def events(self) -> list[DetectionEvent]:
        with self._lock:
            return self.event_log.events()

    def telemetry(self) -> list[TelemetrySample]:
        with self._lock:
            return self.telemetry_buffer.samples()

    def latest_result(self) -> PipelineResult | None:
        with self._lock:
            return self._latest_result

    def export_report(self) -> str:
        return format_report(self.events())

    def save_report(self, directory: str | Path | None = None, now: float | None = None) -> Path:
        out_dir = directory if directory is not None else self.settings.report_dir
        return write_report(self.events(), out_dir, time.time() if now is None else now)

    def stats(self, now: float | None = None) -> SessionStats:
        with self._lock:
            ts = time.time() if now is None else now
            uptime = "00:00:00"
            if self.running and self._started_at is not None:
                uptime = format_uptime(ts - self._started_at)
            return SessionStats(
                fps=float(self._fps),
                uptime=uptime,
                total_alerts=self.total_alerts,
                status=self.status,
                source=self.source,
                running=self.running,
                last_error=self.last_error,
            )
