from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path

import numpy as np

from intrudernet.core.alerts.report import write_report
from intrudernet.core.config.settings import MonitorSettings
from intrudernet.core.types import PoseFrame
from intrudernet.services.monitor import MonitorSession

logger = logging.getLogger(__name__)


def _to_jsonable(obj):
    if is_dataclass(obj):
        return _to_jsonable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    return obj


def parse_frame(record: dict) -> PoseFrame | None:
    """Build a PoseFrame from one recorded line (`landmarks: null` = no subject)."""

    landmarks = record.get("landmarks")
    if not landmarks:
        return None
    world = record.get("world_landmarks")
    return PoseFrame(
        landmarks=np.asarray(landmarks, dtype=np.float64).reshape(-1, 4),
        width=int(record["width"]),
        height=int(record["height"]),
        world_landmarks=np.asarray(world, dtype=np.float64) if world else None,
    )


def _parse_zone(text: str | None) -> list[float] | None:
    if not text:
        return None
    parts = [float(p) for p in text.split(",")]
    if len(parts) != 4:
        raise SystemExit("--zone must be x,y,w,h")
    return parts


def run(args):
    in_path = Path(args.input)
    if not in_path.exists():
        raise SystemExit(f"Cannot open recording {args.input}")

    settings = MonitorSettings(
        sensitivity=args.sensitivity,
        confidence_threshold=args.confidence_threshold,
        zone=_parse_zone(args.zone),
        audio_enabled=False,
    )
    session = MonitorSession(settings, stream_id=in_path.stem)

    processed = 0
    with open(in_path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                if not isinstance(record, dict):
                    raise ValueError("record is not a JSON object")
                frame = parse_frame(record)
                t = float(record.get("t", processed * 1.0 / 30.0))
            except (ValueError, KeyError, TypeError):
                logger.warning("Skipping malformed line %d", line_no)
                continue
            if not session.running:
                session.start(source=str(in_path), now=t)
            session.on_pose_result(frame, now=t)
            processed += 1
            if args.max_frames and processed >= args.max_frames:
                break

    last_t = t if processed else None
    output = {
        "frames": processed,
        "events": _to_jsonable(session.events()),
        "telemetry": _to_jsonable(session.telemetry()),
        "stats": _to_jsonable(session.stats(now=last_t)),
    }
    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2)
    print(f"Wrote {len(output['events'])} events from {processed} frames to {out_path}")

    if args.report_dir:
        report = write_report(session.events(), args.report_dir, last_t or 0.0)
        print(f"Wrote report to {report}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay a recorded keypoint stream through the threat pipeline")
    parser.add_argument("--input", required=True, help="Path to a JSON-lines keypoint recording")
    parser.add_argument("--output", required=True, help="Where to save JSON output")
    parser.add_argument("--report-dir", default=None, help="Also write a CSV report into this directory")
    parser.add_argument("--sensitivity", type=int, default=5)
    parser.add_argument("--confidence-threshold", type=float, default=0.5)
    parser.add_argument("--zone", default=None, help="Restricted zone as x,y,w,h in pixels")
    parser.add_argument("--max-frames", type=int, default=0, help="Limit frames for quick tests")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    run(args)
