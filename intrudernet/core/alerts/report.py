"""CSV incident report export.

Header row is unquoted; every data field is quoted. Timestamps are ISO-8601 in
UTC with millisecond precision so reports read back to the same instant.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from intrudernet.core.types import DetectionEvent

REPORT_HEADER = "Timestamp,Type,Confidence,Message"


@dataclass(frozen=True)
class ReportRow:
    timestamp: float
    type: str
    confidence: float  # 0..1
    message: str


def format_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds")


def format_report(events: list[DetectionEvent]) -> str:
    buf = io.StringIO()
    buf.write(REPORT_HEADER + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for e in events:
        writer.writerow(
            [
                format_timestamp(e.timestamp),
                e.type.value,
                f"{e.confidence * 100.0:.1f}%",
                e.message,
            ]
        )
    return buf.getvalue()


def parse_report(text: str) -> list[ReportRow]:
    """Parse a report produced by `format_report`."""

    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames != REPORT_HEADER.split(","):
        raise ValueError("not an incident report: unexpected header")
    rows: list[ReportRow] = []
    for raw in reader:
        rows.append(
            ReportRow(
                timestamp=datetime.fromisoformat(raw["Timestamp"]).timestamp(),
                type=raw["Type"],
                confidence=float(raw["Confidence"].rstrip("%")) / 100.0,
                message=raw["Message"],
            )
        )
    return rows


def report_filename(now: float) -> str:
    stamp = datetime.fromtimestamp(now, tz=timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"security_report_{stamp}.csv"


def write_report(events: list[DetectionEvent], directory: str | Path, now: float) -> Path:
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report_filename(now)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(format_report(events))
    return path
