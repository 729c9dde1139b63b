"""Append-only CSV log of finished focus sessions."""
from __future__ import annotations

import csv
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .engine import REASON_COMPLETED

logger = logging.getLogger(__name__)

HEADER = ["timestamp", "focus_minutes", "cycles_completed", "reason"]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_PATH = Path("logs") / "focus_sessions.csv"

PathLike = Union[str, Path]


@dataclass(frozen=True)
class SessionRecord:
    """One row of the session log."""

    started_at: datetime
    focus_minutes: int
    cycles_completed: int
    reason: str


class CsvSessionLogger:
    """Writes one row per finished session, creating the file and header on first use.

    Write failures are logged and reported through the return value of
    :meth:`append`; they never propagate to the caller.
    """

    def __init__(self, path: PathLike = DEFAULT_LOG_PATH) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, started_at: datetime, focus_minutes: int, cycles_completed: int, reason: str) -> bool:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                is_new = not self.path.exists() or self.path.stat().st_size == 0
                with self.path.open("a", newline="", encoding="utf-8") as handle:
                    writer = csv.writer(handle)
                    if is_new:
                        writer.writerow(HEADER)
                    writer.writerow(
                        [started_at.strftime(TIMESTAMP_FORMAT), int(focus_minutes), int(cycles_completed), reason]
                    )
            except OSError as exc:
                logger.error("Could not write session log %s: %s", self.path, exc)
                return False
        return True


def read_sessions(path: PathLike = DEFAULT_LOG_PATH) -> List[SessionRecord]:
    """Load every well-formed row from the session log; a missing file yields no rows."""
    path = Path(path)
    if not path.exists():
        return []

    records: List[SessionRecord] = []
    with path.open(newline="", encoding="utf-8") as handle:
        for line_no, row in enumerate(csv.DictReader(handle), start=2):
            try:
                records.append(
                    SessionRecord(
                        started_at=datetime.strptime(row["timestamp"], TIMESTAMP_FORMAT),
                        focus_minutes=int(row["focus_minutes"]),
                        cycles_completed=int(row["cycles_completed"]),
                        reason=row["reason"] or "",
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed row %d in %s: %s", line_no, path, exc)
    return records


def summarize(records: Iterable[SessionRecord]) -> Dict[str, int]:
    summary = {"sessions": 0, "completed_sessions": 0, "focus_minutes": 0, "cycles": 0}
    for record in records:
        summary["sessions"] += 1
        summary["focus_minutes"] += record.focus_minutes
        summary["cycles"] += record.cycles_completed
        if record.reason == REASON_COMPLETED:
            summary["completed_sessions"] += 1
    return summary


def daily_focus_minutes(records: Iterable[SessionRecord]) -> Dict[str, int]:
    """Focus minutes per calendar day (ISO date), oldest first."""
    totals: Dict[str, int] = OrderedDict()
    for record in sorted(records, key=lambda r: r.started_at):
        day = record.started_at.date().isoformat()
        totals[day] = totals.get(day, 0) + record.focus_minutes
    return totals


__all__ = [
    "CsvSessionLogger",
    "DEFAULT_LOG_PATH",
    "HEADER",
    "SessionRecord",
    "daily_focus_minutes",
    "read_sessions",
    "summarize",
]
