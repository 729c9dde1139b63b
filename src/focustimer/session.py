"""Session configuration and phase plan helpers."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List


class Phase(enum.Enum):
    WORK = "work"
    BREAK = "break"
    DONE = "done"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Phase.WORK: "FOCUS",
    Phase.BREAK: "BREAK",
    Phase.DONE: "DONE",
}


DEFAULTS = {
    "work_minutes": 25,
    "break_minutes": 5,
    "cycles": 4,
}


@dataclass(frozen=True)
class SessionConfig:
    """Fixed settings for one focus session.

    Args:
        work_minutes: Length of each focus phase.
        break_minutes: Length of the break between focus phases.
        cycles: Number of focus phases to complete.
        minute_seconds: Real seconds per minute; 1 turns minutes into seconds for demos.
    """

    work_minutes: int = DEFAULTS["work_minutes"]
    break_minutes: int = DEFAULTS["break_minutes"]
    cycles: int = DEFAULTS["cycles"]
    minute_seconds: float = 60

    def __post_init__(self) -> None:
        if self.cycles < 1:
            raise ValueError("cycles must be at least 1")
        if min(self.work_minutes, self.break_minutes) <= 0:
            raise ValueError("all durations must be positive")
        if self.minute_seconds <= 0:
            raise ValueError("minute_seconds must be positive")

    @property
    def work_seconds(self) -> float:
        return self.work_minutes * self.minute_seconds

    @property
    def break_seconds(self) -> float:
        return self.break_minutes * self.minute_seconds

    def duration_of(self, phase: Phase) -> float:
        if phase is Phase.WORK:
            return self.work_seconds
        if phase is Phase.BREAK:
            return self.break_seconds
        return 0.0


@dataclass(frozen=True)
class Interval:
    """One planned work or break phase of a session."""

    phase: Phase
    label: str
    minutes: int


def build_plan(config: SessionConfig) -> List[Interval]:
    """Return the intervals a session runs through when nothing interrupts it.

    The last focus phase is not followed by a break: the session is done as
    soon as the cycle target is reached.
    """
    intervals: List[Interval] = []
    for index in range(1, config.cycles + 1):
        intervals.append(Interval(phase=Phase.WORK, label=f"Focus {index}", minutes=config.work_minutes))
        if index < config.cycles:
            intervals.append(Interval(phase=Phase.BREAK, label=f"Break {index}", minutes=config.break_minutes))
    return intervals
