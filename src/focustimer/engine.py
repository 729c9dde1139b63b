"""Work/break state machine driven by a background ticker thread.

Remaining time is derived from an absolute phase end on a monotonic clock, so
late ticks never accumulate drift. Time spent paused is credited back through
``paused_so_far``, which is reset whenever a new phase starts.

All state changes happen under one lock. The ticker thread, the command
reader and signal handlers may call into the engine concurrently.
"""
from __future__ import annotations

import logging
import sys
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol, TextIO

from . import console
from .session import Phase, SessionConfig

logger = logging.getLogger(__name__)

REASON_COMPLETED = "Completed"
REASON_QUIT = "Quit by user"
REASON_INTERRUPTED = "Interrupted"

Clock = Callable[[], float]
WallClock = Callable[[], datetime]


class SessionRecorder(Protocol):
    def append(self, started_at: datetime, focus_minutes: int, cycles_completed: int, reason: str) -> object:
        ...


@dataclass(frozen=True)
class EngineSnapshot:
    phase: Phase
    cycle: int
    completed_cycles: int
    remaining_seconds: int
    paused: bool
    running: bool


class TimerEngine:
    def __init__(
        self,
        config: SessionConfig,
        recorder: SessionRecorder,
        *,
        clock: Optional[Clock] = None,
        wall_clock: Optional[WallClock] = None,
        out: Optional[TextIO] = None,
        interval: float = 1.0,
    ) -> None:
        self._config = config
        self._recorder = recorder
        self._clock: Clock = clock or time.monotonic
        self._wall_clock: WallClock = wall_clock or datetime.now
        self._out = out
        self._interval = interval

        self._lock = threading.RLock()
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._ticker: Optional[threading.Thread] = None

        self._phase = Phase.WORK
        self._phase_end = 0.0
        self._completed_cycles = 0
        self._paused = False
        self._paused_at = 0.0
        self._paused_so_far = 0.0
        self._running = False
        self._stopping = False
        self._session_start: Optional[datetime] = None
        self._end_reason = REASON_COMPLETED

    # --- Public API -----------------------------------------------------
    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def end_reason(self) -> str:
        return self._end_reason

    def is_running(self) -> bool:
        return self._running and not self._stopping

    def start(self) -> None:
        with self._lock:
            if self._running or self._stopping or self._finished.is_set():
                return
            self._running = True
            self._session_start = self._wall_clock()
            self._switch_to(Phase.WORK)
            if self._stopping:
                return
            logger.info(
                "Session started: %d x %d min focus, %d min break",
                self._config.cycles,
                self._config.work_minutes,
                self._config.break_minutes,
            )
            self._write_status()

        if self._stopping:
            return
        self._ticker = threading.Thread(target=self._run_ticker, name="focustimer-ticker", daemon=True)
        self._ticker.start()

    def stop(self, reason: str) -> None:
        with self._lock:
            if self._finished.is_set():
                return
            self._stopping = True
            self._cancelled.set()
            if not self._running:
                # Never started: nothing to report, but waiters must not hang.
                self._finished.set()
                return
            self._end_reason = reason
            logger.info("Stop requested: %s", reason)
            self._finish()

    def toggle_pause(self) -> None:
        with self._lock:
            if not self._running or self._stopping:
                return
            now = self._clock()
            if not self._paused:
                self._paused = True
                self._paused_at = now
                logger.info("Paused during %s", self._phase.label)
            else:
                self._paused_so_far += now - self._paused_at
                self._paused = False
                logger.info("Resumed after %.1fs", now - self._paused_at)
            self._write_status()

    def await_finish(self, timeout: Optional[float] = None) -> bool:
        """Block until the session has been finalized.

        Returns immediately if that already happened. With a timeout, returns
        False if the session is still going when it expires.
        """
        return self._finished.wait(timeout)

    def tick(self) -> None:
        if self._stopping:
            return
        try:
            with self._lock:
                self._advance()
        except Exception as exc:
            logger.exception("Timer tick failed")
            self.stop(f"Error: {exc}")

    def snapshot(self) -> EngineSnapshot:
        with self._lock:
            return EngineSnapshot(
                phase=self._phase,
                cycle=self._cycle_number(),
                completed_cycles=self._completed_cycles,
                remaining_seconds=int(max(0, self._remaining())),
                paused=self._paused,
                running=self.is_running(),
            )

    # --- Internal -------------------------------------------------------
    def _run_ticker(self) -> None:
        while not self._cancelled.wait(self._interval):
            self.tick()

    def _advance(self) -> None:
        if self._stopping or not self._running:
            return
        if self._paused:
            self._write_status()
            return
        if self._remaining() > 0:
            self._write_status()
            return

        if self._phase is Phase.WORK:
            self._completed_cycles += 1
            logger.info("Focus %d/%d complete", self._completed_cycles, self._config.cycles)
            if self._completed_cycles >= self._config.cycles:
                self._switch_to(Phase.DONE)
                self._finish()
                return
            self._switch_to(Phase.BREAK)
        elif self._phase is Phase.BREAK:
            self._switch_to(Phase.WORK)
        self._write_status()

    def _switch_to(self, phase: Phase) -> None:
        now = self._clock()
        if self._stopping:
            return
        self._phase = phase
        self._paused = False
        self._paused_so_far = 0.0
        self._phase_end = now + self._config.duration_of(phase)
        logger.debug("Entered %s", phase.label)

    def _remaining(self) -> float:
        # While paused the clock is frozen at the moment the pause began.
        now = self._paused_at if self._paused else self._clock()
        return self._phase_end - now + self._paused_so_far

    def _cycle_number(self) -> int:
        current = self._completed_cycles + (1 if self._phase is Phase.WORK else 0)
        return min(current, self._config.cycles)

    def _stream(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _write_status(self) -> None:
        stream = self._stream()
        stream.write(
            console.status_line(
                self._phase.label,
                self._cycle_number(),
                self._config.cycles,
                self._remaining(),
                paused=self._paused,
            )
        )
        stream.flush()

    def _finish(self) -> None:
        if not self._running:
            return
        self._running = False
        self._cancelled.set()
        try:
            try:
                stream = self._stream()
                stream.write(console.clear_line())
                stream.write(f"Session ended: {self._end_reason}\n")
                stream.flush()
            except (OSError, ValueError) as exc:
                # Output may be a closed pipe; the log row is still written.
                logger.warning("Could not write session summary: %s", exc)

            focus_minutes = self._completed_cycles * self._config.work_minutes
            logger.info(
                "Session finished (%s): %d cycle(s), %d focus minute(s)",
                self._end_reason,
                self._completed_cycles,
                focus_minutes,
            )
            started_at = self._session_start or self._wall_clock()
            self._recorder.append(started_at, focus_minutes, self._completed_cycles, self._end_reason)
        finally:
            self._finished.set()


__all__ = [
    "EngineSnapshot",
    "REASON_COMPLETED",
    "REASON_INTERRUPTED",
    "REASON_QUIT",
    "SessionRecorder",
    "TimerEngine",
]
