"""Command line interface for FocusTimer."""
from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Iterable, Optional, TextIO

from . import csvlog, session
from .engine import REASON_INTERRUPTED, REASON_QUIT, TimerEngine
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)

COMMANDS_HELP = "During a session: type 'p' + ENTER to pause/resume, 'q' + ENTER to quit."


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} must be > 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="focustimer",
        description="Tiny Pomodoro-style focus timer for the terminal.",
        epilog=COMMANDS_HELP,
    )
    parser.add_argument("--work", dest="work_minutes", type=positive_int, default=session.DEFAULTS["work_minutes"], help="minutes per focus phase")
    parser.add_argument("--break", dest="break_minutes", type=positive_int, default=session.DEFAULTS["break_minutes"], help="minutes per break")
    parser.add_argument("--cycles", type=positive_int, default=session.DEFAULTS["cycles"], help="number of focus phases to complete")
    parser.add_argument("--log-file", type=Path, default=csvlog.DEFAULT_LOG_PATH, help="CSV file finished sessions are appended to")
    parser.add_argument("--fast", action="store_true", help="treat one real second as one minute (handy for demos)")
    parser.add_argument("--dry-run", action="store_true", help="show the planned phases without running timers")
    parser.add_argument("--history", action="store_true", help="summarise the session log and exit")
    parser.add_argument("--debug-log", type=Path, default=None, help="also write detailed logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="print informational log messages")
    return parser


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    return build_parser().parse_args(list(argv))


def read_commands(engine: TimerEngine, stream: TextIO) -> None:
    """Feed line commands from ``stream`` to the engine until it stops.

    End of input leaves the session running.
    """
    while engine.is_running():
        line = stream.readline()
        if not line:
            return
        command = line.strip().lower()
        if command == "p":
            engine.toggle_pause()
        elif command == "q":
            engine.stop(REASON_QUIT)
            return
        elif command:
            logger.info("Ignoring unknown command %r", command)


def print_history(path: Path) -> None:
    records = csvlog.read_sessions(path)
    if not records:
        print(f"No sessions logged in {path} yet.")
        return
    summary = csvlog.summarize(records)
    print(f"Sessions     : {summary['sessions']} ({summary['completed_sessions']} completed)")
    print(f"Focus cycles : {summary['cycles']}")
    print(f"Focus time   : {summary['focus_minutes']} minute(s)")
    print("Per day:")
    for day, minutes in csvlog.daily_focus_minutes(records).items():
        print(f"- {day}: {minutes} minute(s)")


def _install_signal_handlers(engine: TimerEngine) -> dict:
    def handle(signum, frame):  # noqa: ARG001
        # The main thread may be inside the engine lock when a signal lands.
        threading.Thread(
            target=engine.stop, args=(REASON_INTERRUPTED,), name="focustimer-signal", daemon=True
        ).start()

    previous = {}
    for name in ("SIGINT", "SIGTERM"):
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, handle)
    return previous


def _restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_session(config: session.SessionConfig, log_file: Path, *, stdin: Optional[TextIO] = None) -> TimerEngine:
    engine = TimerEngine(config, csvlog.CsvSessionLogger(log_file))
    previous = _install_signal_handlers(engine)
    reader = threading.Thread(
        target=read_commands,
        args=(engine, stdin if stdin is not None else sys.stdin),
        name="focustimer-input",
        daemon=True,
    )
    try:
        engine.start()
        reader.start()
        # Short waits keep the main thread responsive to signals.
        while not engine.await_finish(timeout=0.5):
            pass
    finally:
        _restore_signal_handlers(previous)
    return engine


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose=args.verbose, log_file=args.debug_log)

    if args.history:
        print_history(args.log_file)
        return 0

    config = session.SessionConfig(
        work_minutes=args.work_minutes,
        break_minutes=args.break_minutes,
        cycles=args.cycles,
        minute_seconds=1 if args.fast else 60,
    )

    print("Cycles :", config.cycles)
    print("Focus  :", config.work_minutes, "minute(s)")
    print("Break  :", config.break_minutes, "minute(s)")
    print()

    if args.dry_run:
        print("Planned phases:")
        for item in session.build_plan(config):
            print(f"- {item.label}: {item.minutes} minute(s)")
        return 0

    print(f"Starting FocusTimer… {COMMANDS_HELP}")
    run_session(config, args.log_file)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
