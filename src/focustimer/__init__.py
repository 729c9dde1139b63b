"""Terminal focus timer: repeated work/break cycles with a CSV session log."""

__version__ = "0.1.0"
