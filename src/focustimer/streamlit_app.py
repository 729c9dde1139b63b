"""Streamlit dashboard for the FocusTimer session log.

Run with:

    streamlit run src/focustimer/streamlit_app.py

Shows totals, focus minutes per day and the raw session rows from the CSV
file the command line timer appends to.
"""
from __future__ import annotations

from pathlib import Path

import streamlit as st

from focustimer import csvlog
from focustimer.engine import REASON_COMPLETED


def main() -> None:
    st.set_page_config(page_title="FocusTimer history", layout="centered")

    st.title("Focus sessions")

    with st.sidebar:
        log_path = Path(st.text_input("Session log", value=str(csvlog.DEFAULT_LOG_PATH)))
        only_completed = st.checkbox("Only completed sessions", value=False)

    records = csvlog.read_sessions(log_path)
    if only_completed:
        records = [r for r in records if r.reason == REASON_COMPLETED]

    if not records:
        st.info(f"No sessions logged in {log_path} yet. Run `focustimer` to record one.")
        return

    summary = csvlog.summarize(records)
    c1, c2, c3 = st.columns(3)
    c1.metric("Sessions", summary["sessions"])
    c2.metric("Focus cycles", summary["cycles"])
    c3.metric("Focus minutes", summary["focus_minutes"])

    st.subheader("Focus minutes per day")
    daily = csvlog.daily_focus_minutes(records)
    st.bar_chart({"day": list(daily.keys()), "minutes": list(daily.values())}, x="day", y="minutes")

    st.subheader("Sessions")
    st.dataframe(
        [
            {
                "started": r.started_at.strftime(csvlog.TIMESTAMP_FORMAT),
                "focus minutes": r.focus_minutes,
                "cycles": r.cycles_completed,
                "reason": r.reason,
            }
            for r in reversed(records)
        ]
    )


if __name__ == "__main__":
    main()
