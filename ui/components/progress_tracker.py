# ============================================================================
# ui/components/progress_tracker.py
# ============================================================================
"""
Workflow progress tracker: 01 Input, 02 Review, 03 Summary.
"""

import streamlit as st

from radiology_intake.core.workflow import AppView

STEPS = (
    (AppView.INPUT, "01", "Input"),
    (AppView.REVIEW, "02", "Review"),
    (AppView.SUMMARY, "03", "Summary"),
)


def render_progress_tracker(current: AppView) -> None:
    cols = st.columns(len(STEPS))
    for col, (view, number, label) in zip(cols, STEPS):
        with col:
            if view is current:
                st.markdown(f"### :blue[{number} · {label}]")
            else:
                st.markdown(f"### :gray[{number} · {label}]")
