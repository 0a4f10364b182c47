# ============================================================================
# ui/views/review.py
# ============================================================================
"""
Review View

Step 2: inspect the extraction before it is saved to the session.
"""

import streamlit as st

from radiology_intake.core.workflow import WorkflowController
from ui.components.finding_card import render_finding_grid
from ui.views.intake import sync_form_widgets


def _save_and_next(controller: WorkflowController):
    controller.save_and_next()
    sync_form_widgets(controller)


def _finish(controller: WorkflowController):
    controller.finish_session()
    sync_form_widgets(controller)


def render_review(controller: WorkflowController):
    extraction = controller.current_extraction
    if extraction is None:
        controller.back_to_input()
        st.rerun()

    st.caption("EXTRACTION REVIEW")
    st.header(f"Report: {controller.key_id}")

    if extraction.summary:
        st.subheader("Patient Profile Summary")
        st.info(extraction.summary)

    st.subheader("Granular Organ Findings")
    abnormal = len(extraction.abnormal_findings)
    st.caption(f"{len(extraction.findings)} findings, {abnormal} abnormal")
    render_finding_grid(extraction.findings)

    if extraction.impression:
        st.subheader("Final Clinical Impression")
        st.code(extraction.impression, language=None, wrap_lines=True)

    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        st.button(
            "Save & Input Next Report",
            type="primary",
            on_click=_save_and_next,
            args=(controller,),
            use_container_width=True
        )
    with col2:
        st.button(
            "Finish & Export Data",
            on_click=_finish,
            args=(controller,),
            use_container_width=True
        )
