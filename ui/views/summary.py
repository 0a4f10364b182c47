# ============================================================================
# ui/views/summary.py
# ============================================================================
"""
Summary View

Step 3: session pivot table, CSV export and session reset.
"""

import streamlit as st

from radiology_intake.core.workflow import WorkflowController
from radiology_intake.export import export_filename, render_export_csv
from ui.components.summary_table import render_summary_table
from ui.views.intake import sync_form_widgets

CONFIRM_RESET = "confirm_reset"


def _reset(controller: WorkflowController):
    if controller.reset_session(confirmed=st.session_state.get(CONFIRM_RESET, False)):
        st.session_state[CONFIRM_RESET] = False
        sync_form_widgets(controller)


def _render_last_batch(controller: WorkflowController):
    batch = controller.last_batch
    if batch is None:
        return

    with st.expander(f"Last batch: {batch.stored} of {batch.total} rows stored"):
        col1, col2, col3 = st.columns(3)
        col1.metric("Failed", len(batch.failures))
        col2.metric("Not radiology reports", len(batch.rejected))
        col3.metric("Empty rows", len(batch.skipped))

        if batch.failures:
            st.dataframe(
                [
                    {
                        "Row": f.index + 1,
                        "Key ID": f.key_id,
                        "Error": f.error_type,
                        "Message": f.message,
                    }
                    for f in batch.failures
                ],
                use_container_width=True,
                hide_index=True
            )


def render_summary(controller: WorkflowController):
    records = controller.store.records

    st.header("Final Session Archive")
    st.caption(f"Structured data for {len(records)} patient reports.")

    _render_last_batch(controller)

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export to Excel (.csv)",
            data=render_export_csv(records).encode("utf-8"),
            file_name=export_filename(),
            mime="text/csv",
            type="primary",
            disabled=not records,
            use_container_width=True
        )
    with col2:
        st.button("Add More Reports", on_click=controller.back_to_input, use_container_width=True)

    render_summary_table(records)

    st.divider()
    with st.expander("Clear & New Session"):
        st.warning("Are you sure you want to clear this session? All unsaved data will be lost.")
        st.checkbox("Yes, discard every report in this session", key=CONFIRM_RESET)
        st.button(
            "Clear & New Session",
            on_click=_reset,
            args=(controller,),
            disabled=not st.session_state.get(CONFIRM_RESET, False)
        )
