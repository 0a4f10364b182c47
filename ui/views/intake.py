# ============================================================================
# ui/views/intake.py
# ============================================================================
"""
Intake View

Step 1: link identifying data and provide report text, either one report at
a time or as a CSV batch.
"""

import streamlit as st

from radiology_intake.config import batch_settings
from radiology_intake.core.workflow import WorkflowController
from radiology_intake.ingestion import build_template_csv
from ui.services.extraction_service import ExtractionService

# Widget keys mirrored into the controller on every run
KEY_ID_INPUT = "key_id_input"
ORDER_ID_INPUT = "order_id_input"
REPORT_TEXT_INPUT = "report_text_input"


def sync_form_widgets(controller: WorkflowController):
    """Push controller form state into the widgets (used from callbacks)."""
    st.session_state[KEY_ID_INPUT] = controller.key_id
    st.session_state[ORDER_ID_INPUT] = controller.order_id
    st.session_state[REPORT_TEXT_INPUT] = controller.input_text


def _load_demo(controller: WorkflowController):
    controller.load_demo()
    sync_form_widgets(controller)


def _render_manual(controller: WorkflowController, service: ExtractionService):
    col1, col2 = st.columns(2)
    with col1:
        st.text_input(
            "Key ID Variable (e.g. Accession/MRN)",
            key=KEY_ID_INPUT,
            placeholder="Enter unique Identifier..."
        )
    with col2:
        st.text_input("Order ID (optional)", key=ORDER_ID_INPUT)

    st.text_area(
        "Report Text",
        key=REPORT_TEXT_INPUT,
        height=300,
        placeholder="Paste the free-text report here..."
    )

    controller.key_id = st.session_state.get(KEY_ID_INPUT, "")
    controller.order_id = st.session_state.get(ORDER_ID_INPUT, "")
    controller.input_text = st.session_state.get(REPORT_TEXT_INPUT, "")

    col1, col2 = st.columns([1, 3])
    with col1:
        st.button("Load Demo", on_click=_load_demo, args=(controller,), use_container_width=True)
    with col2:
        extract_clicked = st.button("Perform Extraction", type="primary", use_container_width=True)

    if extract_clicked:
        with st.spinner("Synthesizing Data..."):
            moved = service.extract(controller)
        if moved:
            st.rerun()

    if controller.error:
        st.error(controller.error)


def _render_batch(controller: WorkflowController, service: ExtractionService):
    st.markdown(
        f"Upload a CSV with columns `PatientID,OrderID,Report_Text` "
        f"(first line is the header, at most {batch_settings.MAX_BATCH_ROWS} rows)."
    )

    st.download_button(
        "Download Template",
        data=build_template_csv(),
        file_name=batch_settings.TEMPLATE_FILENAME,
        mime="text/csv"
    )

    uploaded = st.file_uploader("Choose a CSV file", type=["csv"])
    if uploaded is None:
        return

    if not st.button("Process Batch", type="primary"):
        return

    try:
        csv_text = uploaded.getvalue().decode("utf-8-sig")
    except UnicodeDecodeError:
        st.error("The uploaded file is not UTF-8 encoded text.")
        return

    progress_bar = st.progress(0.0, text="Starting batch...")

    def on_progress(completed: int, total: int):
        progress_bar.progress(completed / total, text=f"Processed {completed} of {total} reports")

    summary = service.run_batch(controller, csv_text, on_progress=on_progress)

    if summary is None:
        progress_bar.empty()
        st.error(controller.error)
        return

    if summary.stored:
        st.rerun()
    st.warning(
        f"No reports were stored from {summary.total} rows "
        f"({len(summary.failures)} failed, {len(summary.rejected)} not radiology reports)."
    )


def render_intake(controller: WorkflowController, service: ExtractionService):
    st.header("Report Intake")
    st.caption("Step 1: Link identifying data and provide report text.")

    manual_tab, batch_tab = st.tabs(["Single Report", "Batch Upload (CSV)"])

    with manual_tab:
        _render_manual(controller, service)

    with batch_tab:
        _render_batch(controller, service)
