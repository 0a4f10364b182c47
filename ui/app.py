#!/usr/bin/env python3
# ============================================================================
# ui/app.py
# ============================================================================
"""
Radiology Report Intake - Streamlit UI

Main application entry point. A single page whose body follows the
workflow controller's current view (Input, Review, Summary).

Usage:
    streamlit run ui/app.py
"""

import streamlit as st
from pathlib import Path
import sys

# Add project root (for ui.*) and src/ (for radiology_intake) to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))

from radiology_intake.config import logging_settings
from radiology_intake.core.workflow import AppView, WorkflowController
from radiology_intake.utils.logging import setup_logging
from ui.components.progress_tracker import render_progress_tracker
from ui.services.extraction_service import ExtractionService
from ui.views.intake import render_intake
from ui.views.review import render_review
from ui.views.summary import render_summary


@st.cache_resource
def _configure_logging():
    setup_logging(
        level=logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_JSON,
    )
    return True


def init_session_state():
    """Initialize session state variables."""
    if 'controller' not in st.session_state:
        st.session_state.controller = WorkflowController()


def render_sidebar(controller: WorkflowController, service: ExtractionService):
    with st.sidebar:
        st.metric(label="Reports in Session", value=len(controller.store))

        if controller.store and controller.view is not AppView.SUMMARY:
            st.button("View Summary", on_click=controller.show_summary, use_container_width=True)

        st.divider()
        st.subheader("System Status")
        if st.button("Check Extraction Backend"):
            with st.spinner("Contacting backend..."):
                status = service.health_check()
            if status["healthy"]:
                st.success(f"{status['backend']} / {status['model']}: Ready")
            else:
                st.error(status["details"])


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Radiology Report Intake",
        page_icon="🩻",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    _configure_logging()
    init_session_state()

    controller: WorkflowController = st.session_state.controller
    service = ExtractionService()

    st.title("🩻 Radiology Report Intake")

    render_sidebar(controller, service)
    render_progress_tracker(controller.view)
    st.divider()

    if controller.view is AppView.INPUT:
        render_intake(controller, service)
    elif controller.view is AppView.REVIEW:
        render_review(controller)
    else:
        render_summary(controller)


if __name__ == "__main__":
    main()
