# ============================================================================
# ui/components/finding_card.py
# ============================================================================
"""
Finding Card Component

Displays one extracted finding with Normal/Abnormal and Present/Absent badges.
"""

import streamlit as st
from typing import Sequence

from radiology_intake.core.models import Finding


def render_finding_card(finding: Finding) -> None:
    """
    Render a single finding.

    Args:
        finding: Extracted finding
    """
    with st.container(border=True):
        col1, col2 = st.columns([3, 1])

        with col1:
            st.markdown(f"**{finding.label.upper()}** · {finding.organ}")
            st.write(finding.description)
            if finding.details:
                st.caption(f"Details: {finding.details}")

        with col2:
            if finding.is_abnormal:
                st.error("Abnormal")
            else:
                st.success("Normal")

            if finding.present:
                st.caption("Present")
            else:
                st.caption(":red[Absent]")


def render_finding_grid(findings: Sequence[Finding], columns: int = 2) -> None:
    """Render findings in a grid, abnormal ones flagged red."""
    if not findings:
        st.info("No findings extracted from this report.")
        return

    cols = st.columns(columns)
    for i, finding in enumerate(findings):
        with cols[i % columns]:
            render_finding_card(finding)
