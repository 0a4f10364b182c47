# ============================================================================
# ui/components/summary_table.py
# ============================================================================
"""
Summary Table Component

Pivot view of the session: one row per record, one column per organ.
"""

import streamlit as st
from typing import Sequence

import pandas as pd

from radiology_intake.core.models import SessionRecord
from radiology_intake.export import collect_organs, findings_for_organ, format_organ_cell

NO_DATA = "No data"


def build_summary_frame(records: Sequence[SessionRecord]) -> pd.DataFrame:
    """
    Build the on-screen pivot table.

    Columns are Key ID, Impression and one column per organ (same order as
    the CSV export); organs without findings read "No data".
    """
    organs = collect_organs(records)

    rows = []
    for record in records:
        row = {
            "Key ID": record.key_id,
            "Impression": record.extraction.impression or "",
        }
        for organ in organs:
            cell = format_organ_cell(findings_for_organ(record, organ))
            row[organ] = cell or NO_DATA
        rows.append(row)

    return pd.DataFrame(rows, columns=["Key ID", "Impression", *organs])


def _highlight_abnormal(value):
    if isinstance(value, str) and "[ABNORMAL]" in value:
        return "background-color: #fef2f2; color: #b91c1c"
    if value == NO_DATA:
        return "color: #cbd5e1; font-style: italic"
    return ""


def render_summary_table(records: Sequence[SessionRecord]) -> None:
    """
    Render the session pivot table.

    Args:
        records: Session records in insertion order
    """
    if not records:
        st.info("No reports saved in this session yet.")
        return

    df = build_summary_frame(records)
    st.dataframe(
        df.style.map(_highlight_abnormal),
        use_container_width=True,
        hide_index=True
    )
