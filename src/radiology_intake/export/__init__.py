# ============================================================================
# src/radiology_intake/export/__init__.py
# ============================================================================
"""
Pivoted CSV export of session records.
"""

from .csv_writer import (
    render_export_csv,
    export_filename,
    collect_organs,
    format_finding,
    format_organ_cell,
    findings_for_organ,
)

__all__ = [
    "render_export_csv",
    "export_filename",
    "collect_organs",
    "format_finding",
    "format_organ_cell",
    "findings_for_organ",
]
