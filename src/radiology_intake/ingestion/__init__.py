# ============================================================================
# src/radiology_intake/ingestion/__init__.py
# ============================================================================
"""
Batch CSV ingestion: row parser and upload template.
"""

from .csv_parser import parse_batch_csv, split_csv_line
from .template import build_template_csv, TEMPLATE_HEADER

__all__ = [
    "parse_batch_csv",
    "split_csv_line",
    "build_template_csv",
    "TEMPLATE_HEADER",
]
