# ============================================================================
# src/radiology_intake/__init__.py
# ============================================================================
"""
Radiology Report Intake

Paste or batch-upload free-text radiology reports, extract organ-level
findings through an LLM service, review them and export a pivoted CSV.
"""

__version__ = "1.0.0"
