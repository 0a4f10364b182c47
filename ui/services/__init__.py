# ============================================================================
# ui/services/__init__.py
# ============================================================================
"""
UI Service Layer

Connects Streamlit UI to the radiology intake core.
"""

from .extraction_service import ExtractionService

__all__ = ['ExtractionService']
