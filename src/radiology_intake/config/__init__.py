# ============================================================================
# src/radiology_intake/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .batch_config import batch_settings
from .logging_config import logging_settings
