# ============================================================================
# src/radiology_intake/core/__init__.py
# ============================================================================
"""
Core components for the radiology intake application.

The batch pipeline and workflow controller depend on the extraction package
and are imported from their own modules:

    from radiology_intake.core.batch_pipeline import BatchPipeline
    from radiology_intake.core.workflow import WorkflowController
"""

from .models import (
    RawRow,
    Finding,
    ExtractionResult,
    SessionRecord,
    new_session_record,
)
from .session_store import SessionStore

__all__ = [
    "RawRow",
    "Finding",
    "ExtractionResult",
    "SessionRecord",
    "new_session_record",
    "SessionStore",
]
