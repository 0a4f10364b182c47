# ============================================================================
# src/radiology_intake/utils/__init__.py
# ============================================================================
"""
Utility modules for the radiology intake application.
"""

from .exceptions import (
    RadiologyIntakeError,
    ConfigurationError,
    BatchUploadError,
    TooManyRecords,
    EmptyBatch,
    ExtractionError,
    ServiceUnavailable,
    MalformedResponse,
    NotAMedicalReport,
)

from .logging import (
    setup_logging,
    JsonFormatter,
)

__all__ = [
    # Exceptions
    'RadiologyIntakeError',
    'ConfigurationError',
    'BatchUploadError',
    'TooManyRecords',
    'EmptyBatch',
    'ExtractionError',
    'ServiceUnavailable',
    'MalformedResponse',
    'NotAMedicalReport',
    # Logging
    'setup_logging',
    'JsonFormatter',
]
