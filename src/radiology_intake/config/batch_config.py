# ============================================================================
# src/radiology_intake/config/batch_config.py
# ============================================================================
"""
Batch Upload & Export Settings
- Row limit for CSV uploads
- Export filename prefix
- Demo report identifiers
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class BatchSettings(BaseSettings):
    MAX_BATCH_ROWS: int = Field(
        default=500,
        ge=1,
        description="Maximum number of data rows accepted in one CSV upload"
    )
    EXPORT_FILENAME_PREFIX: str = Field(
        default="radiology_data_export",
        description="Prefix of the generated export filename (epoch millis appended)"
    )
    TEMPLATE_FILENAME: str = Field(
        default="radiology_batch_template.csv",
        description="Filename offered for the downloadable upload template"
    )
    DEMO_KEY_ID: str = Field(
        default="EX-10023",
        description="Key ID filled in by the Load Demo action"
    )

batch_settings = BatchSettings()
