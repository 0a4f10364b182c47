# ============================================================================
# src/radiology_intake/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the radiology intake application.
"""


class RadiologyIntakeError(Exception):
    """Base exception for all radiology intake errors."""
    pass


class ConfigurationError(RadiologyIntakeError):
    """Invalid or incomplete configuration."""
    pass


class BatchUploadError(RadiologyIntakeError):
    """Uploaded batch cannot be processed as a whole."""
    pass


class TooManyRecords(BatchUploadError):
    """Batch exceeds the maximum number of data rows."""
    def __init__(self, count: int, limit: int):
        super().__init__(
            f"Batch contains {count} records; the maximum is {limit}. "
            "Please split the file and upload it in smaller parts."
        )
        self.count = count
        self.limit = limit


class EmptyBatch(BatchUploadError):
    """No usable rows remained after parsing."""
    def __init__(self, message: str = "No valid records found in the uploaded file."):
        super().__init__(message)


class ExtractionError(RadiologyIntakeError):
    """Error producing a structured extraction for one report."""
    pass


class ServiceUnavailable(ExtractionError):
    """Transport or network failure calling the extraction service."""
    pass


class MalformedResponse(ExtractionError):
    """Extraction service returned no payload or one that does not fit the schema."""
    pass


class NotAMedicalReport(ExtractionError):
    """Extraction service classified the input as non-radiology text."""
    pass
