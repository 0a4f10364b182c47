# ============================================================================
# src/radiology_intake/core/workflow.py
# ============================================================================
"""
Workflow Controller

Owns the application state of one user session and the only transitions
allowed on it:

    INPUT --extract--> REVIEW --save_and_next--> INPUT
                       REVIEW --finish_session--> SUMMARY
    INPUT --run_batch--> SUMMARY (when rows were stored)
    SUMMARY --reset_session(confirmed)--> INPUT

The Streamlit UI keeps one controller in st.session_state and renders
whatever view it is in. Manual-mode failures are caught here and turned into
a user-facing message; batch row failures are isolated by BatchPipeline.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .batch_pipeline import BatchPipeline, ProgressCallback, RowFailure
from .models import ExtractionResult, new_session_record
from .session_store import SessionStore
from ..config.batch_config import batch_settings
from ..extraction.base import BaseExtractionClient
from ..extraction.client import create_client
from ..ingestion.csv_parser import parse_batch_csv
from ..utils.exceptions import (
    BatchUploadError,
    ConfigurationError,
    ExtractionError,
    NotAMedicalReport,
)

logger = logging.getLogger(__name__)


DEMO_REPORT = """CHEST X-RAY PA/LATERAL
Lungs: Focal consolidation in RLL. Heart size is normal.
Impression: RLL Pneumonia."""

MISSING_KEY_ID_MESSAGE = "Please provide a Key ID (e.g., MRN or Accession Number) first."
MISSING_TEXT_MESSAGE = "Please provide report text to extract."
NOT_A_REPORT_MESSAGE = (
    "The provided text does not appear to be a radiology report. "
    "Please revise the input and try again."
)
EXTRACTION_FAILED_MESSAGE = "Extraction failed. Please check your connectivity and report format."


class AppView(Enum):
    INPUT = "INPUT"
    REVIEW = "REVIEW"
    SUMMARY = "SUMMARY"


class Status(Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    BATCH_PROCESSING = "BATCH_PROCESSING"


@dataclass
class BatchSummary:
    """Outcome of the last batch run, for display."""
    total: int
    stored: int
    failures: List[RowFailure] = field(default_factory=list)
    rejected: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)


def ensure_medical_report(result: ExtractionResult) -> ExtractionResult:
    """Raise NotAMedicalReport when the service classified the text as non-radiology."""
    if result.is_valid_report is False:
        raise NotAMedicalReport(NOT_A_REPORT_MESSAGE)
    return result


class WorkflowController:
    """
    Session state plus transitions.

    The extraction client is created lazily from configuration on first use
    unless one is injected.
    """

    def __init__(
        self,
        client: Optional[BaseExtractionClient] = None,
        store: Optional[SessionStore] = None
    ):
        self._client = client
        self.store = store or SessionStore()

        self.view = AppView.INPUT
        self.status = Status.IDLE
        self.error: Optional[str] = None

        # Manual-mode form state
        self.key_id = ""
        self.order_id = ""
        self.input_text = ""
        self.current_extraction: Optional[ExtractionResult] = None

        self.last_batch: Optional[BatchSummary] = None

    @property
    def client(self) -> BaseExtractionClient:
        if self._client is None:
            self._client = create_client()
        return self._client

    async def close(self):
        """Release the client's loop-bound connections, if a client was created."""
        if self._client is not None:
            await self._client.close()

    # ------------------------------------------------------------------
    # Manual flow
    # ------------------------------------------------------------------

    def load_demo(self):
        self.key_id = batch_settings.DEMO_KEY_ID
        self.order_id = ""
        self.input_text = DEMO_REPORT
        self.error = None

    async def extract(self) -> bool:
        """
        Run extraction for the current form input.

        Returns:
            True when the controller moved to REVIEW
        """
        if not self.key_id.strip():
            self.error = MISSING_KEY_ID_MESSAGE
            return False
        if not self.input_text.strip():
            self.error = MISSING_TEXT_MESSAGE
            return False

        self.status = Status.LOADING
        self.error = None

        try:
            result = await self.client.extract(self.input_text)
            self.current_extraction = ensure_medical_report(result)

        except NotAMedicalReport as e:
            logger.info(f"Input for {self.key_id} rejected: not a radiology report")
            self.error = str(e)
            self.status = Status.ERROR
            return False
        except (ExtractionError, ConfigurationError) as e:
            logger.error(f"Manual extraction failed for {self.key_id}: {e}")
            self.error = EXTRACTION_FAILED_MESSAGE
            self.status = Status.ERROR
            return False
        except Exception as e:
            logger.error(f"Unexpected error extracting {self.key_id}: {e}", exc_info=True)
            self.error = EXTRACTION_FAILED_MESSAGE
            self.status = Status.ERROR
            return False

        self.status = Status.SUCCESS
        self.view = AppView.REVIEW
        return True

    def _store_current(self) -> bool:
        if self.current_extraction is None:
            return False
        self.store.append(new_session_record(
            key_id=self.key_id,
            order_id=self.order_id,
            raw_text=self.input_text,
            extraction=self.current_extraction,
        ))
        return True

    def _clear_form(self):
        self.key_id = ""
        self.order_id = ""
        self.input_text = ""
        self.current_extraction = None
        self.error = None

    def save_and_next(self):
        """Store the reviewed extraction and return to INPUT for the next report."""
        if not self._store_current():
            return
        self._clear_form()
        self.status = Status.IDLE
        self.view = AppView.INPUT

    def finish_session(self):
        """Store the reviewed extraction (if any) and go to SUMMARY."""
        self._store_current()
        self._clear_form()
        self.status = Status.IDLE
        self.view = AppView.SUMMARY

    def show_summary(self):
        self.view = AppView.SUMMARY

    def back_to_input(self):
        self.view = AppView.INPUT

    def reset_session(self, confirmed: bool) -> bool:
        """
        Clear every stored record. Irreversible, so the caller must pass
        confirmed=True after asking the user.
        """
        if not confirmed:
            return False
        self.store.reset()
        self._clear_form()
        self.last_batch = None
        self.status = Status.IDLE
        self.view = AppView.INPUT
        return True

    # ------------------------------------------------------------------
    # Batch flow
    # ------------------------------------------------------------------

    async def run_batch(
        self,
        csv_text: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> Optional[BatchSummary]:
        """
        Parse an uploaded CSV and extract every row.

        Returns:
            BatchSummary, or None when the upload itself was rejected
            (too many rows, no rows, or no usable backend)
        """
        self.error = None

        try:
            rows = parse_batch_csv(csv_text)
        except BatchUploadError as e:
            logger.warning(f"Batch upload rejected: {e}")
            self.error = str(e)
            self.status = Status.ERROR
            return None

        self.status = Status.BATCH_PROCESSING
        try:
            pipeline = BatchPipeline(self.client)
        except ConfigurationError as e:
            logger.error(f"Cannot start batch: {e}")
            self.error = str(e)
            self.status = Status.ERROR
            return None

        records = await pipeline.run(rows, on_progress=on_progress)
        self.store.append_many(records)

        self.last_batch = BatchSummary(
            total=len(rows),
            stored=len(records),
            failures=list(pipeline.failures),
            rejected=list(pipeline.rejected),
            skipped=list(pipeline.skipped),
        )
        self.status = Status.SUCCESS
        if records:
            self.view = AppView.SUMMARY
        return self.last_batch
