# ============================================================================
# src/radiology_intake/core/batch_pipeline.py
# ============================================================================
"""
Batch Extraction Pipeline

Drives parsed CSV rows through the extraction client one at a time:

    RawRow → skip empty text → extract → drop invalid reports → SessionRecord

Rows are processed strictly in input order with a single request in flight.
Row-level failures are recorded on the pipeline and never abort the batch,
so run() always returns after visiting every row exactly once.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .models import RawRow, SessionRecord, new_session_record
from ..extraction.base import BaseExtractionClient
from ..utils.exceptions import ExtractionError

logger = logging.getLogger(__name__)

# (completed, total)
ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RowFailure:
    """A row whose extraction call failed."""
    index: int
    key_id: str
    error_type: str
    message: str


class BatchPipeline:
    """
    Sequential batch runner.

    Usage:
        pipeline = BatchPipeline(client)
        records = await pipeline.run(rows, on_progress=lambda done, total: ...)
        pipeline.failures   # rows whose extraction failed
        pipeline.rejected   # indexes classified as non-radiology text
    """

    def __init__(self, client: BaseExtractionClient):
        self.client = client
        self.failures: List[RowFailure] = []
        self.rejected: List[int] = []
        self.skipped: List[int] = []

    async def run(
        self,
        rows: Sequence[RawRow],
        on_progress: Optional[ProgressCallback] = None
    ) -> List[SessionRecord]:
        """
        Process every row in order.

        Args:
            rows: Parsed upload rows
            on_progress: Called with (completed, total) after each row

        Returns:
            Records for rows that extracted successfully as valid reports,
            in input order
        """
        self.failures = []
        self.rejected = []
        self.skipped = []

        total = len(rows)
        records: List[SessionRecord] = []
        logger.info(f"Starting batch of {total} rows with {self.client.backend_type.value} backend")

        for index, row in enumerate(rows):
            record = await self._process_row(index, row)
            if record is not None:
                records.append(record)

            if on_progress is not None:
                on_progress(index + 1, total)

        logger.info(
            f"Batch complete: {len(records)} stored, {len(self.failures)} failed, "
            f"{len(self.rejected)} rejected, {len(self.skipped)} skipped"
        )
        return records

    async def _process_row(self, index: int, row: RawRow) -> Optional[SessionRecord]:
        if not row.report_text.strip():
            logger.debug(f"Row {index}: empty report text, skipping", extra={"row_index": index})
            self.skipped.append(index)
            return None

        try:
            result = await self.client.extract(row.report_text)

        except ExtractionError as e:
            logger.warning(
                f"Row {index}: extraction failed ({type(e).__name__}): {e}",
                extra={"row_index": index}
            )
            self._record_failure(index, row, e)
            return None
        except Exception as e:
            logger.error(
                f"Row {index}: unexpected extraction error: {e}",
                exc_info=True, extra={"row_index": index}
            )
            self._record_failure(index, row, e)
            return None

        if result.is_valid_report is False:
            logger.info(f"Row {index}: not a radiology report, dropped", extra={"row_index": index})
            self.rejected.append(index)
            return None

        return new_session_record(
            key_id=row.key_id or f"PAT-{index + 1}",
            order_id=row.order_id or f"ORD-{index + 1}",
            raw_text=row.report_text,
            extraction=result,
        )

    def _record_failure(self, index: int, row: RawRow, error: Exception):
        self.failures.append(RowFailure(
            index=index,
            key_id=row.key_id,
            error_type=type(error).__name__,
            message=str(error),
        ))
