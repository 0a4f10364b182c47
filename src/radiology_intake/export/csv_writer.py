# ============================================================================
# src/radiology_intake/export/csv_writer.py
# ============================================================================
"""
CSV Export Writer

Renders session records into a pivoted CSV: fixed leading columns followed
by one column per distinct organ. Output starts with a UTF-8 byte-order mark
so spreadsheet tools detect the encoding.

    Key ID,Timestamp,Raw Report,Impression,Heart,Liver,Lungs
    "P-101","2026-10-17 09:30:00","...","...","","","[NORMAL] Clear: Lungs are clear."
"""

import csv
import io
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..config.batch_config import batch_settings
from ..core.models import Finding, SessionRecord

logger = logging.getLogger(__name__)

BOM = "\ufeff"
LEADING_COLUMNS = ("Key ID", "Timestamp", "Raw Report", "Impression")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
CELL_SEPARATOR = " | "


def collect_organs(records: Iterable[SessionRecord]) -> List[str]:
    """Distinct organ names across all findings, ordinal sort."""
    organs = {
        finding.organ
        for record in records
        for finding in record.extraction.findings
    }
    return sorted(organs)


def format_finding(finding: Finding) -> str:
    tag = "[ABNORMAL]" if finding.is_abnormal else "[NORMAL]"
    return f"{tag} {finding.label}: {finding.description}"


def format_organ_cell(findings: Sequence[Finding]) -> str:
    return CELL_SEPARATOR.join(format_finding(f) for f in findings)


def findings_for_organ(record: SessionRecord, organ: str) -> List[Finding]:
    return [f for f in record.extraction.findings if f.organ == organ]


def render_export_csv(records: Sequence[SessionRecord]) -> str:
    """
    Render records into the pivoted export CSV.

    Args:
        records: Session records in display order

    Returns:
        CSV text prefixed with a BOM, rows separated by "\\n"
    """
    organs = collect_organs(records)

    buffer = io.StringIO()
    header_writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    row_writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    header_writer.writerow([*LEADING_COLUMNS, *organs])

    for record in records:
        row_writer.writerow([
            record.key_id,
            record.created_at.strftime(TIMESTAMP_FORMAT),
            record.raw_text,
            record.extraction.impression or "",
            *(format_organ_cell(findings_for_organ(record, organ)) for organ in organs),
        ])

    logger.info(f"Rendered export with {len(records)} rows and {len(organs)} organ columns")
    return BOM + buffer.getvalue().removesuffix("\n")


def export_filename(now: Optional[datetime] = None) -> str:
    """radiology_data_export_<epoch-millis>.csv"""
    now = now or datetime.now()
    millis = round(now.timestamp() * 1000)
    return f"{batch_settings.EXPORT_FILENAME_PREFIX}_{millis}.csv"
