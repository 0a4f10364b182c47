# ============================================================================
# src/radiology_intake/ingestion/csv_parser.py
# ============================================================================
"""
CSV Row Parser

Turns uploaded batch text (PatientID,OrderID,Report_Text) into RawRow
entries. The first non-blank line is always treated as the header.

Fields are tokenized with a small state machine so quoted report text may
contain commas and doubled quotes:

    P-101,ORD-501,"Liver: 2 cm lesion, ""likely"" cyst."
    -> ["P-101", "ORD-501", 'Liver: 2 cm lesion, "likely" cyst.']
"""

import logging
from enum import Enum
from typing import List, Optional

from ..config.batch_config import batch_settings
from ..core.models import RawRow
from ..utils.exceptions import EmptyBatch, TooManyRecords

logger = logging.getLogger(__name__)

DELIMITER = ","
QUOTE = '"'


class _State(Enum):
    FIELD_START = "field_start"
    UNQUOTED = "unquoted"
    QUOTED = "quoted"
    QUOTE_IN_QUOTED = "quote_in_quoted"  # saw a quote inside a quoted field
    AFTER_QUOTED = "after_quoted"


def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line into fields.

    Quoted fields keep their inner text verbatim (with "" unescaped);
    unquoted fields are trimmed. Text trailing a closing quote before the
    next delimiter is appended rather than rejected.
    """
    fields: List[str] = []
    buf: List[str] = []
    quoted = False
    state = _State.FIELD_START

    def emit():
        value = "".join(buf)
        fields.append(value if quoted else value.strip())

    for ch in line:
        if state is _State.QUOTED:
            if ch == QUOTE:
                state = _State.QUOTE_IN_QUOTED
            else:
                buf.append(ch)

        elif state is _State.QUOTE_IN_QUOTED:
            if ch == QUOTE:
                buf.append(QUOTE)
                state = _State.QUOTED
            elif ch == DELIMITER:
                emit()
                buf, quoted, state = [], False, _State.FIELD_START
            elif not ch.isspace():
                buf.append(ch)
                state = _State.AFTER_QUOTED
            else:
                state = _State.AFTER_QUOTED

        elif state is _State.FIELD_START:
            if ch == QUOTE:
                quoted = True
                state = _State.QUOTED
            elif ch == DELIMITER:
                emit()
                buf, quoted = [], False
            elif not ch.isspace():
                buf.append(ch)
                state = _State.UNQUOTED

        elif state is _State.UNQUOTED:
            if ch == DELIMITER:
                emit()
                buf, quoted, state = [], False, _State.FIELD_START
            else:
                buf.append(ch)

        else:  # AFTER_QUOTED
            if ch == DELIMITER:
                emit()
                buf, quoted, state = [], False, _State.FIELD_START
            elif not ch.isspace():
                buf.append(ch)

    if state is _State.QUOTED:
        logger.debug(f"Unterminated quote in line: {line[:80]!r}")
    emit()
    return fields


def _split_lines(text: str) -> List[str]:
    text = text.lstrip("\ufeff")
    lines = text.replace("\r\n", "\n").split("\n")
    return [line.rstrip("\r") for line in lines if line.strip()]


def parse_batch_csv(text: str, max_rows: Optional[int] = None) -> List[RawRow]:
    """
    Parse uploaded CSV text into ordered RawRow entries.

    Args:
        text: Full uploaded file content
        max_rows: Row limit (defaults to MAX_BATCH_ROWS)

    Returns:
        Rows in file order; missing fields are empty strings

    Raises:
        TooManyRecords: more than max_rows data rows
        EmptyBatch: no data rows after the header
    """
    limit = max_rows if max_rows is not None else batch_settings.MAX_BATCH_ROWS

    lines = _split_lines(text)
    rows: List[RawRow] = []

    for position, line in enumerate(lines[1:], start=1):
        tokens = split_csv_line(line)
        if not any(tokens):
            logger.debug(f"Dropping malformed data line {position}")
            continue

        padded = (tokens + ["", "", ""])[:3]
        rows.append(RawRow(key_id=padded[0], order_id=padded[1], report_text=padded[2]))

    if len(rows) > limit:
        raise TooManyRecords(len(rows), limit)

    if not rows:
        raise EmptyBatch()

    logger.info(f"Parsed {len(rows)} rows from uploaded CSV")
    return rows
