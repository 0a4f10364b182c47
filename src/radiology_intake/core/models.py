# ============================================================================
# src/radiology_intake/core/models.py
# ============================================================================
"""
Data Model
- RawRow: one parsed CSV upload row
- Finding / ExtractionResult: structured output of the extraction service
- SessionRecord: an accepted extraction held in the session store

Field names follow Python conventions; the extraction service's JSON keys
(finding_label, is_medical_report, patient_summary, ...) are accepted as
aliases so payloads validate directly into these models.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class RawRow:
    key_id: str = ""
    order_id: str = ""
    report_text: str = ""


class Finding(BaseModel):
    """One organ-level observation extracted from a report."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    organ: str = Field(description="The organ or anatomical region.")
    label: str = Field(
        alias="finding_label",
        description="Common medical name for the finding."
    )
    description: str = Field(
        alias="finding_description",
        description="The literal text or summarized finding from the report."
    )
    present: bool = Field(
        description="True if the finding exists. False if it is explicitly negated."
    )
    is_abnormal: bool = Field(description="True if this is an abnormal medical finding.")
    details: Optional[str] = Field(
        default=None,
        description="Extra context like location, size, or severity."
    )


class ExtractionResult(BaseModel):
    """Structured result produced once per report text. Immutable."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    is_valid_report: Optional[bool] = Field(default=None, alias="is_medical_report")
    summary: Optional[str] = Field(default=None, alias="patient_summary")
    impression: Optional[str] = None
    findings: Tuple[Finding, ...]

    @property
    def abnormal_findings(self) -> Tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.is_abnormal)

    def to_wire(self) -> dict:
        """Dump using the extraction service's key names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


@dataclass(frozen=True)
class SessionRecord:
    key_id: str
    order_id: str
    raw_text: str
    extraction: ExtractionResult
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)


def new_session_record(
    key_id: str,
    order_id: str,
    raw_text: str,
    extraction: ExtractionResult,
    created_at: Optional[datetime] = None
) -> SessionRecord:
    """Build a record with a fresh id and the current (or given) timestamp."""
    return SessionRecord(
        key_id=key_id,
        order_id=order_id,
        raw_text=raw_text,
        extraction=extraction,
        created_at=created_at or datetime.now(),
    )
