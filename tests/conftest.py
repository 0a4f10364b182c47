# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import json
import pytest
from datetime import datetime
from typing import Any, Dict, Optional

from radiology_intake.core.models import ExtractionResult, Finding, new_session_record
from radiology_intake.extraction.base import BaseExtractionClient, BackendType


class FakeExtractionClient(BaseExtractionClient):
    """
    Scripted client: maps report text to a raw payload string or an
    exception instance. Unknown text gets `default`.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, default: Any = None):
        super().__init__({'timeout': 5})
        self.responses = responses or {}
        self.default = default
        self.calls = []
        self.close_count = 0

    @property
    def backend_type(self) -> BackendType:
        return BackendType.GEMINI

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def _request(self, text: str) -> Optional[str]:
        self.calls.append(text)
        response = self.responses.get(text, self.default)
        if isinstance(response, Exception):
            raise response
        return response

    async def health_check(self) -> Dict[str, Any]:
        return {"healthy": True, "backend": "gemini", "model": "fake-model", "details": "fake"}

    async def close(self):
        self.close_count += 1


def build_payload(findings=None, is_medical_report=True, impression="No acute disease.",
                  summary="Adult patient, routine study.") -> str:
    """Raw service payload using the wire key names."""
    data = {
        "is_medical_report": is_medical_report,
        "patient_summary": summary,
        "impression": impression,
        "findings": findings or [],
    }
    return json.dumps(data)


def wire_finding(organ, label, description, present=True, is_abnormal=False, details=None) -> dict:
    finding = {
        "organ": organ,
        "finding_label": label,
        "finding_description": description,
        "present": present,
        "is_abnormal": is_abnormal,
    }
    if details is not None:
        finding["details"] = details
    return finding


@pytest.fixture
def sample_radiology_text():
    """Sample radiology report text"""
    return """
    RADIOLOGY REPORT

    Examination: Chest X-Ray PA and Lateral

    CLINICAL INDICATION: Cough

    FINDINGS:
    The lungs are clear without focal consolidation, effusion, or pneumothorax.
    The cardiac silhouette is normal in size and contour.

    IMPRESSION:
    Normal chest radiograph.
    """


@pytest.fixture
def payload():
    """Factory for raw service payloads"""
    return build_payload


@pytest.fixture
def finding_dict():
    """Factory for wire-format finding dicts"""
    return wire_finding


@pytest.fixture
def lungs_payload():
    """One normal Lungs finding"""
    return build_payload(
        findings=[wire_finding("Lungs", "Clear", "Lungs are clear.")],
        impression="Normal chest.",
    )


@pytest.fixture
def not_a_report_payload():
    return build_payload(findings=[], is_medical_report=False, impression=None, summary=None)


@pytest.fixture
def fake_client():
    """Factory for scripted extraction clients"""
    return FakeExtractionClient


@pytest.fixture
def sample_batch_csv():
    """Upload with a header, two quoted reports and one plain report"""
    return (
        "PatientID,OrderID,Report_Text\n"
        'P-101,ORD-501,"CHEST X-RAY: Clear lungs."\n'
        'P-102,ORD-502,"CT ABDOMEN: Liver cyst, 2 cm, ""benign"" appearing."\n'
        "P-103,ORD-503,Knee effusion\n"
    )


@pytest.fixture
def make_record():
    """Factory for session records from (organ, label, description, is_abnormal) tuples"""
    def _make(key_id="P-1", findings=(), impression="Impression", raw_text="Report text",
              created_at=datetime(2026, 1, 2, 3, 4, 5)):
        extraction = ExtractionResult(
            is_valid_report=True,
            impression=impression,
            findings=tuple(
                Finding(
                    organ=organ,
                    label=label,
                    description=description,
                    present=True,
                    is_abnormal=is_abnormal,
                )
                for organ, label, description, is_abnormal in findings
            ),
        )
        return new_session_record(
            key_id=key_id,
            order_id=f"ORD-{key_id}",
            raw_text=raw_text,
            extraction=extraction,
            created_at=created_at,
        )
    return _make
