# ============================================================================
# tests/unit/test_extraction_service.py
# ============================================================================
"""
Tests for the Streamlit-facing extraction service. Each call runs on its
own event loop, so client connections must be released before it closes.
"""

import asyncio
import pytest
from unittest.mock import patch

from radiology_intake.core.workflow import AppView, WorkflowController
from radiology_intake.extraction import OllamaExtractionClient
from radiology_intake.utils.exceptions import ConfigurationError
from ui.services.extraction_service import ExtractionService


@pytest.fixture
def service():
    yield ExtractionService()
    asyncio.set_event_loop(None)


class TestExtractionService:

    def test_singleton(self, service):
        assert ExtractionService() is service

    def test_ollama_sessions_closed_on_every_loop(self, service):
        client = OllamaExtractionClient({"ollama_host": "http://localhost:11434"})

        sessions = [
            service._run(service._then_close(client._get_session(), client.close))
            for _ in range(3)
        ]

        assert len({id(s) for s in sessions}) == 3
        assert [s.closed for s in sessions] == [True, True, True]

    def test_extract_closes_client(self, service, fake_client, lungs_payload):
        client = fake_client(default=lungs_payload)
        controller = WorkflowController(client=client)
        controller.load_demo()

        assert service.extract(controller) is True
        assert controller.view is AppView.REVIEW
        assert client.close_count == 1

    def test_client_closed_when_extraction_raises(self, service, fake_client):
        client = fake_client()
        controller = WorkflowController(client=client)

        async def broken():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            service._run(service._then_close(broken(), controller.close))
        assert client.close_count == 1

    def test_run_batch_closes_client(self, service, fake_client, lungs_payload, sample_batch_csv):
        client = fake_client(default=lungs_payload)
        controller = WorkflowController(client=client)

        summary = service.run_batch(controller, sample_batch_csv)

        assert summary.stored == 3
        assert client.close_count == 1

    def test_health_check_closes_client(self, service, fake_client):
        client = fake_client()

        with patch("ui.services.extraction_service.create_client", return_value=client):
            status = service.health_check()

        assert status["healthy"] is True
        assert client.close_count == 1

    def test_health_check_unconfigured(self, service):
        with patch(
            "ui.services.extraction_service.create_client",
            side_effect=ConfigurationError("Missing GEMINI_API_KEY")
        ):
            status = service.health_check()

        assert status["healthy"] is False
        assert status["backend"] == "unconfigured"
