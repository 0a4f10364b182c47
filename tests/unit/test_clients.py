# ============================================================================
# tests/unit/test_clients.py
# ============================================================================
"""
Tests for the extraction backends and client factory. Library clients are
mocked; no test touches the network.
"""

import aiohttp
import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from google.genai import errors as genai_errors

from radiology_intake.extraction import (
    AzureExtractionClient,
    BackendType,
    GeminiExtractionClient,
    OllamaExtractionClient,
    clear_client_cache,
    create_client,
)
from radiology_intake.extraction.prompts import RESPONSE_SCHEMA, SYSTEM_INSTRUCTION
from radiology_intake.utils.exceptions import (
    ConfigurationError,
    MalformedResponse,
    ServiceUnavailable,
)

BASE_CONFIG = {
    "backend": "gemini",
    "gemini_api_key": "test-key",
    "gemini_model": "gemini-2.5-flash",
    "ollama_host": "http://localhost:11434",
    "ollama_model": "medgemma",
    "azure_deployment": "gpt-4o",
    "azure_endpoint": "https://example.openai.azure.com",
    "azure_api_key": "azure-key",
    "azure_api_version": "2024-02-01",
    "max_tokens": 4000,
    "temperature": 0.1,
    "timeout": 5,
}


@pytest.fixture(autouse=True)
def isolated_factory():
    clear_client_cache()
    with patch("radiology_intake.extraction.client.get_config", return_value=dict(BASE_CONFIG)):
        yield
    clear_client_cache()


class FakeResponse:
    """Minimal aiohttp response usable as an async context manager."""

    def __init__(self, status, payload):
        self.status = status
        self._payload = payload

    async def json(self):
        return self._payload

    async def text(self):
        return str(self._payload)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


class TestFactory:

    @patch("radiology_intake.extraction.gemini_client.genai")
    def test_default_backend_is_gemini(self, mock_genai):
        client = create_client()

        assert isinstance(client, GeminiExtractionClient)
        assert client.backend_type is BackendType.GEMINI
        # API client is only built on first request
        mock_genai.Client.assert_not_called()

    def test_backend_override(self):
        client = create_client({"backend": "ollama"})

        assert isinstance(client, OllamaExtractionClient)
        assert client.model_name == "medgemma"

    def test_backend_name_case_insensitive(self):
        assert isinstance(create_client({"backend": "AZURE"}), AzureExtractionClient)

    def test_clients_are_cached(self):
        first = create_client({"backend": "ollama"})
        second = create_client({"backend": "ollama"})
        other = create_client({"backend": "ollama", "ollama_model": "other"})

        assert first is second
        assert other is not first

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError, match="Unknown backend"):
            create_client({"backend": "transformers"})

    def test_missing_gemini_key(self):
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            create_client({"backend": "gemini", "gemini_api_key": ""})

    def test_timeout_passed_through(self):
        client = create_client({"backend": "ollama", "timeout": 42})

        assert client.timeout == 42


class TestGeminiClient:

    @pytest.fixture
    def genai(self):
        with patch("radiology_intake.extraction.gemini_client.genai") as mock_genai:
            yield mock_genai

    @pytest.fixture
    def types(self):
        with patch("radiology_intake.extraction.gemini_client.types") as mock_types:
            yield mock_types

    @pytest.mark.asyncio
    async def test_extract(self, genai, types, lungs_payload):
        models = genai.Client.return_value.models
        models.generate_content.return_value = MagicMock(text=lungs_payload)
        client = GeminiExtractionClient(BASE_CONFIG)

        result = await client.extract("CHEST X-RAY: Clear lungs.")

        assert result.findings[0].organ == "Lungs"
        genai.Client.assert_called_once_with(api_key="test-key")
        types.GenerateContentConfig.assert_called_once_with(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=0.1,
            max_output_tokens=4000,
        )
        kwargs = models.generate_content.call_args[1]
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["config"] is types.GenerateContentConfig.return_value
        assert "CHEST X-RAY: Clear lungs." in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_api_error_is_service_unavailable(self, genai, types):
        models = genai.Client.return_value.models
        models.generate_content.side_effect = genai_errors.ServerError(
            503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}
        )
        client = GeminiExtractionClient(BASE_CONFIG)

        with pytest.raises(ServiceUnavailable):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_blocked_response_is_malformed(self, genai, types):
        genai.Client.return_value.models.generate_content.return_value = MagicMock(text=None)
        client = GeminiExtractionClient(BASE_CONFIG)

        with pytest.raises(MalformedResponse):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_health_check(self, genai):
        models = genai.Client.return_value.models
        models.get.return_value = MagicMock(display_name="Gemini 2.5 Flash")
        client = GeminiExtractionClient(BASE_CONFIG)

        status = await client.health_check()

        assert status["healthy"] is True
        models.get.assert_called_once_with(model="gemini-2.5-flash")

    @pytest.mark.asyncio
    async def test_health_check_failure(self, genai):
        genai.Client.return_value.models.get.side_effect = genai_errors.ClientError(
            403, {"error": {"code": 403, "message": "bad key", "status": "PERMISSION_DENIED"}}
        )
        client = GeminiExtractionClient(BASE_CONFIG)

        status = await client.health_check()

        assert status["healthy"] is False


class TestOllamaClient:

    @pytest.fixture
    def client(self):
        return OllamaExtractionClient(BASE_CONFIG)

    @pytest.mark.asyncio
    async def test_extract(self, client, lungs_payload):
        session = MagicMock()
        session.post.return_value = FakeResponse(200, {"response": lungs_payload, "eval_count": 10})
        client._get_session = AsyncMock(return_value=session)

        result = await client.extract("report text")

        assert result.impression == "Normal chest."
        url = session.post.call_args[0][0]
        body = session.post.call_args[1]["json"]
        assert url == "http://localhost:11434/api/generate"
        assert body["model"] == "medgemma"
        assert body["format"] == "json"
        assert body["stream"] is False
        assert "report text" in body["prompt"]

    @pytest.mark.asyncio
    async def test_http_error_status(self, client):
        session = MagicMock()
        session.post.return_value = FakeResponse(500, "model crashed")
        client._get_session = AsyncMock(return_value=session)

        with pytest.raises(ServiceUnavailable):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_connection_error(self, client):
        session = MagicMock()
        session.post.side_effect = aiohttp.ClientConnectionError("refused")
        client._get_session = AsyncMock(return_value=session)

        with pytest.raises(ServiceUnavailable):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_missing_response_field(self, client):
        session = MagicMock()
        session.post.return_value = FakeResponse(200, {"done": True})
        client._get_session = AsyncMock(return_value=session)

        with pytest.raises(MalformedResponse):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_health_check_model_missing(self, client):
        session = MagicMock()
        session.get.return_value = FakeResponse(200, {"models": [{"name": "llama3"}]})
        client._get_session = AsyncMock(return_value=session)

        status = await client.health_check()

        assert status["healthy"] is False
        assert "ollama pull medgemma" in status["details"]

    @pytest.mark.asyncio
    async def test_health_check_ok(self, client):
        session = MagicMock()
        session.get.return_value = FakeResponse(200, {"models": [{"name": "medgemma:latest"}]})
        client._get_session = AsyncMock(return_value=session)

        status = await client.health_check()

        assert status["healthy"] is True

    @pytest.mark.asyncio
    async def test_session_reused_within_loop(self, client):
        first = await client._get_session()
        second = await client._get_session()

        assert first is second
        await client.close()

    @pytest.mark.asyncio
    async def test_close_releases_session(self, client):
        session = await client._get_session()

        await client.close()

        assert session.closed
        assert client._session is None

    def test_statistics_include_host(self, client):
        assert client.get_statistics()["ollama_host"] == "http://localhost:11434"


class TestAzureClient:

    @pytest.fixture
    def azure(self):
        with patch("radiology_intake.extraction.azure_client.AzureOpenAI") as mock_cls:
            yield mock_cls

    @pytest.mark.asyncio
    async def test_extract(self, azure, lungs_payload):
        completions = azure.return_value.chat.completions
        completions.create.return_value = MagicMock(
            choices=[MagicMock(message=MagicMock(content=lungs_payload))]
        )
        client = AzureExtractionClient(BASE_CONFIG)

        result = await client.extract("report")

        assert result.findings[0].label == "Clear"
        kwargs = completions.create.call_args[1]
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        azure.assert_called_once_with(
            azure_endpoint="https://example.openai.azure.com",
            api_key="azure-key",
            api_version="2024-02-01",
        )

    @pytest.mark.asyncio
    async def test_api_error(self, azure):
        request = httpx.Request("POST", "https://example.openai.azure.com")
        azure.return_value.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        client = AzureExtractionClient(BASE_CONFIG)

        with pytest.raises(ServiceUnavailable):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_no_choices(self, azure):
        azure.return_value.chat.completions.create.return_value = MagicMock(choices=[])
        client = AzureExtractionClient(BASE_CONFIG)

        with pytest.raises(MalformedResponse):
            await client.extract("report")

    @pytest.mark.asyncio
    async def test_not_configured(self, azure):
        client = AzureExtractionClient({**BASE_CONFIG, "azure_api_key": ""})

        assert client.is_configured() is False
        status = await client.health_check()
        assert status["healthy"] is False
        azure.assert_not_called()
