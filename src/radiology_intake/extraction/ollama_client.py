# ============================================================================
# src/radiology_intake/extraction/ollama_client.py
# ============================================================================
"""
Ollama Extraction Client

Uses a local Ollama server for extraction. Ollama handles model management
and quantization and exposes a simple HTTP API.

Setup:
    1. Install Ollama: https://ollama.ai
    2. Pull model: ollama pull MedAIBase/MedGemma1.5:4b-it-q8_0
    3. Start server: ollama serve (or it runs automatically)
"""

import aiohttp
import asyncio
from typing import Dict, Any, Optional

from .base import BaseExtractionClient, BackendType
from .prompts import build_json_prompt
from ..utils.exceptions import ServiceUnavailable


DEFAULT_OLLAMA_MODEL = "MedAIBase/MedGemma1.5:4b-it-q8_0"


class OllamaExtractionClient(BaseExtractionClient):
    """
    Ollama-based extraction client.

    Config options:
        ollama_host: Ollama server URL (default: http://localhost:11434)
        ollama_model: Model name (default: MedAIBase/MedGemma1.5:4b-it-q8_0)
        max_tokens: Max tokens to generate (default: 4000)
        temperature: Sampling temperature (default: 0.1)
        timeout: Per-extraction timeout in seconds (default: 120)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.host = self.config.get('ollama_host', 'http://localhost:11434').rstrip('/')
        self._model_name = self.config.get('ollama_model', DEFAULT_OLLAMA_MODEL)

        # HTTP session (created lazily, tied to event loop)
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

        self.logger.info(f"Initialized Ollama client: {self.host} / {self._model_name}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OLLAMA

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for current event loop."""
        current_loop = asyncio.get_running_loop()

        # Streamlit reruns drive each batch on a fresh loop
        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed:
                if self._session_loop is not None and not self._session_loop.is_closed():
                    await self._session.close()

            timeout = aiohttp.ClientTimeout(total=None, sock_connect=30)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._session_loop = current_loop

        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def health_check(self) -> Dict[str, Any]:
        """Check if Ollama server is running and model is available."""
        try:
            session = await self._get_session()

            async with session.get(f"{self.host}/api/tags") as response:
                if response.status != 200:
                    return {
                        "healthy": False,
                        "backend": "ollama",
                        "model": self._model_name,
                        "details": f"Ollama server returned status {response.status}"
                    }

                data = await response.json()
                models = [m.get('name', '') for m in data.get('models', [])]

                if not any(self._model_name in m for m in models):
                    return {
                        "healthy": False,
                        "backend": "ollama",
                        "model": self._model_name,
                        "details": f"Model not found. Available: {models}. Run: ollama pull {self._model_name}"
                    }

                return {
                    "healthy": True,
                    "backend": "ollama",
                    "model": self._model_name,
                    "details": "Ollama server running and model available"
                }

        except aiohttp.ClientError as e:
            return {
                "healthy": False,
                "backend": "ollama",
                "model": self._model_name,
                "details": f"Cannot connect to Ollama at {self.host}: {e}. Is it running? Try: ollama serve"
            }

    async def _request(self, text: str) -> Optional[str]:
        """Run one JSON-mode generation for the report."""
        payload = {
            "model": self._model_name,
            "prompt": build_json_prompt(text),
            "stream": False,
            # Ollama constrains output to valid JSON
            "format": "json",
            "options": {
                "num_predict": self.max_tokens,
                "temperature": self.temperature,
            }
        }

        try:
            session = await self._get_session()
            async with session.post(f"{self.host}/api/generate", json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise ServiceUnavailable(f"Ollama error ({response.status}): {error_text[:200]}")
                data = await response.json()

        except aiohttp.ClientError as e:
            raise ServiceUnavailable(
                f"Cannot reach Ollama at {self.host}: {e}"
            ) from e

        self.logger.debug(
            f"Ollama generated {data.get('eval_count', 0)} tokens "
            f"for {data.get('prompt_eval_count', 0)} prompt tokens"
        )
        return data.get('response')

    def get_statistics(self) -> Dict[str, Any]:
        stats = super().get_statistics()
        stats["ollama_host"] = self.host
        return stats
