# ============================================================================
# src/radiology_intake/extraction/gemini_client.py
# ============================================================================
"""
Gemini Extraction Client

Default backend. Uses Gemini structured output (response_schema) so the
service itself is constrained to the ExtractionResult wire shape; the base
class still validates the payload.

Setup:
    export GEMINI_API_KEY=...
"""

import asyncio
from typing import Dict, Any, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .base import BaseExtractionClient, BackendType
from .prompts import SYSTEM_INSTRUCTION, RESPONSE_SCHEMA, build_user_prompt
from ..utils.exceptions import ConfigurationError, ServiceUnavailable


DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class GeminiExtractionClient(BaseExtractionClient):
    """
    Google Gemini extraction client.

    Config options:
        gemini_api_key: API key (required)
        gemini_model: Model name (default: gemini-2.5-flash)
        max_tokens / temperature / timeout: see BaseExtractionClient
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.api_key = self.config.get('gemini_api_key', '')
        self._model_name = self.config.get('gemini_model', DEFAULT_GEMINI_MODEL)
        self._client = None

        if not self.api_key:
            raise ConfigurationError(
                "Missing GEMINI_API_KEY. Please set it as an environment variable."
            )

        self.logger.info(f"Initialized Gemini client: {self._model_name}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.GEMINI

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def client(self):
        """Lazy load the API client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _generation_config(self):
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )

    def _generate(self, prompt: str):
        return self.client.models.generate_content(
            model=self._model_name,
            contents=prompt,
            config=self._generation_config(),
        )

    async def _request(self, text: str) -> Optional[str]:
        # Sync call in the executor: the UI drives each request on a fresh event loop
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, self._generate, build_user_prompt(text))
        except genai_errors.APIError as e:
            raise ServiceUnavailable(f"Gemini request failed: {e}") from e

        # None when the candidate was blocked or carries no text parts
        text_out = response.text
        if not text_out:
            self.logger.warning("Gemini returned no text")
            return None
        return text_out

    async def health_check(self) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        try:
            info = await loop.run_in_executor(
                None, lambda: self.client.models.get(model=self._model_name)
            )
        except genai_errors.APIError as e:
            return {
                "healthy": False,
                "backend": "gemini",
                "model": self._model_name,
                "details": f"Gemini unreachable: {e}"
            }

        return {
            "healthy": True,
            "backend": "gemini",
            "model": self._model_name,
            "details": f"Model available: {info.display_name}"
        }
