# ============================================================================
# src/radiology_intake/extraction/azure_client.py
# ============================================================================
"""
Azure OpenAI Extraction Client

Sends the report to an Azure OpenAI chat deployment in JSON object mode.
The openai client is synchronous, so calls run in the default executor.

Usage:
    client = AzureExtractionClient(config)
    result = await client.extract(report_text)
"""

import asyncio
from typing import Dict, Any, Optional

import openai
from openai import AzureOpenAI

from .base import BaseExtractionClient, BackendType
from .prompts import SYSTEM_INSTRUCTION, JSON_SHAPE, build_user_prompt
from ..utils.exceptions import ConfigurationError, ServiceUnavailable


class AzureExtractionClient(BaseExtractionClient):
    """Azure OpenAI chat-completions extraction client."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self._client: Optional[AzureOpenAI] = None

        self.azure_endpoint = self.config.get('azure_endpoint', '')
        self.azure_api_key = self.config.get('azure_api_key', '')
        self.azure_deployment = self.config.get('azure_deployment', 'gpt-4o')
        self.azure_api_version = self.config.get('azure_api_version', '2024-02-01')

        if not self.is_configured():
            self.logger.warning(
                "Azure OpenAI credentials not configured. "
                "Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
            )

    @property
    def backend_type(self) -> BackendType:
        return BackendType.AZURE

    @property
    def model_name(self) -> str:
        return self.azure_deployment

    def is_configured(self) -> bool:
        return bool(self.azure_endpoint and self.azure_api_key and self.azure_deployment)

    @property
    def client(self) -> AzureOpenAI:
        """Lazy load Azure OpenAI client."""
        if self._client is None:
            if not self.is_configured():
                raise ConfigurationError("Azure OpenAI credentials not configured")
            self._client = AzureOpenAI(
                azure_endpoint=self.azure_endpoint,
                api_key=self.azure_api_key,
                api_version=self.azure_api_version
            )
            self.logger.info(
                f"Azure OpenAI client initialized: endpoint={self.azure_endpoint}, "
                f"deployment={self.azure_deployment}"
            )
        return self._client

    def _complete(self, text: str) -> Optional[str]:
        response = self.client.chat.completions.create(
            model=self.azure_deployment,
            messages=[
                {
                    "role": "system",
                    "content": f"{SYSTEM_INSTRUCTION}\nRespond with a JSON object of this shape:\n{JSON_SHAPE}"
                },
                {"role": "user", "content": build_user_prompt(text)},
            ],
            response_format={"type": "json_object"},
            max_tokens=self.max_tokens,
            temperature=self.temperature
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def _request(self, text: str) -> Optional[str]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._complete, text)
        except openai.APIError as e:
            raise ServiceUnavailable(f"Azure OpenAI request failed: {e}") from e

    async def health_check(self) -> Dict[str, Any]:
        if not self.is_configured():
            return {
                "healthy": False,
                "backend": "azure",
                "model": self.azure_deployment,
                "details": "AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY not set"
            }

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.client.models.list)
        except openai.APIError as e:
            return {
                "healthy": False,
                "backend": "azure",
                "model": self.azure_deployment,
                "details": f"Azure OpenAI unreachable: {e}"
            }

        return {
            "healthy": True,
            "backend": "azure",
            "model": self.azure_deployment,
            "details": f"Connected to {self.azure_endpoint}"
        }
