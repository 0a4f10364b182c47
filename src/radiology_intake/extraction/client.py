# ============================================================================
# src/radiology_intake/extraction/client.py
# ============================================================================
"""
Extraction Client Factory

Provides a unified interface for creating extraction clients.
Supports multiple backends:
- gemini: Google Gemini structured output (default)
- ollama: Ollama server (local models)
- azure: Azure OpenAI chat completions

Usage:
    from radiology_intake.extraction import create_client

    client = create_client()                       # backend from .env
    client = create_client({'backend': 'ollama'})  # explicit override

    result = await client.extract(report_text)
"""

import logging
from typing import Dict, Any, Optional

from .base import BaseExtractionClient, BackendType
from .gemini_client import GeminiExtractionClient
from .ollama_client import OllamaExtractionClient
from .azure_client import AzureExtractionClient
from ..core.config import get_config
from ..utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = BackendType.GEMINI.value

# Singleton cache keyed by (backend, connection params) so HTTP sessions are
# reused across reports
_client_cache: Dict[tuple, BaseExtractionClient] = {}


def _cache_key(backend: str, config: Dict[str, Any]) -> tuple:
    if backend == BackendType.GEMINI.value:
        return (backend, config.get('gemini_model'), config.get('gemini_api_key'))
    if backend == BackendType.OLLAMA.value:
        return (backend, config.get('ollama_host'), config.get('ollama_model'))
    return (backend, config.get('azure_endpoint'), config.get('azure_deployment'))


def create_client(config: Optional[Dict[str, Any]] = None) -> BaseExtractionClient:
    """
    Factory function to create an extraction client.

    Configuration is loaded from the environment and merged with any passed
    config. Passed config values take precedence.

    Args:
        config: Optional overrides, e.g. {'backend': 'ollama', 'timeout': 30}

    Returns:
        Configured (possibly cached) extraction client

    Raises:
        ConfigurationError: Unknown backend or missing credentials
    """
    config = {**get_config(), **(config or {})}
    backend = (config.get('backend') or DEFAULT_BACKEND).lower()

    key = _cache_key(backend, config)
    if key in _client_cache:
        logger.debug(f"Reusing cached {backend} client")
        return _client_cache[key]

    if backend == BackendType.GEMINI.value:
        client = GeminiExtractionClient(config)
    elif backend == BackendType.OLLAMA.value:
        client = OllamaExtractionClient(config)
    elif backend == BackendType.AZURE.value:
        client = AzureExtractionClient(config)
    else:
        raise ConfigurationError(
            f"Unknown backend: {backend}. "
            f"Supported backends: {', '.join(b.value for b in BackendType)}"
        )

    _client_cache[key] = client
    logger.info(f"Created and cached {backend} client ({client.model_name})")
    return client


def clear_client_cache():
    """Drop cached clients (used after configuration reloads)."""
    _client_cache.clear()


__all__ = [
    "create_client",
    "clear_client_cache",
    "DEFAULT_BACKEND",
]
