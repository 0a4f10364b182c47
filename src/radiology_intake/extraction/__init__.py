# ============================================================================
# src/radiology_intake/extraction/__init__.py
# ============================================================================
"""
Extraction Client Adapter

Backends for structured extraction of radiology reports.
"""

from .base import BaseExtractionClient, BackendType
from .client import create_client, clear_client_cache, DEFAULT_BACKEND
from .gemini_client import GeminiExtractionClient
from .ollama_client import OllamaExtractionClient
from .azure_client import AzureExtractionClient

__all__ = [
    "BaseExtractionClient",
    "BackendType",
    "create_client",
    "clear_client_cache",
    "DEFAULT_BACKEND",
    "GeminiExtractionClient",
    "OllamaExtractionClient",
    "AzureExtractionClient",
]
