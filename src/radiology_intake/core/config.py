# ============================================================================
# src/radiology_intake/core/config.py
# ============================================================================
"""
Centralized Configuration Management

Loads extraction backend configuration from environment variables (.env file)
with sensible defaults. Clients receive the resulting dict, optionally
overridden by explicitly passed values.

Usage:
    from radiology_intake.core.config import get_config, Config

    # Get full config dict
    config = get_config()

    # Or use Config class for attribute access
    cfg = Config()
    print(cfg.backend)
"""

import os
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field, asdict
from functools import lru_cache

from dotenv import load_dotenv


def _load_dotenv() -> bool:
    """Load .env file if it exists."""
    # Project root first, then the current working directory
    env_path = Path(__file__).parent.parent.parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        return True

    cwd_env = Path.cwd() / '.env'
    if cwd_env.exists():
        load_dotenv(cwd_env)
        return True

    return False


def _get_int(key: str, default: int = 0) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float = 0.0) -> float:
    """Get float from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    """
    Configuration container with attribute access.

    All values are loaded from environment variables with defaults.
    """

    # Extraction backend: gemini | ollama | azure
    backend: str = field(default_factory=lambda: os.getenv('BACKEND', 'gemini'))

    # Gemini (API_KEY kept as a fallback name)
    gemini_api_key: str = field(
        default_factory=lambda: os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY', '')
    )
    gemini_model: str = field(default_factory=lambda: os.getenv('GEMINI_MODEL', 'gemini-2.5-flash'))

    # Ollama
    ollama_host: str = field(default_factory=lambda: os.getenv('OLLAMA_HOST', 'http://localhost:11434'))
    ollama_model: str = field(default_factory=lambda: os.getenv('OLLAMA_MODEL', 'MedAIBase/MedGemma1.5:4b-it-q8_0'))

    # Azure OpenAI
    azure_deployment: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_CHAT_MODEL_DEPLOYMENT', 'gpt-4o'))
    azure_endpoint: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_ENDPOINT', ''))
    azure_api_key: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_API_KEY', ''))
    azure_api_version: str = field(default_factory=lambda: os.getenv('AZURE_OPENAI_API_VERSION', '2024-02-01'))

    # Generation
    max_tokens: int = field(default_factory=lambda: _get_int('MAX_TOKENS', 4000))
    temperature: float = field(default_factory=lambda: _get_float('TEMPERATURE', 0.1))

    # Seconds before a single extraction call is abandoned as unavailable
    timeout: int = field(default_factory=lambda: _get_int('EXTRACTION_TIMEOUT', 120))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for passing to components."""
        return asdict(self)


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """
    Get configuration dictionary.

    Cached for performance - call once and pass to components.
    """
    _load_dotenv()
    return Config().to_dict()


def reload_config() -> Dict[str, Any]:
    """Reload configuration from environment (clears cache)."""
    get_config.cache_clear()
    return get_config()
