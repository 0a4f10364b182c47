# ============================================================================
# src/radiology_intake/extraction/base.py
# ============================================================================
"""
Base Extraction Client Interface

Defines the adapter every extraction backend implements. Supported backends:
- gemini: Google Gemini structured output
- ollama: Ollama server (local models)
- azure: Azure OpenAI chat completions

Subclasses only perform the outbound request and return the raw payload
text. Timeout handling, JSON recovery and schema validation live here so all
backends fail the same way:
- ServiceUnavailable: transport failure or timeout
- MalformedResponse: empty payload or one that does not fit ExtractionResult
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from datetime import datetime
from enum import Enum
import asyncio
import logging
import json

from json_repair import repair_json
from pydantic import ValidationError

from ..core.models import ExtractionResult
from ..utils.exceptions import MalformedResponse, ServiceUnavailable


class BackendType(Enum):
    """Supported extraction backends."""
    GEMINI = "gemini"
    OLLAMA = "ollama"
    AZURE = "azure"


class BaseExtractionClient(ABC):
    """
    Abstract base class for extraction clients.

    All backends must implement:
    - _request(): Send one report, return the raw response text
    - health_check(): Verify backend is available
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        self.timeout = self.config.get('timeout', 120)
        self.temperature = self.config.get('temperature', 0.1)
        self.max_tokens = self.config.get('max_tokens', 4000)

        self._extraction_count = 0
        self._failure_count = 0
        self._total_extraction_time = 0.0

    @property
    @abstractmethod
    def backend_type(self) -> BackendType:
        """Return the backend type."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass

    @abstractmethod
    async def _request(self, text: str) -> Optional[str]:
        """
        Send one report to the service.

        Returns:
            Raw response text (may be None or empty)

        Raises:
            ServiceUnavailable: on transport failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the backend is available and ready.

        Returns:
            {
                "healthy": bool,
                "backend": str,
                "model": str,
                "details": str
            }
        """
        pass

    async def close(self):
        """
        Release connections bound to the running event loop.

        Callers that drive a client on a short-lived loop must await this
        before the loop closes. Backends without loop-bound resources keep
        this no-op.
        """
        pass

    async def extract(self, text: str) -> ExtractionResult:
        """
        Extract structured findings from one report.

        Args:
            text: Non-empty raw report text

        Returns:
            Validated ExtractionResult

        Raises:
            ValueError: text is empty
            ServiceUnavailable: transport failure or timeout
            MalformedResponse: missing or schema-violating payload
        """
        if not text or not text.strip():
            raise ValueError("Report text must not be empty")

        start_time = datetime.now()

        try:
            if self.timeout:
                raw = await asyncio.wait_for(self._request(text), timeout=self.timeout)
            else:
                raw = await self._request(text)
            result = self.parse_response(raw)

        except asyncio.TimeoutError:
            self._failure_count += 1
            self.logger.error(f"Extraction timed out after {self.timeout}s (model={self.model_name})")
            raise ServiceUnavailable(
                f"Extraction service did not respond within {self.timeout}s."
            ) from None
        except (ServiceUnavailable, MalformedResponse) as e:
            self._failure_count += 1
            self.logger.error(f"Extraction failed: {e}")
            raise

        duration = (datetime.now() - start_time).total_seconds()
        self._extraction_count += 1
        self._total_extraction_time += duration

        self.logger.info(
            f"Extracted {len(result.findings)} findings in {duration:.2f}s "
            f"(valid_report={result.is_valid_report})"
        )
        return result

    def parse_response(self, raw: Optional[str]) -> ExtractionResult:
        """Validate a raw payload into an ExtractionResult."""
        if raw is None or not raw.strip():
            raise MalformedResponse("No response from extraction service.")

        data = self.extract_json(raw)
        if data is None:
            raise MalformedResponse("Extraction service response is not a JSON object.")

        try:
            return ExtractionResult.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(
                f"Extraction service response does not match the expected shape "
                f"({e.error_count()} validation errors)."
            ) from e

    def extract_json(self, response_text: str) -> Optional[Dict]:
        """
        Extract JSON object from generated text.

        Models sometimes wrap JSON in prose or markdown fences, or emit
        slightly malformed JSON (single quotes, trailing commas). Falls back
        to json_repair before giving up. An object that never closes is
        treated as truncated and yields None rather than a repaired guess.
        """
        if not response_text or not response_text.strip():
            self.logger.warning("Empty response text, no JSON to extract")
            return None

        # Try 1: Direct parse of entire response
        try:
            parsed = json.loads(response_text.strip())
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        # Try 2: Extract JSON block by brace matching
        start_idx = response_text.find('{')
        if start_idx == -1:
            self.logger.warning("No JSON found in response")
            return None

        end_idx = self._find_object_end(response_text, start_idx)
        if end_idx is None:
            # Outer object never closes: output was cut off (token limit)
            self.logger.warning(f"Truncated JSON in response: {response_text[-200:]}")
            return None

        json_str = response_text[start_idx:end_idx + 1]

        try:
            parsed = json.loads(json_str)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        # Try 3: json_repair on extracted block
        try:
            repaired = repair_json(json_str, return_objects=True)
            if isinstance(repaired, dict) and repaired:
                self.logger.debug("json_repair fixed extracted JSON block")
                return repaired
        except (ValueError, TypeError) as e:
            self.logger.debug(f"json_repair failed on extracted block: {e}")

        self.logger.warning(f"Could not parse JSON from response: {response_text[:200]}...")
        return None

    @staticmethod
    def _find_object_end(text: str, start_idx: int) -> Optional[int]:
        """Index of the brace closing the object at start_idx, or None if unbalanced."""
        depth = 0
        in_string = False
        escaped = False
        for i in range(start_idx, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return i
        return None

    def get_statistics(self) -> Dict[str, Any]:
        """Get extraction statistics."""
        avg_time = (
            self._total_extraction_time / self._extraction_count
            if self._extraction_count > 0
            else 0.0
        )

        return {
            "backend": self.backend_type.value,
            "model": self.model_name,
            "extraction_count": self._extraction_count,
            "failure_count": self._failure_count,
            "total_extraction_time": self._total_extraction_time,
            "average_extraction_time": avg_time,
        }
