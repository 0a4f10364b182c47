# ============================================================================
# ui/services/extraction_service.py
# ============================================================================
"""
Extraction Service

Interfaces between the Streamlit UI and the async radiology intake core.
Streamlit scripts are synchronous, so every coroutine is driven to
completion on a private event loop. Client connections are released on
that same loop before it closes.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from radiology_intake.core.workflow import BatchSummary, WorkflowController
from radiology_intake.extraction import create_client
from radiology_intake.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ExtractionService:
    """
    Service layer for extraction.

    Wraps WorkflowController coroutines for use in Streamlit UI.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _run(self, coro):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()

    async def _then_close(self, coro: Awaitable, close: Callable[[], Awaitable]):
        try:
            return await coro
        finally:
            await close()

    def extract(self, controller: WorkflowController) -> bool:
        """Run manual extraction for the controller's current input."""
        return self._run(self._then_close(controller.extract(), controller.close))

    def run_batch(
        self,
        controller: WorkflowController,
        csv_text: str,
        on_progress: Optional[Callable[[int, int], None]] = None
    ) -> Optional[BatchSummary]:
        """Process an uploaded CSV through the controller."""
        return self._run(self._then_close(
            controller.run_batch(csv_text, on_progress=on_progress),
            controller.close
        ))

    def health_check(self) -> Dict[str, Any]:
        """Backend availability for the sidebar."""
        try:
            client = create_client()
        except ConfigurationError as e:
            logger.warning(f"Extraction backend not configured: {e}")
            return {
                "healthy": False,
                "backend": "unconfigured",
                "model": "",
                "details": str(e)
            }
        return self._run(self._then_close(client.health_check(), client.close))
