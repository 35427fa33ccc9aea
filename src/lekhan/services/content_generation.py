from __future__ import annotations

"""Backend orchestration for report, summary, recommendation and block text.

Only the full-report path has a template fallback: any backend failure there
is absorbed and the deterministic document from ``fallback_report`` is
returned. Every other operation surfaces the failure as ``GenerationError``.
Cancellation is never absorbed.
"""

from datetime import date
from typing import Callable, Optional
import logging
import time

from ..domain.errors import GenerationError
from ..domain.report_models import BlockContext, EventRecord
from ..observability.metrics import REPORT_FALLBACKS, observe_generation
from . import prompt_builder
from .fallback_report import build_fallback_report
from .llm_backend import GenerativeBackend


logger = logging.getLogger(__name__)
LOG = logging.getLogger("lekhan.llm")

CONNECTIVITY_PROBE = "Test connection. Respond with 'AI Service Connected Successfully'"
CONNECTIVITY_MARKER = "Connected Successfully"


class ContentGenerationService:
    def __init__(self, backend: GenerativeBackend, today: Optional[Callable[[], date]] = None) -> None:
        self._backend = backend
        self._today = today or date.today

    async def _generate(self, operation: str, prompt: str, block_type: Optional[str] = None) -> str:
        """Single backend attempt; failures become ``GenerationError``."""
        start = time.perf_counter()
        try:
            raw = await self._backend.generate(prompt)
        except Exception as exc:
            observe_generation(operation, "error", time.perf_counter() - start)
            LOG.warning("llm_generation_failed", extra={"operation": operation, "err": str(exc)})
            raise GenerationError(operation, str(exc) or exc.__class__.__name__, block_type=block_type) from exc
        text = (raw or "").strip()
        if not text:
            observe_generation(operation, "empty", time.perf_counter() - start)
            raise GenerationError(operation, "llm_empty_response", block_type=block_type)
        observe_generation(operation, "success", time.perf_counter() - start)
        return text

    async def generate_report_content(self, event: EventRecord) -> str:
        prompt = prompt_builder.build_report_prompt(event)
        try:
            text = await self._generate("report", prompt)
            LOG.info("report_generated", extra={"title": event.title})
            return text
        except GenerationError as exc:
            logger.warning("AI report generation failed (%s); using template fallback", exc)
            REPORT_FALLBACKS.inc()
            return build_fallback_report(event, today=self._today())

    async def generate_event_summary(self, event: EventRecord) -> str:
        return await self._generate("summary", prompt_builder.build_summary_prompt(event))

    async def generate_recommendations(self, event: EventRecord) -> str:
        return await self._generate("recommendations", prompt_builder.build_recommendations_prompt(event))

    async def generate_block_content(self, block_type: str, context: BlockContext) -> str:
        prompt = prompt_builder.build_block_prompt(block_type, context)
        return await self._generate("block_content", prompt, block_type=block_type)

    async def generate_section_suggestions(self, section_type: str, event: EventRecord) -> str:
        prompt = prompt_builder.build_section_suggestions_prompt(section_type, event)
        return await self._generate("section_suggestions", prompt, block_type=section_type)

    async def generate_chat_reply(self, prompt: str) -> str:
        return await self._generate("chat", prompt)

    async def test_backend_connectivity(self) -> bool:
        try:
            text = await self._backend.generate(CONNECTIVITY_PROBE)
        except Exception as exc:
            logger.warning("AI service connection test failed: %s", exc)
            return False
        return CONNECTIVITY_MARKER in (text or "")
