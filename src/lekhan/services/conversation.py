from __future__ import annotations

from datetime import timedelta
from typing import List, Optional
import logging
import time
import uuid

from ..config import EngineSettings
from ..domain.chat_models import ChatReply, ChatTurn, ChatTurnMetadata, SessionSummary
from ..domain.errors import PersistenceWarning, ValidationError
from ..domain.report_models import EventRecord
from ..infrastructure.message_store import MessageStore, now_utc
from ..infrastructure.report_repository import EventRecordLookup
from ..observability.metrics import PERSISTENCE_FAILURES
from .content_generation import ContentGenerationService
from .prompt_builder import build_contextual_chat_prompt


logger = logging.getLogger(__name__)

# Mongo stores timestamps at millisecond resolution.
_MIN_TURN_GAP = timedelta(milliseconds=1)


def new_session_id() -> str:
    return uuid.uuid4().hex


class ConversationSessionManager:
    """Per-session assistant flow: windowed history, generation and persistence.

    Sessions are implicit: a session exists as long as at least one turn is
    stored under ``(owner_id, session_id)``.
    """

    def __init__(
        self,
        generation: ContentGenerationService,
        store: MessageStore,
        reports: EventRecordLookup,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._generation = generation
        self._store = store
        self._reports = reports
        self._settings = settings or EngineSettings()

    async def _load_history(self, owner_id: str, session_id: str) -> List[ChatTurn]:
        try:
            recent = await self._store.query_recent(owner_id, session_id, self._settings.history_turns)
        except Exception:
            logger.exception("Failed to load history for session %s; continuing without context", session_id)
            return []
        # Stores return newest first; prompts need oldest first.
        return list(reversed(recent))

    async def _load_report(self, report_context_id: Optional[str]) -> Optional[EventRecord]:
        if not report_context_id:
            return None
        try:
            report = await self._reports.by_id(report_context_id)
        except Exception as exc:
            logger.warning("Report context %s unavailable: %s", report_context_id, exc)
            return None
        if report is None:
            logger.info("Report context %s not found; answering without it", report_context_id)
        return report

    async def _persist(self, user_turn: ChatTurn, assistant_turn: ChatTurn) -> Optional[PersistenceWarning]:
        try:
            append_exchange = getattr(self._store, "append_exchange", None)
            if append_exchange is not None:
                await append_exchange(user_turn, assistant_turn)
            else:
                await self._store.append(user_turn)
                await self._store.append(assistant_turn)
        except Exception as exc:
            warning = PersistenceWarning(
                f"chat history for session {user_turn.session_id} was not saved: {exc}"
            )
            logger.warning("%s", warning)
            PERSISTENCE_FAILURES.inc()
            return warning
        return None

    async def send_message(
        self,
        owner_id: str,
        user_message: str,
        session_id: Optional[str] = None,
        report_context_id: Optional[str] = None,
    ) -> ChatReply:
        if not user_message or not user_message.strip():
            raise ValidationError("Message is required")
        session_id = session_id or new_session_id()
        received_at = now_utc()

        history = await self._load_history(owner_id, session_id)
        report = await self._load_report(report_context_id)
        prompt = build_contextual_chat_prompt(user_message, history, report)

        dispatched = time.perf_counter()
        text = await self._generation.generate_chat_reply(prompt)
        latency_ms = int((time.perf_counter() - dispatched) * 1000)

        metadata = ChatTurnMetadata(report_context_id=report_context_id, latency_ms=latency_ms)
        user_turn = ChatTurn(
            message_id=uuid.uuid4().hex,
            session_id=session_id,
            owner_id=owner_id,
            role="user",
            content=user_message,
            timestamp=received_at,
            metadata=metadata,
        )
        assistant_turn = ChatTurn(
            message_id=uuid.uuid4().hex,
            session_id=session_id,
            owner_id=owner_id,
            role="assistant",
            content=text,
            timestamp=max(now_utc(), received_at + _MIN_TURN_GAP),
            metadata=metadata,
        )
        warning = await self._persist(user_turn, assistant_turn)
        if warning is not None:
            return ChatReply(text=text, session_id=session_id, persisted=False, warnings=[str(warning)])
        return ChatReply(text=text, session_id=session_id)

    async def list_sessions(self, owner_id: str) -> List[SessionSummary]:
        return await self._store.list_sessions_for(
            owner_id,
            limit=self._settings.session_list_limit,
            preview_length=self._settings.preview_chars,
        )

    async def get_session_messages(self, owner_id: str, session_id: str) -> List[ChatTurn]:
        return await self._store.query_all(owner_id, session_id)

    async def delete_session(self, owner_id: str, session_id: str) -> int:
        deleted = await self._store.delete_all(owner_id, session_id)
        logger.info("Deleted %d turns from session %s", deleted, session_id)
        return deleted
