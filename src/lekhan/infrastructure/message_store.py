from __future__ import annotations

from datetime import UTC, datetime, timedelta
from threading import RLock
from typing import Dict, List, Optional, Protocol, Tuple
import logging
import os

from ..domain.chat_models import ChatTurn, SessionSummary


logger = logging.getLogger(__name__)

_SessionKey = Tuple[str, str]


class MessageStore(Protocol):
    async def append(self, turn: ChatTurn) -> None: ...

    async def append_exchange(self, user_turn: ChatTurn, assistant_turn: ChatTurn) -> None: ...

    async def query_recent(self, owner_id: str, session_id: str, limit: int) -> List[ChatTurn]: ...

    async def query_all(self, owner_id: str, session_id: str) -> List[ChatTurn]: ...

    async def delete_all(self, owner_id: str, session_id: str) -> int: ...

    async def list_sessions_for(self, owner_id: str, limit: int = 20, preview_length: int = 50) -> List[SessionSummary]: ...


def preview_text(text: str, length: int = 50) -> str:
    """Truncate ``text`` to ``length`` characters, appending an ellipsis when cut."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def now_utc() -> datetime:
    return datetime.now(UTC)


class InMemoryMessageStore:
    """Process-local chat history keyed by (owner_id, session_id)."""

    def __init__(self) -> None:
        self._turns: Dict[_SessionKey, List[ChatTurn]] = {}
        self._lock = RLock()

    def _insert(self, turn: ChatTurn) -> None:
        key = (turn.owner_id, turn.session_id)
        turns = self._turns.setdefault(key, [])
        # Timestamps within a session are kept strictly increasing.
        if turns and turn.timestamp <= turns[-1].timestamp:
            turn = turn.model_copy(update={"timestamp": turns[-1].timestamp + timedelta(microseconds=1)})
        turns.append(turn)

    async def append(self, turn: ChatTurn) -> None:
        with self._lock:
            self._insert(turn)

    async def append_exchange(self, user_turn: ChatTurn, assistant_turn: ChatTurn) -> None:
        with self._lock:
            self._insert(user_turn)
            self._insert(assistant_turn)

    async def query_recent(self, owner_id: str, session_id: str, limit: int) -> List[ChatTurn]:
        with self._lock:
            turns = list(self._turns.get((owner_id, session_id), []))
        if limit <= 0:
            return []
        return list(reversed(turns[-limit:]))

    async def query_all(self, owner_id: str, session_id: str) -> List[ChatTurn]:
        with self._lock:
            return list(self._turns.get((owner_id, session_id), []))

    async def delete_all(self, owner_id: str, session_id: str) -> int:
        with self._lock:
            removed = self._turns.pop((owner_id, session_id), [])
        return len(removed)

    async def list_sessions_for(self, owner_id: str, limit: int = 20, preview_length: int = 50) -> List[SessionSummary]:
        with self._lock:
            grouped = [
                (session_id, list(turns))
                for (owner, session_id), turns in self._turns.items()
                if owner == owner_id and turns
            ]
        summaries = [
            SessionSummary(
                session_id=session_id,
                last_message_preview=preview_text(turns[-1].content, preview_length),
                last_timestamp=turns[-1].timestamp,
                message_count=len(turns),
            )
            for session_id, turns in grouped
        ]
        summaries.sort(key=lambda s: s.last_timestamp, reverse=True)
        return summaries[: max(0, limit)]


_store: Optional[MessageStore] = None


def get_message_store() -> MessageStore:
    """Return the process-wide store selected by ``LEKHAN_CHAT_STORE_IMPL`` / ``DB_MODE``."""
    global _store
    if _store is not None:
        return _store
    impl = (os.getenv("LEKHAN_CHAT_STORE_IMPL") or "").lower()
    db_mode = os.getenv("DB_MODE", "").lower()
    if impl == "mongo" or (not impl and db_mode == "mongo"):
        from .message_store_mongo import MongoMessageStore

        _store = MongoMessageStore.from_env()
        logger.info("Using MongoDB chat message store")
        return _store
    _store = InMemoryMessageStore()
    return _store
