import asyncio

import pytest

from src.lekhan.config import EngineSettings
from src.lekhan.domain.errors import GenerationError, ValidationError
from src.lekhan.infrastructure.message_store import InMemoryMessageStore
from src.lekhan.infrastructure.report_repository import InMemoryReportRepository
from src.lekhan.services.content_generation import ContentGenerationService
from src.lekhan.services.conversation import ConversationSessionManager


class FailingStore(InMemoryMessageStore):
    async def append_exchange(self, user_turn, assistant_turn):
        raise ConnectionError("store offline")


class BrokenReadStore(InMemoryMessageStore):
    async def query_recent(self, owner_id, session_id, limit):
        raise ConnectionError("read timeout")


class AppendOnlyStore:
    """Store without append_exchange; the manager falls back to two appends."""

    def __init__(self):
        self.inner = InMemoryMessageStore()
        self.appended = []

    async def append(self, turn):
        self.appended.append(turn.role)
        await self.inner.append(turn)

    async def query_recent(self, owner_id, session_id, limit):
        return await self.inner.query_recent(owner_id, session_id, limit)


def _manager(backend, store=None, reports=None, settings=None):
    return ConversationSessionManager(
        ContentGenerationService(backend),
        store if store is not None else InMemoryMessageStore(),
        reports if reports is not None else InMemoryReportRepository(),
        settings=settings,
    )


def test_fresh_session_stores_user_then_assistant(backend_factory):
    store = InMemoryMessageStore()
    manager = _manager(backend_factory("Start with the objectives."), store=store)
    reply = asyncio.run(manager.send_message("u1", "How do I write an introduction?"))

    assert reply.text == "Start with the objectives."
    assert reply.session_id
    assert reply.persisted is True
    turns = asyncio.run(store.query_all("u1", reply.session_id))
    assert [t.role for t in turns] == ["user", "assistant"]
    assert turns[0].content == "How do I write an introduction?"
    assert turns[0].timestamp < turns[1].timestamp
    assert turns[0].metadata == turns[1].metadata
    assert turns[1].metadata.latency_ms is not None


def test_session_id_is_stable_and_turns_accumulate(backend_factory):
    store = InMemoryMessageStore()
    manager = _manager(backend_factory("ok"), store=store)
    first = asyncio.run(manager.send_message("u1", "one"))
    second = asyncio.run(manager.send_message("u1", "two", session_id=first.session_id))

    assert second.session_id == first.session_id
    assert len(asyncio.run(store.query_all("u1", first.session_id))) == 4


def test_history_window_is_bounded_and_chronological(backend_factory):
    backend = backend_factory(lambda prompt: "reply")
    store = InMemoryMessageStore()
    manager = _manager(backend, store=store)
    session_id = asyncio.run(manager.send_message("u1", "question 0")).session_id
    for index in range(1, 8):
        asyncio.run(manager.send_message("u1", f"question {index}", session_id=session_id))

    asyncio.run(manager.send_message("u1", "latest", session_id=session_id))
    prompt = backend.prompts[-1]
    context = prompt.split("Previous conversation context:\n", 1)[1].split("\n\n", 1)[0]
    lines = context.splitlines()
    assert len(lines) == 10
    assert lines[0] == "User: question 3"
    assert lines[-2] == "User: question 7"
    assert lines[-1] == "Lekhan AI: reply"
    assert "question 2" not in context


def test_history_window_follows_settings(backend_factory):
    backend = backend_factory("reply")
    manager = _manager(backend, settings=EngineSettings(history_window=1))
    session_id = asyncio.run(manager.send_message("u1", "a")).session_id
    asyncio.run(manager.send_message("u1", "b", session_id=session_id))
    asyncio.run(manager.send_message("u1", "c", session_id=session_id))
    context = backend.prompts[-1].split("Previous conversation context:\n", 1)[1].split("\n\n", 1)[0]
    assert context.splitlines() == ["User: b", "Lekhan AI: reply"]


def test_sessions_are_scoped_by_owner(backend_factory):
    backend = backend_factory("reply")
    store = InMemoryMessageStore()
    manager = _manager(backend, store=store)
    session_id = asyncio.run(manager.send_message("alice", "private note")).session_id
    asyncio.run(manager.send_message("bob", "hello", session_id=session_id))

    assert "private note" not in backend.prompts[-1]
    assert len(asyncio.run(store.query_all("alice", session_id))) == 2
    assert len(asyncio.run(store.query_all("bob", session_id))) == 2


def test_report_context_is_included_when_found(backend_factory, make_event):
    backend = backend_factory("reply")
    reports = InMemoryReportRepository()
    stored = reports.add(make_event())
    manager = _manager(backend, reports=reports)

    reply = asyncio.run(manager.send_message("u1", "summarize", report_context_id=stored.id))
    assert "Current Report Context:\n- Event Title: AI Workshop" in backend.prompts[-1]
    turns = asyncio.run(manager.get_session_messages("u1", reply.session_id))
    assert turns[0].metadata.report_context_id == stored.id

    asyncio.run(manager.send_message("u1", "summarize", report_context_id="missing"))
    assert "Current Report Context" not in backend.prompts[-1]


def test_blank_message_is_rejected(backend_factory):
    backend = backend_factory("reply")
    manager = _manager(backend)
    with pytest.raises(ValidationError):
        asyncio.run(manager.send_message("u1", "   "))
    assert backend.prompts == []


def test_generation_failure_persists_nothing(backend_factory):
    store = InMemoryMessageStore()
    manager = _manager(backend_factory(RuntimeError("provider down")), store=store)
    with pytest.raises(GenerationError):
        asyncio.run(manager.send_message("u1", "hello", session_id="s1"))
    assert asyncio.run(store.query_all("u1", "s1")) == []


def test_cancellation_persists_nothing(backend_factory):
    store = InMemoryMessageStore()
    manager = _manager(backend_factory(asyncio.CancelledError()), store=store)
    with pytest.raises(asyncio.CancelledError):
        asyncio.run(manager.send_message("u1", "hello", session_id="s1"))
    assert asyncio.run(store.query_all("u1", "s1")) == []


def test_persistence_failure_is_reported_not_raised(backend_factory):
    manager = _manager(backend_factory("still answered"), store=FailingStore())
    reply = asyncio.run(manager.send_message("u1", "hello"))
    assert reply.text == "still answered"
    assert reply.persisted is False
    assert len(reply.warnings) == 1
    assert "store offline" in reply.warnings[0]


def test_history_read_failure_degrades_to_no_context(backend_factory):
    backend = backend_factory("reply")
    manager = _manager(backend, store=BrokenReadStore())
    reply = asyncio.run(manager.send_message("u1", "hello", session_id="s1"))
    assert reply.persisted is True
    assert "Previous conversation context" not in backend.prompts[-1]


def test_store_without_exchange_support_appends_in_order(backend_factory):
    store = AppendOnlyStore()
    manager = _manager(backend_factory("reply"), store=store)
    asyncio.run(manager.send_message("u1", "hello"))
    assert store.appended == ["user", "assistant"]


def test_list_and_delete_sessions(backend_factory):
    manager = _manager(backend_factory("reply"), settings=EngineSettings(preview_chars=5))
    first = asyncio.run(manager.send_message("u1", "first")).session_id
    second = asyncio.run(manager.send_message("u1", "second")).session_id

    summaries = asyncio.run(manager.list_sessions("u1"))
    assert [s.session_id for s in summaries] == [second, first]
    assert summaries[0].message_count == 2
    assert summaries[0].last_message_preview == "reply"

    assert asyncio.run(manager.delete_session("u1", first)) == 2
    assert asyncio.run(manager.delete_session("u1", first)) == 0
    assert [s.session_id for s in asyncio.run(manager.list_sessions("u1"))] == [second]
