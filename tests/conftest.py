import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import pytest

ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)


class StubBackend:
    """Deterministic backend: replays canned replies and records prompts."""

    provider = "stub"
    model = "stub-model"

    def __init__(self, reply: Union[str, Callable[[str], str], Exception] = "generated text") -> None:
        self.reply = reply
        self.prompts: List[str] = []

    async def generate(self, prompt: str, **options: Any) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, BaseException):
            raise self.reply
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


@pytest.fixture
def stub_backend():
    return StubBackend()


@pytest.fixture
def backend_factory():
    return StubBackend


@pytest.fixture
def make_event():
    from src.lekhan.domain.report_models import EventRecord

    def _make(**overrides: Any) -> EventRecord:
        data = {
            "title": "AI Workshop",
            "event_type": "workshop",
            "organized_by": "CSE Department",
            "institute": "VIT Pune",
            "venue": "Seminar Hall A",
            "start_date": date(2024, 1, 10),
            "end_date": date(2024, 1, 11),
            "target_audience": "Third year students",
            "participant_count": 120,
            "faculty_coordinators": [{"name": "Dr. Rao", "designation": "Professor"}],
            "content_blocks": [],
        }
        data.update(overrides)
        return EventRecord.model_validate(data)

    return _make


@pytest.fixture
def make_engine():
    from src.lekhan.api.deps import build_engine
    from src.lekhan.config import EngineSettings
    from src.lekhan.infrastructure.message_store import InMemoryMessageStore
    from src.lekhan.infrastructure.report_repository import InMemoryReportRepository

    def _make(backend: Optional[Any] = None, store: Optional[Any] = None, settings: Optional[EngineSettings] = None):
        return build_engine(
            settings=settings or EngineSettings(),
            backend=backend if backend is not None else StubBackend(),
            store=store if store is not None else InMemoryMessageStore(),
            reports=InMemoryReportRepository(),
        )

    return _make
