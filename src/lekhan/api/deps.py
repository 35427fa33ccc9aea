from __future__ import annotations

"""Composition root: the backend, stores and services are built once per
application and handed to routes through FastAPI dependencies."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from ..config import EngineSettings
from ..infrastructure.message_store import MessageStore, get_message_store
from ..infrastructure.report_repository import EventRecordLookup, get_report_repository
from ..services.content_generation import ContentGenerationService
from ..services.conversation import ConversationSessionManager
from ..services.llm_backend import GenerativeBackend, build_backend


@dataclass
class Engine:
    settings: EngineSettings
    backend: GenerativeBackend
    store: MessageStore
    reports: EventRecordLookup
    generation: ContentGenerationService
    conversation: ConversationSessionManager


def build_engine(
    settings: Optional[EngineSettings] = None,
    backend: Optional[GenerativeBackend] = None,
    store: Optional[MessageStore] = None,
    reports: Optional[EventRecordLookup] = None,
) -> Engine:
    settings = settings or EngineSettings.from_env()
    backend = backend if backend is not None else build_backend(settings)
    store = store if store is not None else get_message_store()
    reports = reports if reports is not None else get_report_repository()
    generation = ContentGenerationService(backend)
    conversation = ConversationSessionManager(generation, store, reports, settings=settings)
    return Engine(
        settings=settings,
        backend=backend,
        store=store,
        reports=reports,
        generation=generation,
        conversation=conversation,
    )


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_generation(engine: Engine = Depends(get_engine)) -> ContentGenerationService:
    return engine.generation


def get_conversation(engine: Engine = Depends(get_engine)) -> ConversationSessionManager:
    return engine.conversation


def get_reports(engine: Engine = Depends(get_engine)) -> EventRecordLookup:
    return engine.reports
