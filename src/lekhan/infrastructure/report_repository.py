from __future__ import annotations

from threading import RLock
from typing import Dict, Optional, Protocol
import logging
import os
import uuid

from ..domain.report_models import EventRecord


logger = logging.getLogger(__name__)


class EventRecordLookup(Protocol):
    async def by_id(self, report_id: str) -> Optional[EventRecord]: ...


class InMemoryReportRepository:
    """Simple in-memory event record lookup.

    Reports are registered by the report-management side (or tests); the
    engine only reads them.
    """

    def __init__(self) -> None:
        self._reports: Dict[str, EventRecord] = {}
        self._lock = RLock()

    def add(self, event: EventRecord) -> EventRecord:
        with self._lock:
            report_id = event.id or uuid.uuid4().hex
            stored = event.model_copy(update={"id": report_id})
            self._reports[report_id] = stored
            return stored

    async def by_id(self, report_id: str) -> Optional[EventRecord]:
        with self._lock:
            return self._reports.get(report_id)


_repo: Optional[EventRecordLookup] = None


def get_report_repository() -> EventRecordLookup:
    global _repo
    if _repo is not None:
        return _repo
    impl = (os.getenv("LEKHAN_REPORT_REPO_IMPL") or "").lower()
    db_mode = os.getenv("DB_MODE", "").lower()
    if impl == "mongo" or (not impl and db_mode == "mongo"):
        from .report_repository_mongo import MongoReportRepository

        _repo = MongoReportRepository.from_env()
        logger.info("Using MongoDB event report lookup")
        return _repo
    _repo = InMemoryReportRepository()
    return _repo
