from __future__ import annotations

from typing import Any, Dict, List, Optional
import os

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from ..domain.report_models import EventRecord


# Stored documents use the camelCase field names of the report service.
_FIELD_MAP = {
    "eventType": "event_type",
    "organizedBy": "organized_by",
    "startDate": "start_date",
    "endDate": "end_date",
    "targetAudience": "target_audience",
    "participantCount": "participant_count",
    "academicYear": "academic_year",
    "facultyCoordinators": "faculty_coordinators",
    "contentBlocks": "content_blocks",
}

_BLOCK_FIELD_MAP = {
    "imageUrl": "image_url",
    "imageUrls": "image_urls",
    "imageLayout": "image_layout",
}


class MongoReportRepository:
    """Read-only view over the ``eventreports`` collection."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._reports = collection

    @classmethod
    def from_env(cls) -> "MongoReportRepository":
        mongo_url = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        mongo_db = os.getenv("MONGO_DB", "lekhan")
        collection = os.getenv("LEKHAN_REPORTS_COLLECTION", "eventreports")
        client = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=2000)
        return cls(client[mongo_db][collection])

    async def by_id(self, report_id: str) -> Optional[EventRecord]:
        try:
            oid = ObjectId(report_id)
        except (InvalidId, TypeError):
            return None
        doc = await self._reports.find_one({"_id": oid})
        if not doc:
            return None
        return self._to_event(doc)

    @staticmethod
    def _to_event(doc: Dict[str, Any]) -> EventRecord:
        data = {_FIELD_MAP.get(k, k): v for k, v in doc.items() if k != "_id"}
        data["id"] = str(doc["_id"])
        for key in ("start_date", "end_date"):
            value = data.get(key)
            if hasattr(value, "date"):
                data[key] = value.date()
        blocks: List[Dict[str, Any]] = []
        for raw in data.get("content_blocks") or []:
            blocks.append({_BLOCK_FIELD_MAP.get(k, k): v for k, v in dict(raw).items()})
        data["content_blocks"] = blocks
        coordinators = data.get("faculty_coordinators") or []
        if not coordinators and doc.get("facultyCoordinator"):
            coordinators = [doc["facultyCoordinator"]]
        data["faculty_coordinators"] = coordinators
        known = set(EventRecord.model_fields)
        return EventRecord(**{k: v for k, v in data.items() if k in known})
