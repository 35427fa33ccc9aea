from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional
import os

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING

from ..domain.chat_models import ChatTurn, ChatTurnMetadata, SessionSummary
from .message_store import preview_text


class MongoMessageStore:
    """Chat turns persisted in the ``chat_messages`` collection.

    Errors from the driver propagate; the conversation manager decides how
    to report them.
    """

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._messages = collection
        self._indexes_ready = False

    @classmethod
    def from_env(cls) -> "MongoMessageStore":
        mongo_url = os.getenv("MONGO_URL", "mongodb://localhost:27017")
        mongo_db = os.getenv("MONGO_DB", "lekhan")
        client = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=2000, tz_aware=True)
        return cls(client[mongo_db]["chat_messages"])

    async def _ensure_indexes(self) -> None:
        if self._indexes_ready:
            return
        await self._messages.create_index(
            [("owner_id", ASCENDING), ("session_id", ASCENDING), ("timestamp", DESCENDING)]
        )
        await self._messages.create_index([("owner_id", ASCENDING), ("timestamp", DESCENDING)])
        await self._messages.create_index("message_id", unique=True)
        self._indexes_ready = True

    async def append(self, turn: ChatTurn) -> None:
        await self._ensure_indexes()
        await self._messages.insert_one(self._to_doc(turn))

    async def append_exchange(self, user_turn: ChatTurn, assistant_turn: ChatTurn) -> None:
        await self._ensure_indexes()
        await self._messages.insert_many(
            [self._to_doc(user_turn), self._to_doc(assistant_turn)],
            ordered=True,
        )

    async def query_recent(self, owner_id: str, session_id: str, limit: int) -> List[ChatTurn]:
        if limit <= 0:
            return []
        cursor = (
            self._messages.find({"owner_id": owner_id, "session_id": session_id})
            .sort("timestamp", DESCENDING)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        return [self._to_turn(doc) for doc in docs]

    async def query_all(self, owner_id: str, session_id: str) -> List[ChatTurn]:
        cursor = self._messages.find({"owner_id": owner_id, "session_id": session_id}).sort("timestamp", ASCENDING)
        docs = await cursor.to_list(length=None)
        return [self._to_turn(doc) for doc in docs]

    async def delete_all(self, owner_id: str, session_id: str) -> int:
        result = await self._messages.delete_many({"owner_id": owner_id, "session_id": session_id})
        return int(result.deleted_count)

    async def list_sessions_for(self, owner_id: str, limit: int = 20, preview_length: int = 50) -> List[SessionSummary]:
        pipeline = [
            {"$match": {"owner_id": owner_id}},
            {"$sort": {"timestamp": ASCENDING}},
            {
                "$group": {
                    "_id": "$session_id",
                    "last_message": {"$last": "$content"},
                    "last_timestamp": {"$max": "$timestamp"},
                    "message_count": {"$sum": 1},
                }
            },
            {"$sort": {"last_timestamp": DESCENDING}},
            {"$limit": limit},
        ]
        docs = await self._messages.aggregate(pipeline).to_list(length=limit)
        return [
            SessionSummary(
                session_id=str(doc["_id"]),
                last_message_preview=preview_text(str(doc.get("last_message", "")), preview_length),
                last_timestamp=self._aware(doc["last_timestamp"]),
                message_count=int(doc.get("message_count", 0)),
            )
            for doc in docs
        ]

    @staticmethod
    def _aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @staticmethod
    def _to_doc(turn: ChatTurn) -> Dict[str, Any]:
        return {
            "message_id": turn.message_id,
            "session_id": turn.session_id,
            "owner_id": turn.owner_id,
            "role": turn.role,
            "content": turn.content,
            "timestamp": turn.timestamp,
            "metadata": turn.metadata.model_dump(),
        }

    def _to_turn(self, doc: Dict[str, Any]) -> ChatTurn:
        data = dict(doc)
        metadata: Optional[Dict[str, Any]] = data.get("metadata") or {}
        return ChatTurn(
            message_id=str(data.get("message_id")),
            session_id=str(data.get("session_id")),
            owner_id=str(data.get("owner_id")),
            role=data.get("role", "assistant"),
            content=str(data.get("content", "")),
            timestamp=self._aware(data["timestamp"]),
            metadata=ChatTurnMetadata(**metadata),
        )
