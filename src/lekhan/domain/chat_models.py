from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Role = Literal["user", "assistant"]


class ChatTurnMetadata(BaseModel):
    report_context_id: Optional[str] = None
    latency_ms: Optional[int] = None


class ChatTurn(BaseModel):
    message_id: str
    session_id: str
    owner_id: str
    role: Role
    content: str
    timestamp: datetime
    metadata: ChatTurnMetadata = Field(default_factory=ChatTurnMetadata)


class SessionSummary(BaseModel):
    session_id: str
    last_message_preview: str
    last_timestamp: datetime
    message_count: int


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    session_id: Optional[str] = None
    report_context_id: Optional[str] = None


class ChatReply(BaseModel):
    text: str
    session_id: str
    persisted: bool = True
    warnings: List[str] = Field(default_factory=list)


class ChatHistoryEntry(BaseModel):
    role: Role
    content: str
    timestamp: datetime


class SessionHistory(BaseModel):
    session_id: str
    messages: List[ChatHistoryEntry]


class SessionDeleted(BaseModel):
    session_id: str
    deleted_count: int
