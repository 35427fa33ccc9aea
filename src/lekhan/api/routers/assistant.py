from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ...domain.chat_models import (
    ChatHistoryEntry,
    ChatReply,
    ChatRequest,
    SessionDeleted,
    SessionHistory,
    SessionSummary,
)
from ...domain.report_models import GeneratedText, SectionSuggestionRequest
from ...security.auth import User
from ...security.rbac import Permission, require_permission
from ...services.content_generation import ContentGenerationService
from ...services.conversation import ConversationSessionManager
from ..deps import get_conversation, get_generation


class SectionSuggestions(GeneratedText):
    section_type: str


router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.post("/chat", response_model=ChatReply)
async def chat(
    req: ChatRequest,
    conversation: ConversationSessionManager = Depends(get_conversation),
    user: User = Depends(require_permission(Permission.ASSISTANT_CHAT)),
) -> ChatReply:
    return await conversation.send_message(
        owner_id=user.user_id,
        user_message=req.message.strip(),
        session_id=req.session_id,
        report_context_id=req.report_context_id,
    )


@router.get("/sessions", response_model=List[SessionSummary])
async def list_sessions(
    conversation: ConversationSessionManager = Depends(get_conversation),
    user: User = Depends(require_permission(Permission.ASSISTANT_CHAT)),
) -> List[SessionSummary]:
    return await conversation.list_sessions(user.user_id)


@router.get("/sessions/{session_id}", response_model=SessionHistory)
async def get_session_history(
    session_id: str,
    conversation: ConversationSessionManager = Depends(get_conversation),
    user: User = Depends(require_permission(Permission.ASSISTANT_CHAT)),
) -> SessionHistory:
    turns = await conversation.get_session_messages(user.user_id, session_id)
    return SessionHistory(
        session_id=session_id,
        messages=[ChatHistoryEntry(role=t.role, content=t.content, timestamp=t.timestamp) for t in turns],
    )


@router.delete("/sessions/{session_id}", response_model=SessionDeleted)
async def delete_session(
    session_id: str,
    conversation: ConversationSessionManager = Depends(get_conversation),
    user: User = Depends(require_permission(Permission.ASSISTANT_CHAT)),
) -> SessionDeleted:
    deleted = await conversation.delete_session(user.user_id, session_id)
    return SessionDeleted(session_id=session_id, deleted_count=deleted)


@router.post("/content-suggestions", response_model=SectionSuggestions)
async def content_suggestions(
    req: SectionSuggestionRequest,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.ASSISTANT_CHAT)),
) -> SectionSuggestions:
    text = await generation.generate_section_suggestions(req.section_type, req.report)
    return SectionSuggestions(text=text, section_type=req.section_type)
