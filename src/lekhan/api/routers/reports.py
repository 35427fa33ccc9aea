from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...domain.report_models import (
    ConnectivityStatus,
    EventRecord,
    GenerateBlockRequest,
    GeneratedText,
)
from ...infrastructure.report_repository import EventRecordLookup
from ...security.auth import User
from ...security.rbac import Permission, require_permission
from ...services.content_generation import ContentGenerationService
from ...services.fallback_report import build_summary_document
from ..deps import get_generation, get_reports


class GeneratedBlock(GeneratedText):
    block_type: str


class ReportGenerated(GeneratedText):
    report_id: str


router = APIRouter(prefix="/reports", tags=["reports"])


async def _lookup(reports: EventRecordLookup, report_id: str) -> EventRecord:
    report = await reports.by_id(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


@router.get("/ai/test", response_model=ConnectivityStatus)
async def test_connectivity(
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.SERVICE_DIAGNOSE)),
) -> ConnectivityStatus:
    return ConnectivityStatus(connected=await generation.test_backend_connectivity())


@router.post("/ai/generate-content", response_model=GeneratedBlock)
async def generate_block_content(
    req: GenerateBlockRequest,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedBlock:
    text = await generation.generate_block_content(req.block_type, req.context)
    return GeneratedBlock(text=text, block_type=req.block_type)


@router.post("/generate", response_model=GeneratedText)
async def generate_full_report(
    event: EventRecord,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    return GeneratedText(text=await generation.generate_report_content(event))


@router.post("/summary", response_model=GeneratedText)
async def generate_summary(
    event: EventRecord,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    return GeneratedText(text=await generation.generate_event_summary(event))


@router.post("/generate-summary", response_model=GeneratedText)
async def generate_summary_document(
    event: EventRecord,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    summary = await generation.generate_event_summary(event)
    return GeneratedText(text=build_summary_document(event, summary))


@router.post("/recommendations", response_model=GeneratedText)
async def generate_recommendations(
    event: EventRecord,
    generation: ContentGenerationService = Depends(get_generation),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    return GeneratedText(text=await generation.generate_recommendations(event))


@router.post("/{report_id}/generate", response_model=ReportGenerated)
async def generate_stored_report(
    report_id: str,
    generation: ContentGenerationService = Depends(get_generation),
    reports: EventRecordLookup = Depends(get_reports),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> ReportGenerated:
    event = await _lookup(reports, report_id)
    text = await generation.generate_report_content(event)
    return ReportGenerated(text=text, report_id=report_id)


@router.get("/{report_id}/ai-summary", response_model=GeneratedText)
async def stored_report_summary(
    report_id: str,
    generation: ContentGenerationService = Depends(get_generation),
    reports: EventRecordLookup = Depends(get_reports),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    event = await _lookup(reports, report_id)
    return GeneratedText(text=await generation.generate_event_summary(event))


@router.get("/{report_id}/ai-recommendations", response_model=GeneratedText)
async def stored_report_recommendations(
    report_id: str,
    generation: ContentGenerationService = Depends(get_generation),
    reports: EventRecordLookup = Depends(get_reports),
    user: User = Depends(require_permission(Permission.REPORT_GENERATE)),
) -> GeneratedText:
    event = await _lookup(reports, report_id)
    return GeneratedText(text=await generation.generate_recommendations(event))
