"""Extraction endpoints: action items from pasted or uploaded transcripts, and summaries."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from src.api.concurrency import InFlightGuard, get_request_guard
from src.api.models import TranscriptRequest, UploadExtractResponse
from src.config import settings
from src.extraction.extractor import request_action_items, summarize_transcript
from src.extraction.gateway import CompletionGateway, GatewayError, get_gateway
from src.extraction.models import ActionItemCollection, TranscriptSummary
from src.ingestion.parsers import TranscriptParseError, UnsupportedFileTypeError, extract_text

router = APIRouter()


async def _extract(
    transcript: str, gateway: CompletionGateway, guard: InFlightGuard
) -> ActionItemCollection:
    async with guard.hold("action item extraction"):
        try:
            return await request_action_items(transcript, gateway)
        except GatewayError as exc:
            # Upstream LLM failure, distinct from an empty result.
            raise HTTPException(
                status_code=502, detail=f"Extraction failed: {exc.message}"
            ) from exc


@router.post("/api/action-items", response_model=ActionItemCollection)
async def extract_from_text(
    body: TranscriptRequest,
    gateway: Annotated[CompletionGateway, Depends(get_gateway)],
    guard: Annotated[InFlightGuard, Depends(get_request_guard)],
) -> ActionItemCollection:
    """Extract action items from a pasted transcript."""
    return await _extract(body.transcript, gateway, guard)


@router.post("/api/action-items/upload", response_model=UploadExtractResponse)
async def extract_from_file(
    file: Annotated[UploadFile, File(...)],
    gateway: Annotated[CompletionGateway, Depends(get_gateway)],
    guard: Annotated[InFlightGuard, Depends(get_request_guard)],
) -> UploadExtractResponse:
    """Extract action items from an uploaded .txt, .docx, or .pdf transcript."""
    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=(
                "File too large. Maximum size is "
                f"{settings.max_upload_bytes // (1024 * 1024)} MB."
            ),
        )

    try:
        transcript = extract_text(file.filename, raw, file.content_type)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except TranscriptParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    items = await _extract(transcript, gateway, guard)
    return UploadExtractResponse(
        action_items=items.action_items,
        filename=file.filename,
        transcript=transcript,
    )


@router.post("/api/summary", response_model=TranscriptSummary)
async def summarize(
    body: TranscriptRequest,
    gateway: Annotated[CompletionGateway, Depends(get_gateway)],
    guard: Annotated[InFlightGuard, Depends(get_request_guard)],
) -> TranscriptSummary:
    """Summarise the key discussion points of a transcript."""
    async with guard.hold("summary"):
        try:
            return await summarize_transcript(body.transcript, gateway)
        except GatewayError as exc:
            raise HTTPException(
                status_code=502, detail=f"Summary failed: {exc.message}"
            ) from exc
