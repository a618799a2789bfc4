"""Pydantic request/response schemas for the Action Extractor API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.extraction.models import ActionItemCollection


class TranscriptRequest(BaseModel):
    """Request body for transcript-based endpoints."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transcript: str


class UploadExtractResponse(ActionItemCollection):
    """Response body for /api/action-items/upload.

    Echoes the extracted transcript text so the UI can show what was analysed.
    """

    filename: str | None = None
    transcript: str
