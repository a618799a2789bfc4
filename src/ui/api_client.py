"""HTTP client wrapper for the Action Extractor FastAPI backend.

Every call returns ``(payload, error)``: exactly one of the two is set, so the
UI can track failures separately from empty results.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

API_URL = os.getenv("API_URL", "http://localhost:8000")

ApiResult = tuple[dict[str, Any] | None, str | None]


def _error_message(exc: httpx.HTTPError) -> str:
    """Prefer the API's ``detail`` over httpx's generic status text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            detail = exc.response.json().get("detail")
        except ValueError:
            detail = None
        if isinstance(detail, str) and detail:
            return detail
        return f"Request failed with status {exc.response.status_code}"
    return f"Could not reach the API: {exc}"


def _post(path: str, timeout: float, **kwargs: Any) -> ApiResult:
    try:
        r = httpx.post(f"{API_URL}{path}", timeout=timeout, **kwargs)
        r.raise_for_status()
        return r.json(), None
    except httpx.HTTPError as e:
        return None, _error_message(e)


def check_health() -> bool:
    """Return True if the API server responds to /health."""
    try:
        r = httpx.get(f"{API_URL}/health", timeout=5.0)
        return r.status_code == 200
    except httpx.HTTPError:
        return False


def extract_from_text(transcript: str) -> ApiResult:
    """Extract action items from pasted transcript text."""
    return _post("/api/action-items", 120.0, json={"transcript": transcript})


def extract_from_file(file_content: bytes, filename: str, content_type: str | None = None) -> ApiResult:
    """Upload a .txt/.docx/.pdf transcript and extract action items."""
    file_tuple: tuple[str, bytes] | tuple[str, bytes, str] = (
        (filename, file_content, content_type) if content_type else (filename, file_content)
    )
    return _post("/api/action-items/upload", 120.0, files={"file": file_tuple})


def generate_knowledge_map(action_items: list[dict[str, Any]]) -> ApiResult:
    """Generate a knowledge map from previously extracted action items."""
    return _post("/api/knowledge-map", 120.0, json={"actionItems": action_items})


def summarize(transcript: str) -> ApiResult:
    """Summarise a transcript's key discussion points."""
    return _post("/api/summary", 120.0, json={"transcript": transcript})
