"""Knowledge-map endpoint: synthesise a description and graph from action items."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from src.api.concurrency import InFlightGuard, get_request_guard
from src.extraction.gateway import CompletionGateway, GatewayError, get_gateway
from src.extraction.mapper import request_knowledge_map
from src.extraction.models import ActionItemCollection, KnowledgeMap

router = APIRouter()


@router.post("/api/knowledge-map", response_model=KnowledgeMap)
async def knowledge_map(
    items: ActionItemCollection,
    gateway: Annotated[CompletionGateway, Depends(get_gateway)],
    guard: Annotated[InFlightGuard, Depends(get_request_guard)],
) -> KnowledgeMap:
    """Generate a knowledge map from previously extracted action items.

    Dangling or duplicate graph elements returned by the model are dropped
    before the map is returned.
    """
    async with guard.hold("knowledge map generation"):
        try:
            return await request_knowledge_map(items, gateway)
        except GatewayError as exc:
            raise HTTPException(
                status_code=502,
                detail=f"Knowledge map generation failed: {exc.message}",
            ) from exc
