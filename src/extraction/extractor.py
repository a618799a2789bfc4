"""Claude-powered extraction of action items and transcript summaries."""

from __future__ import annotations

import logging

from src.extraction.contracts import ACTION_ITEMS_CONTRACT, SUMMARY_CONTRACT
from src.extraction.gateway import CompletionGateway, GatewayError, get_gateway
from src.extraction.models import ActionItemCollection, TranscriptSummary
from src.extraction.prompts import build_extraction_prompt, build_summary_prompt

logger = logging.getLogger(__name__)


async def request_action_items(
    transcript: str, gateway: CompletionGateway | None = None
) -> ActionItemCollection:
    """Extract action items from a transcript, raising on failure.

    A blank transcript short-circuits to an empty collection without a
    remote call.

    Raises:
        GatewayError: If the completion service fails or its output is invalid.
    """
    if not transcript or not transcript.strip():
        logger.debug("Blank transcript; skipping action item extraction")
        return ACTION_ITEMS_CONTRACT.empty()

    prompt = build_extraction_prompt(transcript)
    result = await (gateway or get_gateway()).complete(prompt, ACTION_ITEMS_CONTRACT)
    logger.info("Extracted %d action items", len(result.action_items))
    return result


async def extract_action_items(
    transcript: str, gateway: CompletionGateway | None = None
) -> ActionItemCollection:
    """Extract action items from a transcript. Never raises.

    On any failure the error is logged and an empty collection is
    returned; callers that must tell "none found" from "failed" should use
    :func:`request_action_items` instead.
    """
    try:
        return await request_action_items(transcript, gateway)
    except GatewayError:
        logger.exception("Action item extraction failed")
        return ACTION_ITEMS_CONTRACT.empty()
    except Exception:
        logger.exception("Action item extraction failed unexpectedly")
        return ACTION_ITEMS_CONTRACT.empty()


async def summarize_transcript(
    transcript: str, gateway: CompletionGateway | None = None
) -> TranscriptSummary:
    """Summarise the key discussion points of a transcript.

    Raises:
        GatewayError: If the completion service fails or its output is invalid.
    """
    if not transcript or not transcript.strip():
        logger.debug("Blank transcript; skipping summary")
        return SUMMARY_CONTRACT.empty()

    prompt = build_summary_prompt(transcript)
    return await (gateway or get_gateway()).complete(prompt, SUMMARY_CONTRACT)
