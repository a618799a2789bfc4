"""Reject-while-pending guard for completion-service requests.

The tool is single-user: at most one extraction, mapping, or summary request
may be in flight at a time. A request arriving while another is outstanding is
rejected with 409 rather than queued or raced.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import HTTPException

logger = logging.getLogger(__name__)


class InFlightGuard:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self, operation: str) -> AsyncIterator[None]:
        # No await between the check and the acquire, so this cannot race.
        if self._lock.locked():
            logger.warning("Rejected %s: another request is already in flight", operation)
            raise HTTPException(
                status_code=409,
                detail="Another request is already in progress. Please wait for it to finish.",
            )
        async with self._lock:
            yield


request_guard = InFlightGuard()


def get_request_guard() -> InFlightGuard:
    return request_guard
