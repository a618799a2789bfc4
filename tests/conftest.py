"""Shared fixtures: a deterministic completion gateway stub (no network)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from src.extraction.contracts import OutputContract
from src.extraction.gateway import GatewayError


class StubGateway:
    """Records every call and answers with a canned payload or error.

    The payload is validated through the real contract, so a malformed
    payload behaves exactly like a malformed model reply.
    """

    def __init__(
        self,
        payload: Any = None,
        error: str | None = None,
        raises: Exception | None = None,
    ) -> None:
        self.payload = payload
        self.error = error
        self.raises = raises
        self.calls: list[tuple[str, str]] = []

    async def complete(self, prompt: str, contract: OutputContract[Any]) -> Any:
        self.calls.append((prompt, contract.name))
        if self.raises is not None:
            raise self.raises
        if self.error is not None:
            raise GatewayError(self.error)
        try:
            return contract.validate(self.payload)
        except ValueError as exc:
            raise GatewayError(str(exc)) from exc

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def last_prompt(self) -> str:
        return self.calls[-1][0]


@pytest.fixture
def stub_gateway() -> Callable[..., StubGateway]:
    """Factory fixture: ``stub_gateway(payload=...)``, ``stub_gateway(error=...)``,
    or ``stub_gateway(raises=SomeException(...))``."""
    return StubGateway
