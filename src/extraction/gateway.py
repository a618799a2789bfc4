"""Completion gateway: the only code that talks to the remote LLM.

``complete(prompt, contract)`` sends one request and returns a value that has
passed the contract's validation, or raises :class:`GatewayError`.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Protocol, TypeVar

from anthropic import AnthropicError, AsyncAnthropic
from pydantic import BaseModel

from src.config import settings
from src.extraction.contracts import OutputContract, SchemaError
from src.extraction.prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class GatewayError(Exception):
    """The completion service failed or returned unusable output."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CompletionGateway(Protocol):
    """Anything that can turn a prompt into a contract-valid value."""

    async def complete(self, prompt: str, contract: OutputContract[T]) -> T: ...


class AnthropicGateway:
    """Claude-backed gateway using forced tool use for structured output."""

    def __init__(
        self,
        client: AsyncAnthropic | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._client = client
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens

    @property
    def client(self) -> AsyncAnthropic:
        # Built lazily; importing the app must not require an API key.
        if self._client is None:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key, max_retries=0)
        return self._client

    async def complete(self, prompt: str, contract: OutputContract[T]) -> T:
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                tools=[contract.tool()],  # type: ignore[list-item]
                tool_choice={"type": "tool", "name": contract.name},
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as exc:
            raise GatewayError(f"Completion service error: {exc}") from exc

        data = _find_tool_input(response, contract.name)
        if data is None:
            raise GatewayError(
                f"Completion service returned no structured output for {contract.name}"
            )

        try:
            return contract.validate(data)
        except SchemaError as exc:
            raise GatewayError(str(exc)) from exc


def _find_tool_input(response: Any, tool_name: str) -> Any:
    """Return the input of the first matching tool_use block, or None."""
    for block in response.content:
        if block.type != "tool_use":
            continue
        if block.name != tool_name:
            continue
        return block.input

    logger.warning(
        "Completion response had no %s tool_use block (stop_reason=%s)",
        tool_name,
        getattr(response, "stop_reason", None),
    )
    return None


@lru_cache(maxsize=1)
def get_gateway() -> CompletionGateway:
    """Return the process-wide default gateway."""
    return AnthropicGateway()
