"""Typed output contracts shared by the prompt builder and the completion gateway.

A contract pairs a pydantic model with the tool name the completion service
must answer through. The same contract describes the expected shape to the
model (``tool()`` / ``describe()``) and enforces it on the reply
(``validate()``).
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from src.extraction.models import (
    ActionItemCollection,
    KnowledgeMap,
    TranscriptSummary,
)

T = TypeVar("T", bound=BaseModel)


class SchemaError(ValueError):
    """Raised when completion output does not match its contract."""


@dataclass(frozen=True)
class OutputContract(Generic[T]):
    """Schema descriptor + validator + empty-value constructor for one output type."""

    name: str
    description: str
    model: type[T]
    empty_factory: Callable[[], T]

    def tool(self) -> dict[str, Any]:
        """Anthropic tool definition whose input schema is the model's JSON schema."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.model.model_json_schema(by_alias=True),
        }

    def describe(self, model: type[BaseModel] | None = None) -> str:
        """Render the fields of *model* (default: the contract model) as a bullet list."""
        target = model or self.model
        lines: list[str] = []
        for field_name, info in target.model_fields.items():
            key = info.alias or field_name
            requirement = "required" if info.is_required() else "optional"
            lines.append(f"- {key} ({requirement}): {info.description or ''}".rstrip())
        return "\n".join(lines)

    def validate(self, raw: Any) -> T:
        """Validate *raw* (dict or JSON string) into the contract model.

        Raises:
            SchemaError: If *raw* is missing, not JSON, or does not match the model.
        """
        if raw is None:
            raise SchemaError(f"{self.name}: completion returned no output")

        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise SchemaError(f"{self.name}: output is not valid JSON: {exc}") from exc

        if not isinstance(raw, dict):
            raise SchemaError(
                f"{self.name}: expected a JSON object, got {type(raw).__name__}"
            )

        try:
            return self.model.model_validate(raw)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in exc.errors()
            )
            raise SchemaError(f"{self.name}: output failed validation ({problems})") from exc

    def empty(self) -> T:
        return self.empty_factory()


ACTION_ITEMS_CONTRACT: OutputContract[ActionItemCollection] = OutputContract(
    name="store_action_items",
    description=(
        "Store the action items extracted from a meeting transcript. "
        "Call this once with every action item found, or an empty list if there are none."
    ),
    model=ActionItemCollection,
    empty_factory=ActionItemCollection,
)

KNOWLEDGE_MAP_CONTRACT: OutputContract[KnowledgeMap] = OutputContract(
    name="store_knowledge_map",
    description=(
        "Store a knowledge map synthesised from meeting action items: a Markdown "
        "description plus graph nodes and edges."
    ),
    model=KnowledgeMap,
    empty_factory=lambda: KnowledgeMap(map_description="", nodes=[], edges=[]),
)

SUMMARY_CONTRACT: OutputContract[TranscriptSummary] = OutputContract(
    name="store_summary",
    description="Store a concise summary of a meeting transcript.",
    model=TranscriptSummary,
    empty_factory=lambda: TranscriptSummary(summary=""),
)
