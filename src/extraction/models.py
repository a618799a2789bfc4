"""Data models for action items and knowledge maps.

These pydantic models are the single source of truth for the shapes exchanged
with the completion service. Python attributes are snake_case; the JSON wire
names are camelCase (``actionItems``, ``mapDescription``) via aliases.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _blank_to_none(value: object) -> object:
    """Absent optional strings are ``None``, never ``""`` or ``"   "``."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ActionItem(_Frozen):
    """A single task or commitment identified in a transcript."""

    action: str = Field(min_length=1, description="The specific task or commitment identified.")
    assignee: str | None = Field(
        default=None,
        description="The person responsible for completing the action item, if identified.",
    )
    assigner: str | None = Field(
        default=None,
        description="The person who assigned the task, if explicitly mentioned or clearly implied.",
    )
    timeline: str | None = Field(
        default=None,
        description=(
            "The deadline, due date, or timeframe for the action item, if specified "
            '(e.g. "by Friday", "next week", "EOD").'
        ),
    )
    context: str = Field(
        min_length=1,
        description="The surrounding sentence or phrase providing context for the action item.",
    )

    @field_validator("action", "context")
    @classmethod
    def require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("assignee", "assigner", "timeline", mode="before")
    @classmethod
    def drop_blank_optionals(cls, value: object) -> object:
        return _blank_to_none(value)


class ActionItemCollection(_Frozen):
    """Ordered action items, in order of appearance in the transcript. May be empty."""

    action_items: list[ActionItem] = Field(
        default_factory=list,
        description=(
            "A list of extracted action items, each including the action, assignee, "
            "assigner, timeline, and context."
        ),
    )


class NodeType(str, Enum):
    """Category of a knowledge-map entity."""

    PERSON = "person"
    ACTION = "action"
    TOPIC = "topic"
    TIMELINE = "timeline"
    CONTEXT = "context"


class KnowledgeNode(_Frozen):
    """A graph vertex."""

    id: str = Field(
        min_length=1,
        description="A unique identifier for the node (e.g. 'person-john', 'action-1', 'topic-budget').",
    )
    type: NodeType = Field(description="The category of the entity.")
    label: str = Field(
        description="The display text for the node (e.g. 'John Doe', 'Update report', 'By Friday').",
    )


class KnowledgeEdge(_Frozen):
    """A directed, optionally labelled relationship between two nodes."""

    id: str = Field(min_length=1, description="A unique identifier for the edge (e.g. 'edge-1-assigns-2').")
    source: str = Field(description="The ID of the source node.")
    target: str = Field(description="The ID of the target node.")
    label: str | None = Field(
        default=None,
        description="A label describing the relationship (e.g. 'assigned to', 'due by', 'assigns').",
    )
    animated: bool | None = Field(
        default=None,
        description="Whether the edge should be animated (true for assignment edges).",
    )

    @field_validator("label", mode="before")
    @classmethod
    def drop_blank_label(cls, value: object) -> object:
        return _blank_to_none(value)


class KnowledgeMap(_Frozen):
    """Synthesised description plus an entity/relationship graph."""

    map_description: str = Field(
        description=(
            "A textual description of the knowledge map, outlining key entities (people, "
            "actions, topics from context), their relationships (assignments, dependencies, "
            "timelines), and any identified clusters or themes of related information. "
            "Use Markdown for basic formatting (like lists and bold text)."
        ),
    )
    nodes: list[KnowledgeNode] = Field(
        default_factory=list,
        description="An array of nodes representing entities in the knowledge map.",
    )
    edges: list[KnowledgeEdge] = Field(
        default_factory=list,
        description="An array of edges representing relationships between entities.",
    )

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}


class TranscriptSummary(_Frozen):
    """A concise summary of a meeting transcript."""

    summary: str = Field(description="A concise summary of the meeting transcript.")
