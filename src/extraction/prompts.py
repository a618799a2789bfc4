"""Prompt templates for action-item extraction, knowledge mapping, and summaries.

Every builder is a pure function of its input: the same input always renders
the same prompt text.
"""

from __future__ import annotations

from src.extraction.contracts import (
    ACTION_ITEMS_CONTRACT,
    KNOWLEDGE_MAP_CONTRACT,
    SUMMARY_CONTRACT,
)
from src.extraction.models import ActionItem, ActionItemCollection, KnowledgeEdge, KnowledgeNode

SYSTEM_PROMPT = (
    "You are a meeting intelligence assistant. You analyse meeting transcripts "
    "and the action items extracted from them. Always answer by calling the "
    "provided tool exactly once. Only use information supported by the input; "
    "never invent placeholder values for fields that are not mentioned."
)

_EXTRACTION_TEMPLATE = """\
You are an AI assistant specialized in analyzing meeting transcripts to extract actionable tasks. \
Carefully read the provided transcript and identify all sentences or phrases that represent a \
specific action item, task, or commitment.

For each action item identified, extract the following details:
1. **action**: The core task or action to be performed.
2. **assignee**: The individual or group responsible for executing the action item. \
If not mentioned, leave this field empty.
3. **assigner**: The individual who assigned the task or made the request. This might be the \
speaker or another person mentioned. If not clear, leave this field empty.
4. **timeline**: Any specified deadline, due date, or timeframe (e.g. "by Friday", "next week", \
"EOD", "before the next meeting"). If no timeline is mentioned, leave this field empty.
5. **context**: The sentence or direct surrounding phrase where the action item was mentioned.

Transcript:
{transcript}

Return the result as an object containing a list named "actionItems", in the order the items \
appear in the transcript. Each entry must follow this contract:
{item_contract}

If no action items are found, return an empty "actionItems" list."""

_MAPPING_TEMPLATE = """\
Analyze the following list of extracted action items from a meeting transcript. Create a \
knowledge map that synthesizes this information, providing both a textual summary and \
structured data for visualization.

Action Items:
{action_items}

Instructions:
1. **Identify Key Entities:** People (assignees, assigners), specific Actions, important \
Topics/Concepts derived from the context, and Timelines/Deadlines. Create a unique ID for each \
distinct entity.
   - Use the provided Action IDs (action-0, action-1, ...) for action nodes.
   - Use the provided Person IDs for people. For any other person, normalize the name: \
lowercase, spaces replaced with underscores, prefixed with "person-" (e.g. "person-jane_smith").
   - Normalize topic and timeline IDs the same way with the prefixes "topic-" and "timeline-" \
(e.g. "topic-budget", "timeline-next_week").
2. **Describe Relationships:** Who assigned what to whom? What is the deadline for an action? \
Which context is an action related to? Are actions linked by topic?
3. **Generate the description ("mapDescription"):** Write a clear, concise summary of the \
analysis. Use Markdown for formatting (lists, bold). Highlight key relationships, assignments, \
deadlines, and potential themes.
4. **Generate structured data ("nodes" and "edges"):**
   - Each node follows this contract:
{node_contract}
     Node types are 'person', 'action', 'topic', 'timeline', and 'context'. Create 'context' \
nodes only if the context itself is a significant point of reference.
   - Each edge follows this contract:
{edge_contract}
     Direction: assigner -> action (label "assigns"), action -> assignee (label "assigned to"), \
action -> timeline (label "due"), action -> topic or context (label "related to").
     Set "animated" to true for assignment edges (assigner -> action, action -> assignee).
   - Every edge "source" and "target" must be the ID of a node in "nodes".

If no relevant entities or relationships can be extracted, return empty lists for nodes and \
edges and an appropriate mapDescription. Base the map *only* on the provided action items."""

_SUMMARY_TEMPLATE = """\
Summarize the following meeting transcript in a concise manner, highlighting the key \
discussion points.

Transcript:
{transcript}

Return the result following this contract:
{summary_contract}"""


def _indent(text: str, prefix: str) -> str:
    return "\n".join(f"{prefix}{line}" for line in text.splitlines())


def slugify(value: str) -> str:
    """Lowercase *value* and collapse every run of non-alphanumerics into ``_``."""
    slug: list[str] = []
    pending_sep = False
    for ch in value.strip().lower():
        if ch.isalnum():
            if pending_sep and slug:
                slug.append("_")
            slug.append(ch)
            pending_sep = False
        else:
            pending_sep = True
    return "".join(slug)


def person_node_id(name: str) -> str:
    """Stable node id for a person name (``"Jane Smith"`` -> ``"person-jane_smith"``)."""
    return f"person-{slugify(name)}"


def action_node_id(index: int) -> str:
    """Positional node id for the action item at *index* (0-based)."""
    return f"action-{index}"


def _format_person(name: str) -> str:
    return f"{name} (Person ID: {person_node_id(name)})"


def _format_action_item(index: int, item: ActionItem) -> str:
    # Absent fields are omitted.
    lines = [f"- Action: {item.action} (Action ID: {action_node_id(index)})"]
    if item.assignee:
        lines.append(f"  Assignee: {_format_person(item.assignee)}")
    if item.assigner:
        lines.append(f"  Assigner: {_format_person(item.assigner)}")
    if item.timeline:
        lines.append(f"  Timeline: {item.timeline}")
    lines.append(f"  Context: {item.context}")
    return "\n".join(lines)


def build_extraction_prompt(transcript: str) -> str:
    """Render the transcript -> action items prompt.

    The transcript is embedded verbatim.
    """
    if not isinstance(transcript, str):
        raise TypeError(f"transcript must be str, got {type(transcript).__name__}")

    return _EXTRACTION_TEMPLATE.format(
        transcript=transcript,
        item_contract=ACTION_ITEMS_CONTRACT.describe(ActionItem),
    )


def build_mapping_prompt(items: ActionItemCollection) -> str:
    """Render the action items -> knowledge map prompt.

    Each item is labelled ``action-<index>`` in collection order, and each named
    person carries the id the mapping stage will canonicalise to.
    """
    if not isinstance(items, ActionItemCollection):
        raise TypeError(f"items must be ActionItemCollection, got {type(items).__name__}")

    rendered = "\n".join(
        _format_action_item(i, item) for i, item in enumerate(items.action_items)
    )
    return _MAPPING_TEMPLATE.format(
        action_items=rendered,
        node_contract=_indent(KNOWLEDGE_MAP_CONTRACT.describe(KnowledgeNode), "     "),
        edge_contract=_indent(KNOWLEDGE_MAP_CONTRACT.describe(KnowledgeEdge), "     "),
    )


def build_summary_prompt(transcript: str) -> str:
    """Render the transcript -> summary prompt."""
    if not isinstance(transcript, str):
        raise TypeError(f"transcript must be str, got {type(transcript).__name__}")

    return _SUMMARY_TEMPLATE.format(
        transcript=transcript,
        summary_contract=SUMMARY_CONTRACT.describe(),
    )
