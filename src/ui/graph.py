"""Render a knowledge map (API JSON) as a Graphviz DOT string for st.graphviz_chart."""

from __future__ import annotations

from typing import Any

# (shape, fill colour) per node type
NODE_STYLES: dict[str, tuple[str, str]] = {
    "person": ("ellipse", "#cfe2ff"),
    "action": ("box", "#d1e7dd"),
    "topic": ("hexagon", "#fff3cd"),
    "timeline": ("note", "#f8d7da"),
    "context": ("component", "#e2e3e5"),
}
_DEFAULT_STYLE = ("box", "#ffffff")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def build_dot(knowledge_map: dict[str, Any]) -> str:
    """Build a left-to-right digraph from ``nodes`` and ``edges``.

    Animated edges (assignments) are drawn bold.
    """
    lines = [
        "digraph knowledge_map {",
        "  rankdir=LR;",
        '  node [style="filled,rounded", fontname="Helvetica"];',
        '  edge [fontname="Helvetica", fontsize=10];',
    ]

    for node in knowledge_map.get("nodes", []):
        shape, color = NODE_STYLES.get(node.get("type", ""), _DEFAULT_STYLE)
        lines.append(
            f"  {_quote(node['id'])} [label={_quote(node.get('label') or node['id'])}, "
            f'shape={shape}, fillcolor="{color}"];'
        )

    for edge in knowledge_map.get("edges", []):
        attrs: list[str] = []
        if edge.get("label"):
            attrs.append(f"label={_quote(edge['label'])}")
        if edge.get("animated"):
            attrs.append("style=bold")
            attrs.append("penwidth=2")
        suffix = f" [{', '.join(attrs)}]" if attrs else ""
        lines.append(f"  {_quote(edge['source'])} -> {_quote(edge['target'])}{suffix};")

    lines.append("}")
    return "\n".join(lines)
