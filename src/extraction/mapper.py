"""Knowledge-map generation from extracted action items."""

from __future__ import annotations

import logging

from src.extraction.contracts import KNOWLEDGE_MAP_CONTRACT
from src.extraction.gateway import CompletionGateway, GatewayError, get_gateway
from src.extraction.models import (
    ActionItemCollection,
    KnowledgeEdge,
    KnowledgeMap,
    KnowledgeNode,
    NodeType,
)
from src.extraction.prompts import build_mapping_prompt, person_node_id

logger = logging.getLogger(__name__)

NO_ITEMS_DESCRIPTION = "No action items provided to generate a knowledge map."


def known_people(items: ActionItemCollection) -> dict[str, str]:
    """Map each casefolded assignee/assigner name to its canonical node id."""
    people: dict[str, str] = {}
    for item in items.action_items:
        for name in (item.assignee, item.assigner):
            if name:
                people.setdefault(name.strip().casefold(), person_node_id(name))
    return people


def _canonicalize_people(kmap: KnowledgeMap, people: dict[str, str]) -> KnowledgeMap:
    """Rewrite person node ids (and edge endpoints) to their deterministic form."""
    renames: dict[str, str] = {}
    nodes: list[KnowledgeNode] = []
    for node in kmap.nodes:
        canonical = people.get(node.label.strip().casefold())
        if node.type is NodeType.PERSON and canonical and canonical != node.id:
            renames[node.id] = canonical
            node = node.model_copy(update={"id": canonical})
        nodes.append(node)

    if not renames:
        return kmap

    edges = [
        edge.model_copy(
            update={
                "source": renames.get(edge.source, edge.source),
                "target": renames.get(edge.target, edge.target),
            }
        )
        for edge in kmap.edges
    ]
    return kmap.model_copy(update={"nodes": nodes, "edges": edges})


def enforce_referential_integrity(kmap: KnowledgeMap) -> KnowledgeMap:
    """Drop duplicate nodes, dangling edges, and duplicate edges.

    The first occurrence of a repeated id wins. Order is otherwise preserved.
    """
    nodes: list[KnowledgeNode] = []
    seen_nodes: set[str] = set()
    for node in kmap.nodes:
        if node.id in seen_nodes:
            logger.warning("Dropping duplicate knowledge-map node %r", node.id)
            continue
        seen_nodes.add(node.id)
        nodes.append(node)

    edges: list[KnowledgeEdge] = []
    seen_edges: set[str] = set()
    for edge in kmap.edges:
        if edge.source not in seen_nodes or edge.target not in seen_nodes:
            logger.warning(
                "Dropping knowledge-map edge %r with dangling endpoint (%s -> %s)",
                edge.id,
                edge.source,
                edge.target,
            )
            continue
        if edge.id in seen_edges:
            logger.warning("Dropping duplicate knowledge-map edge %r", edge.id)
            continue
        seen_edges.add(edge.id)
        edges.append(edge)

    return KnowledgeMap(map_description=kmap.map_description, nodes=nodes, edges=edges)


async def request_knowledge_map(
    items: ActionItemCollection, gateway: CompletionGateway | None = None
) -> KnowledgeMap:
    """Generate a knowledge map from action items, raising on failure.

    An empty collection short-circuits to an explanatory, graph-less map
    without a remote call.

    Raises:
        GatewayError: If the completion service fails or its output is invalid.
    """
    if not items.action_items:
        logger.debug("No action items; skipping knowledge map generation")
        return KnowledgeMap(map_description=NO_ITEMS_DESCRIPTION, nodes=[], edges=[])

    prompt = build_mapping_prompt(items)
    raw_map = await (gateway or get_gateway()).complete(prompt, KNOWLEDGE_MAP_CONTRACT)

    kmap = enforce_referential_integrity(_canonicalize_people(raw_map, known_people(items)))
    logger.info(
        "Generated knowledge map with %d nodes and %d edges", len(kmap.nodes), len(kmap.edges)
    )
    return kmap


async def generate_knowledge_map(
    items: ActionItemCollection, gateway: CompletionGateway | None = None
) -> KnowledgeMap:
    """Generate a knowledge map from action items. Never raises.

    On any failure the error is logged and returned inside
    ``map_description`` with no nodes or edges.
    """
    try:
        return await request_knowledge_map(items, gateway)
    except GatewayError as exc:
        logger.exception("Knowledge map generation failed")
        message = exc.message
    except Exception as exc:
        logger.exception("Knowledge map generation failed unexpectedly")
        message = str(exc) or type(exc).__name__
    return KnowledgeMap(
        map_description=f"Error generating knowledge map: {message}",
        nodes=[],
        edges=[],
    )
