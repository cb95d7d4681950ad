from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from .models import Creator, LibraryItem

AUTHOR_COLOR = "#22c55e"
TAG_COLOR = "#f97316"
PAPER_COLOR = "#3b82f6"
AUTHOR_LINK_COLOR = "rgba(34, 197, 94, 0.3)"
TAG_LINK_COLOR = "rgba(249, 115, 22, 0.3)"


@dataclass
class GraphNode:
    id: str
    name: str
    type: str  # "paper" | "author" | "tag"
    val: int
    color: str
    item_id: Optional[str] = None


@dataclass
class GraphLink:
    source: str
    target: str
    color: Optional[str] = None


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphLink] = field(default_factory=list)


def author_key(creator: Creator) -> str:
    """``Smith, John`` and ``Smith, J.`` share the key ``smith|j``."""
    last = (creator.last_name or "").strip().lower()
    first = (creator.first_name or "").strip().lower()
    return f"{last}|{first[:1]}"


def author_display_name(creator: Creator) -> str:
    last = (creator.last_name or "").strip() or "Unknown"
    first = (creator.first_name or "").strip()
    if len(first) > 2:
        return f"{last}, {first}"
    if first:
        return f"{last}, {first.upper()}."
    return last


def build_graph_data(items: Iterable[LibraryItem]) -> GraphData:
    """Paper, author and tag nodes with paper-author and paper-tag links.

    Authors are merged on :func:`author_key`; the variant with the longest
    first name supplies the display name.
    """
    items = list(items)
    graph = GraphData()
    authors: Dict[str, Dict] = {}
    tags: List[str] = []

    for item in items:
        for creator in item.creators:
            key = author_key(creator)
            if key == "|":
                continue
            score = len(creator.first_name or "")
            existing = authors.get(key)
            if existing is None or score > existing["score"]:
                authors[key] = {
                    "id": f"author_{key}",
                    "name": author_display_name(creator),
                    "score": score,
                }
        for tag in item.tags:
            t = tag.strip().lower()
            if t and t not in tags:
                tags.append(t)

    for author in authors.values():
        graph.nodes.append(GraphNode(author["id"], author["name"], "author", 8, AUTHOR_COLOR))
    for tag in tags:
        graph.nodes.append(GraphNode(f"tag_{tag}", f"#{tag}", "tag", 6, TAG_COLOR))

    for item in items:
        paper = GraphNode(
            id=f"paper_{item.id}",
            name=item.title or "Untitled",
            type="paper",
            val=10,
            color=PAPER_COLOR,
            item_id=item.id,
        )
        graph.nodes.append(paper)
        for creator in item.creators:
            author = authors.get(author_key(creator))
            if author:
                graph.links.append(GraphLink(paper.id, author["id"], AUTHOR_LINK_COLOR))
        for tag in item.tags:
            t = tag.strip().lower()
            if t:
                graph.links.append(GraphLink(paper.id, f"tag_{t}", TAG_LINK_COLOR))

    return graph


def get_connected_nodes(graph: GraphData, node_id: str) -> Set[str]:
    connected = {node_id}
    for link in graph.links:
        if link.source == node_id:
            connected.add(link.target)
        elif link.target == node_id:
            connected.add(link.source)
    return connected
