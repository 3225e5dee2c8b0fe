"""
Concept maps.

The LLM proposes nodes and links for a document; whatever comes back is
validated onto an 800x600 canvas before it is returned.  When the LLM is
disabled, fails or answers with something that is not a map, the first
keywords are laid out on a grid instead.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from app.services.errors import EmptyTextError, require_text
from app.services.llm_client import OllamaLLMService
from app.utils.helpers import clamp

logger = logging.getLogger(__name__)

NODE_TYPES = ("main", "method", "keyword", "concept", "result")

X_BOUNDS = (60.0, 740.0)
Y_BOUNDS = (60.0, 540.0)
MIN_NODE_DISTANCE = 120.0

GRID_COLUMNS = 3
GRID_SPACING = 180
GRID_START = (150, 150)
GRID_MAX = (700, 500)
FALLBACK_NODE_LIMIT = 8


@dataclass
class ConceptNode:
    id: str
    label: str
    type: str
    x: float
    y: float
    importance: float = 0.6
    description: str = ""


@dataclass
class ConceptLink:
    source: str
    target: str
    label: str = "related to"
    strength: float = 0.5


@dataclass
class ConceptMap:
    nodes: List[ConceptNode] = field(default_factory=list)
    links: List[ConceptLink] = field(default_factory=list)
    source: str = "local"


_CONCEPT_MAP_SYSTEM = (
    "You are an expert at analyzing academic papers and creating concept maps. "
    "You understand research methodologies, key concepts, and how ideas relate "
    "to each other in academic writing. Always respond with valid JSON."
)

_CONCEPT_MAP_PROMPT = """\
Analyze the following document and generate a concept map showing the
relationships between its key concepts, methods, keywords and results.

Document text (first 6000 characters):
---
{text}
---

Keywords found: {keywords}

Return ONLY a JSON object of this shape:
{{
  "nodes": [
    {{"id": "unique_id", "label": "concept name", "type": "main|method|keyword|concept|result",
      "x": 100-700, "y": 100-500, "importance": 0.2-1.0, "description": "short description"}}
  ],
  "links": [
    {{"source": "node id", "target": "node id", "label": "uses|leads to|supports|results in",
      "strength": 0.2-1.0}}
  ]
}}

Create 10-20 nodes, keep nodes at least 120 pixels apart and connect every node.\
"""

_CONCEPT_MAP_RETRY_PROMPT = """\
Return ONLY a JSON object {{"nodes": [...], "links": [...]}} forming a concept map
of these keywords: {keywords}\
"""


def grid_position(index: int) -> "tuple[float, float]":
    x = GRID_START[0] + (index % GRID_COLUMNS) * GRID_SPACING
    y = GRID_START[1] + (index // GRID_COLUMNS) * GRID_SPACING
    return float(min(x, GRID_MAX[0])), float(min(y, GRID_MAX[1]))


def fallback_concept_map(keywords: Sequence[str]) -> ConceptMap:
    """Grid of the first keywords, each linked to the next one."""
    nodes = []
    for index, keyword in enumerate(keywords[:FALLBACK_NODE_LIMIT]):
        x, y = grid_position(index)
        nodes.append(
            ConceptNode(
                id=f"keyword_{index}",
                label=keyword,
                type="keyword",
                x=x,
                y=y,
                importance=0.6,
                description=f"Key concept: {keyword}",
            )
        )
    links = [
        ConceptLink(source=a.id, target=b.id, label="related to", strength=0.5)
        for a, b in zip(nodes, nodes[1:])
    ]
    return ConceptMap(nodes=nodes, links=links, source="local")


def _push_apart(x: float, y: float, placed: List[ConceptNode]) -> "tuple[float, float]":
    """Move (x, y) MIN_NODE_DISTANCE away from any earlier node it crowds."""
    for other in placed:
        dx, dy = x - other.x, y - other.y
        distance = math.hypot(dx, dy)
        if distance >= MIN_NODE_DISTANCE:
            continue
        if distance == 0:
            dx, dy, distance = 1.0, 0.0, 1.0
        x = other.x + dx / distance * MIN_NODE_DISTANCE
        y = other.y + dy / distance * MIN_NODE_DISTANCE
        x = min(max(x, X_BOUNDS[0]), X_BOUNDS[1])
        y = min(max(y, Y_BOUNDS[0]), Y_BOUNDS[1])
    return x, y


def validate_concept_map(raw: Dict[str, Any]) -> ConceptMap:
    """Clamp positions and scores, fix node types, drop dangling links."""
    nodes: List[ConceptNode] = []
    raw_nodes = raw.get("nodes")
    for index, item in enumerate(raw_nodes if isinstance(raw_nodes, list) else []):
        if not isinstance(item, dict):
            continue
        default_x, default_y = grid_position(index)
        x = clamp(item.get("x"), *X_BOUNDS, default=default_x)
        y = clamp(item.get("y"), *Y_BOUNDS, default=default_y)
        x, y = _push_apart(x, y, nodes)

        label = str(item.get("label") or "").strip() or "Unknown Concept"
        node_type = item.get("type") if item.get("type") in NODE_TYPES else "concept"
        nodes.append(
            ConceptNode(
                id=str(item.get("id") or f"node_{index}"),
                label=label,
                type=node_type,
                x=x,
                y=y,
                importance=clamp(item.get("importance"), 0.2, 1.0, 0.6),
                description=str(item.get("description") or f"Concept: {label}"),
            )
        )

    node_ids = {node.id for node in nodes}
    links: List[ConceptLink] = []
    raw_links = raw.get("links")
    for item in raw_links if isinstance(raw_links, list) else []:
        if not isinstance(item, dict):
            continue
        source, target = str(item.get("source", "")), str(item.get("target", ""))
        if source not in node_ids or target not in node_ids:
            continue
        links.append(
            ConceptLink(
                source=source,
                target=target,
                label=str(item.get("label") or "related to"),
                strength=clamp(item.get("strength"), 0.2, 1.0, 0.5),
            )
        )
    return ConceptMap(nodes=nodes, links=links, source="llm")


class ConceptMapBuilder:
    """Builds a concept map from a document and its keywords."""

    PROMPT = _CONCEPT_MAP_PROMPT
    RETRY_PROMPT = _CONCEPT_MAP_RETRY_PROMPT
    SYSTEM = _CONCEPT_MAP_SYSTEM

    def __init__(self, llm: Optional[OllamaLLMService] = None) -> None:
        self.llm = llm

    async def build(self, text: str, keywords: Sequence[str]) -> ConceptMap:
        require_text(text)
        keywords = [k.strip() for k in keywords if k and k.strip()]
        if not keywords:
            raise EmptyTextError("Text and keywords are required")

        if self.llm is None or not self.llm.is_enabled:
            return fallback_concept_map(keywords)

        joined = ", ".join(keywords)
        ok, parsed = await self.llm.generate_json(
            self.PROMPT.format(text=text[:6000], keywords=joined),
            system=self.SYSTEM,
            retry_prompt=self.RETRY_PROMPT.format(keywords=joined),
            max_tokens=2000,
            temperature=0.3,
        )
        if ok and isinstance(parsed, dict) and isinstance(parsed.get("nodes"), list):
            concept_map = validate_concept_map(parsed)
            if concept_map.nodes:
                logger.info(
                    "generate_concept_map: %d nodes, %d links from LLM",
                    len(concept_map.nodes),
                    len(concept_map.links),
                )
                return concept_map

        logger.info("generate_concept_map: falling back to keyword grid")
        return fallback_concept_map(keywords)
