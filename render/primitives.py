from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from network.model import Graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    colors: tuple[tuple[str, str], ...] = (
        ("plant", "#1f77b4"),
        ("warehouse", "#ff7f0e"),
        ("customer", "#2ca02c"),
    )
    fallback_color: str = "#000000"
    link_color: str = "#ddd"
    mark_scale: float = 3.0  # radius = node.size * mark_scale
    width_scale: float = 0.5  # stroke width = sqrt(amount) * width_scale
    label_offset: tuple[float, float] = (10.0, 10.0)
    width: int = 600
    height: int = 600


DEFAULT_RENDER_CONFIG = RenderConfig()


@dataclass(frozen=True)
class NodeMark:
    node_id: str
    kind: str
    x: float
    y: float
    radius: float
    color: str

    def contains(self, x: float, y: float) -> bool:
        return (x - self.x) ** 2 + (y - self.y) ** 2 <= self.radius ** 2


@dataclass(frozen=True)
class LinkSegment:
    source: str
    target: str
    x0: float
    y0: float
    x1: float
    y1: float
    width: float
    amount: float
    color: str


@dataclass(frozen=True)
class Label:
    node_id: str
    x: float
    y: float
    text: str


@dataclass
class DrawOutput:
    """Everything a front end needs to paint one frame, in draw order."""

    segments: list[LinkSegment] = field(default_factory=list)
    marks: list[NodeMark] = field(default_factory=list)
    labels: list[Label] = field(default_factory=list)
    width: int = DEFAULT_RENDER_CONFIG.width
    height: int = DEFAULT_RENDER_CONFIG.height

    def mark_for(self, node_id: str) -> NodeMark | None:
        for mark in self.marks:
            if mark.node_id == node_id:
                return mark
        return None


def node_color(kind: str, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> str:
    return dict(config.colors).get(kind, config.fallback_color)


def stroke_width(amount: float, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> float:
    """sqrt(amount) * 0.5, so visual weight grows sub-linearly with volume."""
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount <= 0:
        return 0.0
    return math.sqrt(amount) * config.width_scale


def draw(graph: Graph, config: RenderConfig = DEFAULT_RENDER_CONFIG) -> DrawOutput:
    """
    Maps a positioned graph to drawing primitives.

    A link is drawn only if both endpoint nodes exist and have a position;
    anything else is skipped without error. Nodes still lacking a position
    are drawn at the origin.
    """
    out = DrawOutput(width=config.width, height=config.height)

    for link in graph.links:
        src = graph.nodes.get(link.source)
        dst = graph.nodes.get(link.target)
        if src is None or dst is None or src.position is None or dst.position is None:
            logger.debug("Not drawing link %s -> %s", link.source, link.target)
            continue
        out.segments.append(
            LinkSegment(
                source=src.node_id,
                target=dst.node_id,
                x0=src.position[0],
                y0=src.position[1],
                x1=dst.position[0],
                y1=dst.position[1],
                width=stroke_width(link.amount, config),
                amount=float(link.amount),
                color=config.link_color,
            )
        )

    dx, dy = config.label_offset
    for node in graph.nodes.values():
        x, y = node.position if node.position is not None else (0.0, 0.0)
        out.marks.append(
            NodeMark(
                node_id=node.node_id,
                kind=node.kind,
                x=x,
                y=y,
                radius=node.size * config.mark_scale,
                color=node_color(node.kind, config),
            )
        )
        out.labels.append(Label(node_id=node.node_id, x=x + dx, y=y + dy, text=node.node_id))

    return out
