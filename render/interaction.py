from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from network.model import Graph, Node
from render.primitives import DrawOutput, NodeMark


class HoverPhase(str, Enum):
    IDLE = "idle"
    HOVERING = "hovering"


@dataclass(frozen=True)
class Tooltip:
    node_id: str
    kind: str
    x: float
    y: float
    throughput: float


class HoverState:
    """
    Idle <-> Hovering(node) state machine for the node marks of one drawing.

    Marks carry their node id, so resolving a pointer event never compares
    coordinates; two nodes stacked on the same spot stay distinguishable.
    At most one node is hovered at a time.
    """

    def __init__(self, graph: Graph, drawing: DrawOutput):
        self.graph = graph
        self.drawing = drawing
        self.node: Optional[Node] = None
        self._throughput = graph.throughput()

    @property
    def phase(self) -> HoverPhase:
        return HoverPhase.IDLE if self.node is None else HoverPhase.HOVERING

    def over(self, node_id: str) -> bool:
        """Pointer entered the mark of `node_id`. Unknown ids are ignored."""
        node = self.graph.nodes.get(node_id)
        if node is None:
            return False
        self.node = node
        return True

    def out(self) -> None:
        self.node = None

    def hit_test(self, x: float, y: float) -> Optional[NodeMark]:
        # Last drawn mark is on top.
        for mark in reversed(self.drawing.marks):
            if mark.contains(x, y):
                return mark
        return None

    def pointer_move(self, x: float, y: float) -> HoverPhase:
        mark = self.hit_test(x, y)
        if mark is None:
            self.out()
        elif self.node is None or self.node.node_id != mark.node_id:
            self.over(mark.node_id)
        return self.phase

    def tooltip(self) -> Optional[Tooltip]:
        if self.node is None:
            return None
        mark = self.drawing.mark_for(self.node.node_id)
        x, y = (mark.x, mark.y) if mark is not None else (0.0, 0.0)
        return Tooltip(
            node_id=self.node.node_id,
            kind=self.node.kind,
            x=x,
            y=y,
            throughput=self._throughput.get(self.node.node_id, 0.0),
        )
