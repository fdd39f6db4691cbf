from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class NodeKind(str, Enum):
    PLANT = "plant"
    WAREHOUSE = "warehouse"
    CUSTOMER = "customer"


# Visual radius basis per kind (before the mark scale is applied).
NODE_SIZES: dict[str, float] = {
    NodeKind.PLANT.value: 10.0,
    NodeKind.WAREHOUSE.value: 8.0,
    NodeKind.CUSTOMER.value: 6.0,
}


@dataclass
class Node:
    """
    One vertex of the shipping network.

    `position` stays None until the layout step assigns it. Velocities never
    leave the force simulator, which keeps them in its own arrays.
    """

    node_id: str
    kind: str
    size: float
    position: Optional[tuple[float, float]] = None

    @classmethod
    def of_kind(cls, node_id: str, kind: NodeKind) -> "Node":
        return cls(node_id=node_id, kind=kind.value, size=NODE_SIZES[kind.value])


@dataclass(frozen=True)
class Link:
    source: str
    target: str
    amount: float


@dataclass
class Graph:
    """
    Nodes keyed by id (first-seen order) plus the ordered list of flow links.

    Links are not guaranteed to resolve: a flow may reference a warehouse that
    was never opened. Such links stay in `links` and are skipped when drawing.
    """

    nodes: dict[str, Node] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)
    collisions: list[str] = field(default_factory=list)

    def nodes_of_kind(self, kind: str) -> list[Node]:
        return [n for n in self.nodes.values() if n.kind == kind]

    def resolves(self, link: Link) -> bool:
        return link.source in self.nodes and link.target in self.nodes

    def resolved_links(self) -> list[Link]:
        return [link for link in self.links if self.resolves(link)]

    def dangling_links(self) -> list[Link]:
        return [link for link in self.links if not self.resolves(link)]

    def throughput(self) -> dict[str, float]:
        """Sum of incident flow amounts per node id (dangling links included)."""
        totals: dict[str, float] = defaultdict(float)
        for link in self.links:
            totals[link.source] += float(link.amount)
            totals[link.target] += float(link.amount)
        return {node_id: totals.get(node_id, 0.0) for node_id in self.nodes}
