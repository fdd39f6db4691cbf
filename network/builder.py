from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Union

from network.model import Graph, Link, Node, NodeKind
from network.schema import ShippingPlan, parse_shipping_plan, parse_warehouses_opened

logger = logging.getLogger(__name__)


def build_graph(
    shipping_plan: Union[ShippingPlan, Mapping[str, Any]],
    warehouses_opened: Iterable[Any],
    *,
    namespace_ids: bool = False,
) -> Graph:
    """
    Builds the plant -> warehouse -> customer graph for one solved plan.

    - plants are registered lazily from plant_to_warehouse (first seen wins)
    - every opened warehouse is registered unconditionally (overwrites)
    - customers are registered lazily from warehouse_to_customer
    - links: warehouse->customer first, then plant->warehouse (draw order only)

    Ids share one namespace, so a plant and a customer called "X" end up as a
    single node. Such ids are listed in `Graph.collisions`. Pass
    `namespace_ids=True` to prefix every id with its kind instead.

    Raises ShippingPlanError when the inputs have the wrong shape (a section
    that is not a list, or `warehouses_opened` given as a single string).
    """
    plan = shipping_plan if isinstance(shipping_plan, ShippingPlan) else parse_shipping_plan(shipping_plan)
    opened = parse_warehouses_opened(warehouses_opened)

    def key(kind: NodeKind, raw: str) -> str:
        return f"{kind.value}:{raw}" if namespace_ids else raw

    g = Graph()
    seen_kinds: dict[str, set[str]] = {}

    def register(node_id: str, kind: NodeKind, overwrite: bool = False) -> None:
        seen_kinds.setdefault(node_id, set()).add(kind.value)
        if overwrite or node_id not in g.nodes:
            g.nodes[node_id] = Node.of_kind(node_id, kind)

    for rec in plan.plant_to_warehouse:
        register(key(NodeKind.PLANT, rec.source), NodeKind.PLANT)

    for wid in opened:
        register(key(NodeKind.WAREHOUSE, wid), NodeKind.WAREHOUSE, overwrite=True)

    for rec in plan.warehouse_to_customer:
        register(key(NodeKind.CUSTOMER, rec.target), NodeKind.CUSTOMER)
        g.links.append(
            Link(
                source=key(NodeKind.WAREHOUSE, rec.source),
                target=key(NodeKind.CUSTOMER, rec.target),
                amount=rec.amount,
            )
        )

    for rec in plan.plant_to_warehouse:
        g.links.append(
            Link(
                source=key(NodeKind.PLANT, rec.source),
                target=key(NodeKind.WAREHOUSE, rec.target),
                amount=rec.amount,
            )
        )

    g.collisions = [node_id for node_id, kinds in seen_kinds.items() if len(kinds) > 1]
    if g.collisions:
        logger.warning(
            "Ids shared across node kinds were merged into one node: %s",
            ", ".join(g.collisions),
        )

    for link in g.dangling_links():
        logger.debug("Dangling link %s -> %s (amount=%s)", link.source, link.target, link.amount)

    return g
