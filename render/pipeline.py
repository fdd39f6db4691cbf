from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from layout.config import LayoutConfig
from layout.force import layout
from network.builder import build_graph
from network.model import Graph
from network.schema import ShippingPlan
from render.interaction import HoverState
from render.primitives import DEFAULT_RENDER_CONFIG, DrawOutput, RenderConfig, draw


@dataclass
class RenderResult:
    graph: Graph
    drawing: DrawOutput

    def hover(self) -> HoverState:
        return HoverState(self.graph, self.drawing)


def render_network(
    shipping_plan: Union[ShippingPlan, Mapping[str, Any]],
    warehouses_opened: Iterable[Any],
    layout_config: Optional[LayoutConfig] = None,
    render_config: RenderConfig = DEFAULT_RENDER_CONFIG,
    *,
    namespace_ids: bool = False,
) -> RenderResult:
    """
    build -> layout -> draw for one solved plan.

    Nothing is cached between calls: a new plan means a new graph.
    """
    graph = build_graph(shipping_plan, warehouses_opened, namespace_ids=namespace_ids)
    layout(graph, layout_config)
    return RenderResult(graph=graph, drawing=draw(graph, render_config))
