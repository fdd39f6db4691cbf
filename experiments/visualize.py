from __future__ import annotations

from typing import Optional

import matplotlib.pyplot as plt
import networkx as nx

from render.primitives import DEFAULT_RENDER_CONFIG, DrawOutput, RenderConfig

LEGEND = (("plant", "Plant"), ("warehouse", "Warehouse"), ("customer", "Customer"))


def to_networkx(drawing: DrawOutput) -> nx.DiGraph:
    """Directed graph of what is actually drawn (dangling links are already gone)."""
    G = nx.DiGraph()
    for mark in drawing.marks:
        G.add_node(mark.node_id, type=mark.kind, pos=(mark.x, mark.y), color=mark.color, radius=mark.radius)
    for seg in drawing.segments:
        G.add_edge(seg.source, seg.target, width=seg.width, amount=seg.amount)
    return G


def plot_network(
    drawing: DrawOutput,
    ax: Optional[plt.Axes] = None,
    show: bool = True,
    title: str = "Network Visualization",
    config: RenderConfig = DEFAULT_RENDER_CONFIG,
) -> plt.Axes:
    G = to_networkx(drawing)
    pos = nx.get_node_attributes(G, "pos")
    types = nx.get_node_attributes(G, "type")

    if ax is None:
        plt.figure(figsize=(8, 8))
        ax = plt.gca()

    # Edges first so marks sit on top
    nx.draw_networkx_edges(
        G,
        pos,
        ax=ax,
        width=[d["width"] for _, _, d in G.edges(data=True)],
        edge_color=config.link_color,
        arrows=False,
    )

    known = {kind for kind, _ in LEGEND}
    for kind, label in LEGEND:
        nodelist = [n for n, t in types.items() if t == kind]
        if not nodelist:
            continue
        nx.draw_networkx_nodes(
            G,
            pos,
            ax=ax,
            nodelist=nodelist,
            node_color=[G.nodes[n]["color"] for n in nodelist],
            # matplotlib sizes are areas in points^2
            node_size=[G.nodes[n]["radius"] ** 2 for n in nodelist],
            label=label,
        )
    others = [n for n, t in types.items() if t not in known]
    if others:
        nx.draw_networkx_nodes(
            G,
            pos,
            ax=ax,
            nodelist=others,
            node_color=config.fallback_color,
            node_size=[G.nodes[n]["radius"] ** 2 for n in others],
            label="Other",
        )

    dx, dy = config.label_offset
    label_pos = {n: (x + dx, y + dy) for n, (x, y) in pos.items()}
    nx.draw_networkx_labels(G, label_pos, ax=ax, font_size=9)

    if G.number_of_nodes():
        ax.legend()
    ax.set_title(title)
    ax.axis("off")
    plt.tight_layout()
    if show:
        plt.show()
    return ax
