from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

# Allow running as a script: `python dashboard/network_dashboard.py`
if __package__ is None:  # pragma: no cover
    _ROOT = str(Path(__file__).resolve().parent.parent)
    if _ROOT not in sys.path:
        sys.path.insert(0, _ROOT)

from layout.config import LayoutConfig  # noqa: E402
from network.model import Graph  # noqa: E402
from network.schema import ShippingPlanError, load_service_response  # noqa: E402
from render.pipeline import render_network  # noqa: E402
from render.primitives import DEFAULT_RENDER_CONFIG, DrawOutput  # noqa: E402


def nodes_frame(graph: Graph, drawing: DrawOutput) -> pd.DataFrame:
    throughput = graph.throughput()
    return pd.DataFrame(
        [
            {
                "node_id": m.node_id,
                "kind": m.kind,
                "x": m.x,
                "y": m.y,
                "radius": m.radius,
                "throughput": throughput.get(m.node_id, 0.0),
            }
            for m in drawing.marks
        ],
        columns=["node_id", "kind", "x", "y", "radius", "throughput"],
    )


def flows_frame(drawing: DrawOutput) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"source": s.source, "target": s.target, "amount": s.amount, "width": s.width}
            for s in drawing.segments
        ],
        columns=["source", "target", "amount", "width"],
    )


def build_figure(graph: Graph, drawing: DrawOutput, title: str = "Network Visualization") -> go.Figure:
    df_nodes = nodes_frame(graph, drawing)
    colors = dict(DEFAULT_RENDER_CONFIG.colors)

    fig = px.scatter(
        df_nodes,
        x="x",
        y="y",
        color="kind",
        color_discrete_map=colors,
        size="radius",
        size_max=int(max(df_nodes["radius"].max(), 1.0)) if len(df_nodes) else 30,
        text="node_id",
        hover_name="node_id",
        hover_data={"kind": True, "throughput": ":.2f", "x": False, "y": False, "radius": False},
        title=title,
    )
    fig.update_traces(textposition="top right")

    # One trace per link: plotly has no per-segment width inside a single trace.
    for seg in drawing.segments:
        fig.add_trace(
            go.Scatter(
                x=[seg.x0, seg.x1],
                y=[seg.y0, seg.y1],
                mode="lines",
                line={"color": seg.color, "width": seg.width},
                hoverinfo="skip",
                showlegend=False,
            )
        )
    # Links underneath the marks
    n_links = len(drawing.segments)
    if n_links:
        fig.data = fig.data[-n_links:] + fig.data[:-n_links]

    fig.update_layout(
        width=drawing.width + 200,
        height=drawing.height,
        plot_bgcolor="white",
        xaxis={"visible": False},
        yaxis={"visible": False, "scaleanchor": "x"},
    )
    return fig


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Render a solved shipping plan as an interactive network (Plotly HTML).")
    p.add_argument("--result", type=str, required=True, help="Path to a saved optimization response (JSON)")
    p.add_argument("--outdir", type=str, default="data/plots", help="Directory to write HTML/CSV")
    p.add_argument("--iterations", type=int, default=300)
    p.add_argument("--link-distance", type=float, default=100.0)
    p.add_argument("--strength", type=float, default=-1000.0, help="Many-body strength (negative repels)")
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--strict", action="store_true", help="Fail on malformed flow records or summary fields")
    p.add_argument("--namespace-ids", action="store_true", help="Prefix node ids with their kind")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    result_path = Path(args.result)
    outdir = Path(args.outdir)

    try:
        result = load_service_response(result_path, strict=args.strict)
    except FileNotFoundError:
        print(f"error: no such file: {result_path}")
        raise SystemExit(1)
    except (json.JSONDecodeError, ShippingPlanError) as e:
        print(f"error: could not read {result_path}: {e}")
        raise SystemExit(1)

    cfg = LayoutConfig(
        iterations=args.iterations,
        link_distance=args.link_distance,
        repulsion_strength=args.strength,
        seed=args.seed,
    )
    rendered = render_network(
        result.shipping_plan,
        result.warehouses_opened,
        cfg,
        namespace_ids=args.namespace_ids,
    )
    g = rendered.graph

    print("=== Network Summary ===")
    print(f"status={result.status}")
    if result.objective_value is not None:
        print(f"objective_value={result.objective_value:,.2f}")
    print(f"warehouses_opened={', '.join(result.warehouses_opened)}")
    print(f"nodes={len(g.nodes)} links={len(g.links)} drawn={len(rendered.drawing.segments)}")
    if result.shipping_plan.rejected:
        print(f"rejected_records={len(result.shipping_plan.rejected)}")
    if g.collisions:
        print(f"merged_ids={', '.join(g.collisions)}")

    outdir.mkdir(parents=True, exist_ok=True)
    fig = build_figure(g, rendered.drawing)
    html_out = outdir / f"{result_path.stem}_network.html"
    fig.write_html(html_out)

    flows_out = outdir / f"{result_path.stem}_flows.csv"
    flows_frame(rendered.drawing).to_csv(flows_out, index=False)

    print(f"wrote={html_out}")
    print(f"wrote={flows_out}")


if __name__ == "__main__":
    main()
