#!/usr/bin/env python3
"""
Quick demo: lay out and draw a solved shipping plan.
"""

import argparse
import os
import sys

# Add project root to path
if __package__ is None:
    _ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if _ROOT not in sys.path:
        sys.path.insert(0, _ROOT)

import numpy as np  # noqa: E402

from experiments.visualize import plot_network  # noqa: E402
from layout.config import LayoutConfig  # noqa: E402
from render.pipeline import render_network  # noqa: E402

SMALL_PLAN = {
    "plant_to_warehouse": [{"plant": "P1", "warehouse": "W1", "amount": 100}],
    "warehouse_to_customer": [{"warehouse": "W1", "customer": "C1", "amount": 40}],
}


def synthetic_plan(seed: int, n_plants: int = 3, n_warehouses: int = 5, n_customers: int = 20):
    """Random plan where every customer is served by one opened warehouse."""
    rng = np.random.default_rng(seed)
    opened = [f"W{i}" for i in range(n_warehouses) if rng.random() < 0.7] or ["W0"]

    w2c = []
    inbound = {w: 0.0 for w in opened}
    for i in range(n_customers):
        w = opened[int(rng.integers(0, len(opened)))]
        amount = float(rng.integers(5, 120))
        inbound[w] += amount
        w2c.append({"warehouse": w, "customer": f"C{i}", "amount": amount})

    p2w = []
    for w, total in inbound.items():
        if total <= 0:
            continue
        p = f"P{int(rng.integers(0, n_plants))}"
        p2w.append({"plant": p, "warehouse": w, "amount": total})

    return {"plant_to_warehouse": p2w, "warehouse_to_customer": w2c}, opened


def main():
    parser = argparse.ArgumentParser(description="Shipping network layout demo.")
    parser.add_argument("--synthetic", action="store_true", help="Use a random plan instead of the 3-node example")
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--iterations", type=int, default=300)
    parser.add_argument("--no-show", action="store_true", help="Skip opening the matplotlib window")
    args = parser.parse_args()

    if args.synthetic:
        plan, opened = synthetic_plan(args.seed)
    else:
        plan, opened = SMALL_PLAN, ["W1"]

    result = render_network(plan, opened, LayoutConfig(iterations=args.iterations, seed=args.seed))
    g = result.graph
    print(f"Graph: {len(g.nodes)} nodes, {len(g.links)} links ({len(g.dangling_links())} dangling)")
    for mark in result.drawing.marks:
        print(f"  {mark.node_id:>6} {mark.kind:<10} x={mark.x:8.2f} y={mark.y:8.2f}")
    for seg in result.drawing.segments:
        print(f"  {seg.source} -> {seg.target}: amount={seg.amount:g} width={seg.width:.3f}")

    plot_network(result.drawing, show=not args.no_show)
    if not args.no_show:
        print("Network visualization opened!")


if __name__ == "__main__":
    main()
