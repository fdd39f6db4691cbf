from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Iterator, Optional

import numpy as np

from layout.config import LayoutConfig
from network.model import Graph

logger = logging.getLogger(__name__)


class LayoutError(RuntimeError):
    pass


class LayoutState(str, Enum):
    UNINITIALIZED = "uninitialized"
    JITTERED = "jittered"
    SIMULATING = "simulating"
    FROZEN = "frozen"


class ForceSimulator:
    """
    Synchronous force-directed layout over a `Graph`.

    Each tick applies, in order:
    - many-body repulsion between every pair of nodes
    - centering (shifts the centroid onto `config.center`)
    - a spring along every link whose endpoints both exist
    then damps velocities and moves positions.

    The step count is fixed; there is no convergence test. Positions and
    velocities live in numpy arrays (`pos`, `vel`) while simulating. Only
    positions are written back to the nodes once the layout is frozen.
    """

    def __init__(self, graph: Graph, config: Optional[LayoutConfig] = None):
        self.graph = graph
        self.cfg = config or LayoutConfig()
        self.cfg.validate()
        self.rng = np.random.default_rng(self.cfg.seed)

        self.state = LayoutState.UNINITIALIZED
        self.alpha = float(self.cfg.alpha)
        self.iteration = 0

        self.node_ids = list(graph.nodes)
        index = {node_id: i for i, node_id in enumerate(self.node_ids)}
        n = len(self.node_ids)
        self.pos = np.zeros((n, 2), dtype=np.float64)
        self.vel = np.zeros((n, 2), dtype=np.float64)

        # Springs only for links that resolve; dangling links exert no force.
        resolved = graph.resolved_links()
        self.link_src = np.array([index[link.source] for link in resolved], dtype=np.int64)
        self.link_tgt = np.array([index[link.target] for link in resolved], dtype=np.int64)
        count = np.zeros(n, dtype=np.float64)
        np.add.at(count, self.link_src, 1.0)
        np.add.at(count, self.link_tgt, 1.0)
        if len(resolved):
            cs, ct = count[self.link_src], count[self.link_tgt]
            self.link_bias = cs / (cs + ct)
            self.link_strength = 1.0 / np.minimum(cs, ct)
        else:
            self.link_bias = np.zeros(0)
            self.link_strength = np.zeros(0)

    def _jiggle(self, size=None):
        return (self.rng.random(size) - 0.5) * 1e-6

    def initialize(self) -> None:
        """Places nodes without a usable position on a phyllotaxis spiral."""
        if self.state is not LayoutState.UNINITIALIZED:
            return
        for i, node_id in enumerate(self.node_ids):
            node = self.graph.nodes[node_id]
            if node.position is not None and all(math.isfinite(c) for c in node.position):
                self.pos[i] = node.position
            else:
                radius = self.cfg.initial_radius * math.sqrt(0.5 + i)
                angle = i * self.cfg.initial_angle
                self.pos[i] = (radius * math.cos(angle), radius * math.sin(angle))
        self.state = LayoutState.JITTERED

    # --- forces ---

    def _apply_repulsion(self) -> None:
        n = len(self.node_ids)
        if n < 2:
            return
        # d[i, j] = pos[j] - pos[i]
        dx = self.pos[None, :, 0] - self.pos[:, None, 0]
        dy = self.pos[None, :, 1] - self.pos[:, None, 1]
        off_diag = ~np.eye(n, dtype=bool)

        zero_x = (dx == 0) & off_diag
        if zero_x.any():
            dx[zero_x] = self._jiggle(int(zero_x.sum()))
        zero_y = (dy == 0) & off_diag
        if zero_y.any():
            dy[zero_y] = self._jiggle(int(zero_y.sum()))

        dist2 = dx * dx + dy * dy
        dmin2 = self.cfg.distance_min ** 2
        dist2 = np.where(dist2 < dmin2, np.sqrt(dmin2 * dist2), dist2)
        np.fill_diagonal(dist2, np.inf)

        w = self.cfg.repulsion_strength * self.alpha / dist2
        self.vel[:, 0] += (dx * w).sum(axis=1)
        self.vel[:, 1] += (dy * w).sum(axis=1)

    def _apply_centering(self) -> None:
        if not len(self.node_ids):
            return
        shift = (self.pos.mean(axis=0) - np.asarray(self.cfg.center, dtype=np.float64)) * self.cfg.center_strength
        self.pos -= shift

    def _apply_springs(self) -> None:
        # Sequential on purpose: each link sees velocities updated by earlier links.
        pos, vel = self.pos, self.vel
        rest = float(self.cfg.link_distance)
        for i in range(len(self.link_src)):
            s, t = self.link_src[i], self.link_tgt[i]
            x = pos[t, 0] + vel[t, 0] - pos[s, 0] - vel[s, 0]
            y = pos[t, 1] + vel[t, 1] - pos[s, 1] - vel[s, 1]
            if x == 0:
                x = float(self._jiggle())
            if y == 0:
                y = float(self._jiggle())
            dist = math.hypot(x, y)
            scale = (dist - rest) / dist * self.alpha * self.link_strength[i]
            x *= scale
            y *= scale
            b = self.link_bias[i]
            vel[t, 0] -= x * b
            vel[t, 1] -= y * b
            vel[s, 0] += x * (1.0 - b)
            vel[s, 1] += y * (1.0 - b)

    def tick(self) -> None:
        self.alpha += (self.cfg.alpha_target - self.alpha) * self.cfg.alpha_decay
        self._apply_repulsion()
        self._apply_centering()
        self._apply_springs()
        self.vel *= 1.0 - self.cfg.velocity_decay
        self.pos += self.vel
        self.iteration += 1
        if not np.isfinite(self.pos).all():
            raise LayoutError(f"non-finite node position after iteration {self.iteration}")

    # --- driving the simulation ---

    def steps(self, chunk_size: int = 50) -> Iterator[int]:
        """
        Runs the simulation in chunks, yielding the iteration count after each.

        Abandoning the generator early leaves the graph untouched; positions
        are only written back after the last iteration.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.state is LayoutState.FROZEN:
            return
        self.initialize()
        self.state = LayoutState.SIMULATING
        total = int(self.cfg.iterations)
        while self.iteration < total:
            end = min(self.iteration + chunk_size, total)
            while self.iteration < end:
                self.tick()
            logger.debug("layout: %d/%d iterations, alpha=%.4f", self.iteration, total, self.alpha)
            if self.iteration >= total:
                self._freeze()
            yield self.iteration
        if self.state is not LayoutState.FROZEN:
            self._freeze()

    def run(self) -> Graph:
        for _ in self.steps(chunk_size=max(int(self.cfg.iterations), 1)):
            pass
        return self.graph

    def _freeze(self) -> None:
        for i, node_id in enumerate(self.node_ids):
            node = self.graph.nodes[node_id]
            node.position = (float(self.pos[i, 0]), float(self.pos[i, 1]))
        self.state = LayoutState.FROZEN


def layout(graph: Graph, config: Optional[LayoutConfig] = None) -> Graph:
    """Assigns a finite position to every node of `graph` (in place) and returns it."""
    return ForceSimulator(graph, config).run()
