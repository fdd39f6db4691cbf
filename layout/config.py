from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class LayoutConfig:
    # Forces
    repulsion_strength: float = -1000.0  # negative pushes nodes apart
    link_distance: float = 100.0
    center: tuple[float, float] = (300.0, 300.0)  # middle of the 600x600 canvas
    center_strength: float = 1.0
    distance_min: float = 1.0

    # Schedule: fixed step count, no convergence test
    iterations: int = 300
    alpha: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 1.0 - 0.001 ** (1.0 / 300.0)
    alpha_target: float = 0.0
    velocity_decay: float = 0.4

    # Initial placement (phyllotaxis spiral) and jitter
    initial_radius: float = 10.0
    initial_angle: float = math.pi * (3.0 - math.sqrt(5.0))
    seed: int = 0

    def validate(self) -> None:
        # 0 is allowed: the initial spiral placement is kept as is.
        it = self.iterations
        if isinstance(it, bool) or not isinstance(it, (int, float)) or not float(it).is_integer() or it < 0:
            raise ValueError("iterations must be a non-negative integer")
        if not self.link_distance > 0:
            raise ValueError("link_distance must be > 0")
        if self.distance_min < 0:
            raise ValueError("distance_min must be >= 0")
        for name in ("alpha_decay", "velocity_decay"):
            v = float(getattr(self, name))
            if not 0.0 <= v <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]")
        if len(self.center) != 2 or not all(math.isfinite(float(c)) for c in self.center):
            raise ValueError("center must be a finite (x, y) pair")
