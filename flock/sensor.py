from __future__ import annotations
from typing import Callable, Optional
import numpy as np

from . import config as C
from .environment import AVOID_MASK

# cast(origin, direction, max_distance, mask) -> hit point or None
CastFn = Callable[[np.ndarray, np.ndarray, float, int], Optional[np.ndarray]]


class ObstacleSensor:
    """
    Short-range probes attached to one agent.

    While the agent's probe volume overlaps geometry, each stay event casts
    five rays (forward, up, down, left, right in the agent's frame) and feeds
    every hit point into the agent's avoidance accumulator. A stay with no
    hits, or an exit, clears the accumulator so avoidance never lingers.
    """

    PROBES = ("forward", "up", "down", "left", "right")

    def __init__(self, agent, cast: CastFn,
                 max_distance: float = C.PROBE_DISTANCE,
                 mask: int = AVOID_MASK):
        self.agent = agent
        self._cast = cast
        self._max_distance = max_distance
        self._mask = mask

    @property
    def max_distance(self) -> float:
        return self._max_distance

    @property
    def mask(self) -> int:
        return self._mask

    def probe_directions(self) -> list[np.ndarray]:
        a = self.agent
        return [a.forward, a.up, -a.up, -a.right, a.right]

    # -----------------------------
    # Overlap callbacks
    # -----------------------------
    def on_overlap_enter(self) -> None:
        # Contact is sampled on stay only
        return None

    def on_overlap_stay(self) -> int:
        hits = 0
        origin = self.agent.position
        for direction in self.probe_directions():
            point = self._cast(origin, direction, self._max_distance, self._mask)
            if point is not None:
                self.agent.accumulate_avoidance(point)
                hits += 1
        if hits == 0:
            self.agent.reset_avoidance()
        return hits

    def on_overlap_exit(self) -> None:
        self.agent.reset_avoidance()

    def handle(self, kind: str):
        if kind == "enter":
            return self.on_overlap_enter()
        if kind == "stay":
            return self.on_overlap_stay()
        if kind == "exit":
            return self.on_overlap_exit()
        raise ValueError(f"Unknown overlap event: {kind!r}")
