from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import numpy as np

# Collision categories (bit per layer)
DEFAULT = 1 << 0
WATER = 1 << 4
GROUND = 1 << 6
AVOID_MASK = GROUND | DEFAULT


@dataclass
class SphereObstacle:
    center: np.ndarray
    radius: float
    category: int = DEFAULT

    def __post_init__(self):
        self.center = np.asarray(self.center, dtype=float)

    def raycast(self, origin: np.ndarray, direction: np.ndarray, max_distance: float) -> Optional[float]:
        # |o + t d - c|^2 = r^2 with unit d
        oc = origin - self.center
        b = float(np.dot(oc, direction))
        c = float(np.dot(oc, oc)) - self.radius * self.radius
        disc = b * b - c
        if disc < 0.0:
            return None
        root = math.sqrt(disc)
        t = -b - root
        if t < 0.0:
            # Origin inside the sphere: report the exit surface
            t = -b + root
        if t < 0.0 or t > max_distance:
            return None
        return t

    def overlaps(self, center: np.ndarray, radius: float) -> bool:
        return float(np.linalg.norm(center - self.center)) < self.radius + radius


@dataclass
class GroundPlane:
    """Horizontal plane y = height, solid below."""
    height: float = 0.0
    category: int = GROUND

    def raycast(self, origin: np.ndarray, direction: np.ndarray, max_distance: float) -> Optional[float]:
        dy = float(direction[1])
        if abs(dy) < 1e-9:
            return None
        t = (self.height - float(origin[1])) / dy
        if t < 0.0 or t > max_distance:
            return None
        return t

    def overlaps(self, center: np.ndarray, radius: float) -> bool:
        return float(center[1]) - radius < self.height


@dataclass(frozen=True)
class OverlapEvent:
    kind: str        # "enter" | "stay" | "exit"
    agent_id: str


@dataclass
class Environment:
    """
    Static collision world. Provides the ray query used by obstacle sensors
    and turns per-tick probe-volume overlap into enter/stay/exit events.
    """
    obstacles: List = field(default_factory=list)
    _overlapping: Dict[str, bool] = field(default_factory=dict, repr=False)

    def add(self, obstacle) -> None:
        self.obstacles.append(obstacle)

    def cast(self, origin, direction, max_distance: float, mask: int = AVOID_MASK) -> Optional[np.ndarray]:
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)
        length = float(np.linalg.norm(direction))
        if length == 0.0:
            return None
        direction = direction / length
        nearest = None
        for obs in self.obstacles:
            if not obs.category & mask:
                continue
            t = obs.raycast(origin, direction, max_distance)
            if t is not None and (nearest is None or t < nearest):
                nearest = t
        if nearest is None:
            return None
        return origin + direction * nearest

    def is_overlapping(self, center, radius: float) -> bool:
        center = np.asarray(center, dtype=float)
        return any(obs.overlaps(center, radius) for obs in self.obstacles)

    def overlap_events(self, agents: Iterable, probe_radius: float) -> List[OverlapEvent]:
        """
        Compare each agent's probe volume against the world. Emits enter on
        the first overlapping tick, stay on every overlapping tick (including
        the first), and exit on the first clear tick.
        """
        events: List[OverlapEvent] = []
        for agent in agents:
            now = self.is_overlapping(agent.position, probe_radius)
            before = self._overlapping.get(agent.id, False)
            if now and not before:
                events.append(OverlapEvent("enter", agent.id))
            if now:
                events.append(OverlapEvent("stay", agent.id))
            elif before:
                events.append(OverlapEvent("exit", agent.id))
            self._overlapping[agent.id] = now
        return events

    def forget(self, agent_id: str) -> None:
        self._overlapping.pop(agent_id, None)
