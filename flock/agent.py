from __future__ import annotations
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Sequence
import numpy as np

from . import boids
from . import config as C


class Mode(Enum):
    FLOCKING = "flocking"
    SEEKING = "seeking"


@dataclass
class Anchor:
    """Shared point a flock is constrained toward. Agents only read it."""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=float)

    def follow(self, point):
        self.position = np.array(point, dtype=float)


@dataclass
class Target:
    """Point of interest an agent can be sent to. May move between ticks."""
    name: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=float)


@dataclass
class SteeringConfig:
    cohesion_weight: float = C.WEIGHT_COHESION
    separation_weight: float = C.WEIGHT_SEPARATION
    alignment_weight: float = C.WEIGHT_ALIGNMENT
    constrain_weight: float = C.WEIGHT_CONSTRAIN
    avoidance_weight: float = C.WEIGHT_AVOIDANCE
    separation_radius: float = C.SEPARATION_RADIUS
    integration_rate: float = C.INTEGRATION_RATE
    speed: float = C.SPEED
    arrival_threshold: float = C.ARRIVAL_THRESHOLD

    @classmethod
    def from_dict(cls, data: dict) -> "SteeringConfig":
        """Build from the 'steering' section of get_config(). Missing keys keep defaults."""
        weights = data.get('weights', {})
        kwargs = {f"{name}_weight": float(value) for name, value in weights.items()}
        for f in fields(cls):
            if f.name in data:
                kwargs[f.name] = float(data[f.name])
        return cls(**kwargs)

    def weights(self) -> dict:
        return {
            'cohesion': self.cohesion_weight,
            'separation': self.separation_weight,
            'alignment': self.alignment_weight,
            'constrain': self.constrain_weight,
            'avoidance': self.avoidance_weight,
        }


@dataclass
class SteeringTerms:
    cohesion: np.ndarray
    separation: np.ndarray
    alignment: np.ndarray
    constrain: np.ndarray
    avoidance: np.ndarray

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class AvoidanceAccumulator:
    """
    Running sum of (agent position - hit point) contributions and their count.
    Written by the agent's sensor, read and reset by the agent.
    """

    def __init__(self):
        self.total = np.zeros(3)
        self.count = 0

    def add(self, agent_pos: np.ndarray, point) -> None:
        self.total += agent_pos - np.asarray(point, dtype=float)
        self.count += 1

    def reset(self) -> None:
        self.total = np.zeros(3)
        self.count = 0

    def direction(self) -> np.ndarray:
        return boids.avoidance(self.total, self.count)


class Agent:
    """
    One flocking entity.

    Flocking mode blends cohesion, separation, alignment, anchor constrain and
    obstacle avoidance into a target direction and slerps the heading toward
    it. Seeking mode steers at an assigned target and falls back to flocking
    on arrival.
    """

    def __init__(self,
                 agent_id: str,
                 position=None,
                 heading=None,
                 config: SteeringConfig | None = None,
                 speed: float | None = None):
        self.id = agent_id
        self.config = config or SteeringConfig()
        self.position = np.zeros(3) if position is None else np.array(position, dtype=float)
        h = boids.normalize(boids.WORLD_FORWARD if heading is None else heading)
        self.heading = h if h.any() else boids.WORLD_FORWARD.copy()
        self.orientation = boids.look_rotation(self.heading)
        self.speed = self.config.speed if speed is None else float(speed)
        self.mode = Mode.FLOCKING
        self.target: Optional[Target] = None
        self.avoid = AvoidanceAccumulator()
        self.flock_name: Optional[str] = None

    def __repr__(self):
        return f"Agent({self.id!r}, mode={self.mode.value}, pos={np.round(self.position, 2).tolist()})"

    @property
    def velocity(self) -> np.ndarray:
        # Unit direction, scaled by speed only when integrating
        return self.heading

    @property
    def forward(self) -> np.ndarray:
        return self.orientation[2]

    @property
    def up(self) -> np.ndarray:
        return self.orientation[1]

    @property
    def right(self) -> np.ndarray:
        return self.orientation[0]

    # -----------------------------
    # Sensor protocol
    # -----------------------------
    def accumulate_avoidance(self, point) -> None:
        self.avoid.add(self.position, point)

    def reset_avoidance(self) -> None:
        self.avoid.reset()

    # -----------------------------
    # State machine
    # -----------------------------
    def assign_target(self, target: Target) -> None:
        if target is None:
            raise ValueError(f"{self.id}: assign_target requires a target")
        self.target = target
        self.mode = Mode.SEEKING

    def clear_target(self) -> None:
        self.target = None
        self.mode = Mode.FLOCKING

    # -----------------------------
    # Steering
    # -----------------------------
    def _others(self, siblings: Sequence) -> list:
        return [s for s in siblings if s is not self and s.id != self.id]

    def steering_terms(self, siblings: Sequence = (), anchor: Anchor | None = None) -> SteeringTerms:
        others = self._others(siblings)
        positions = [s.position for s in others]
        return SteeringTerms(
            cohesion=boids.cohesion(self.position, positions),
            separation=boids.separation(self.position, positions, self.config.separation_radius),
            alignment=boids.alignment([s.velocity for s in others]),
            constrain=boids.constrain(self.position, None if anchor is None else anchor.position),
            avoidance=self.avoid.direction(),
        )

    def steer(self, siblings: Sequence = (), anchor: Anchor | None = None) -> np.ndarray:
        """Blended flocking direction (weighted sum, not unit length)."""
        terms = self.steering_terms(siblings, anchor)
        return boids.blend(terms.as_dict(), self.config.weights())

    def tick(self, dt: float, siblings: Sequence = (), anchor: Anchor | None = None) -> bool:
        """
        Advance one step. Returns True on the tick the agent reaches its target.
        """
        if self.mode is Mode.SEEKING and self.target is None:
            self.mode = Mode.FLOCKING

        factor = self.config.integration_rate * dt
        if self.mode is Mode.FLOCKING:
            desired = self.steer(siblings, anchor)
            self._set_heading(boids.slerp(self.heading, desired, factor))
            self._integrate(dt)
            return False

        desired = boids.normalize(self.target.position - self.position)
        # Leans at the target but smooths through the previous heading
        self._set_heading(boids.slerp(desired, self.heading, factor))
        self._integrate(dt)

        if np.linalg.norm(self.position - self.target.position) < self.config.arrival_threshold:
            self.clear_target()
            return True
        return False

    def _set_heading(self, direction: np.ndarray) -> None:
        h = boids.normalize(direction)
        if h.any():
            self.heading = h

    def _integrate(self, dt: float) -> None:
        self.position = self.position + self.heading * self.speed * dt
        self.orientation = boids.look_rotation(self.heading)

    def snapshot(self) -> "AgentSnapshot":
        return AgentSnapshot(self.id, self.position.copy(), self.heading.copy())


@dataclass(frozen=True)
class AgentSnapshot:
    """Read-only copy of an agent's neighbor-visible state."""
    id: str
    position: np.ndarray
    velocity: np.ndarray
