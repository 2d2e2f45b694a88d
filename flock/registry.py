from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional
import numpy as np

from . import config as C
from .agent import Agent, Anchor, Mode, SteeringConfig, Target
from .sensor import CastFn, ObstacleSensor


class Flock:
    """
    Explicit registry of sibling agents sharing one anchor.

    Agents are kept in an ordered id list plus an id -> agent index. tick()
    updates them in that order. By default neighbor reads are
    same-generation: an agent later in the order sees siblings that have
    already moved this tick. With snapshot_neighbors=True every agent reads
    the state of the previous completed tick instead, which makes the result
    independent of update order.
    """

    def __init__(self,
                 name: str,
                 anchor: Anchor | None = None,
                 config: SteeringConfig | None = None,
                 rng: np.random.Generator | None = None,
                 seed: int | None = None,
                 snapshot_neighbors: bool = False):
        self.name = name
        self.anchor = anchor
        self.config = config or SteeringConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.snapshot_neighbors = snapshot_neighbors
        self._order: List[str] = []
        self._agents: Dict[str, Agent] = {}
        self._sensors: Dict[str, ObstacleSensor] = {}

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Agent]:
        return (self._agents[i] for i in self._order)

    def __contains__(self, agent_id) -> bool:
        return agent_id in self._agents

    @property
    def ids(self) -> List[str]:
        return list(self._order)

    @property
    def agents(self) -> List[Agent]:
        return [self._agents[i] for i in self._order]

    # -----------------------------
    # Membership
    # -----------------------------
    def add_agent(self, agent: Agent, cast: CastFn | None = None) -> Agent:
        if agent.flock_name is not None:
            raise ValueError(f"{agent.id} already belongs to flock {agent.flock_name!r}")
        if agent.id in self._agents:
            raise ValueError(f"Duplicate agent id {agent.id!r} in flock {self.name!r}")
        agent.flock_name = self.name
        self._order.append(agent.id)
        self._agents[agent.id] = agent
        if cast is not None:
            self._sensors[agent.id] = ObstacleSensor(agent, cast)
        return agent

    def remove_agent(self, agent_id: str) -> Agent:
        """
        Detach an agent and its sensor. The agent keeps its last state.

        The flock does not own the world or the mission, so a full removal is
            flock.remove_agent(agent_id)
            env.forget(agent_id)        # drop overlap state, no stale exit
            planner.release(agent_id)   # requeue its task, if any
        """
        self._require(agent_id)
        agent = self._agents.pop(agent_id)
        self._order.remove(agent_id)
        self._sensors.pop(agent_id, None)
        agent.flock_name = None
        agent.reset_avoidance()
        print(f"[Flock] {self.name}: removed {agent_id}, {len(self._order)} left")
        return agent

    def get(self, agent_id: str) -> Agent:
        self._require(agent_id)
        return self._agents[agent_id]

    def _require(self, agent_id: str) -> None:
        if agent_id not in self._agents:
            raise KeyError(f"No agent {agent_id!r} in flock {self.name!r}")

    def sensor(self, agent_id: str) -> Optional[ObstacleSensor]:
        self._require(agent_id)
        return self._sensors.get(agent_id)

    def siblings(self, agent_id: str) -> List[Agent]:
        self._require(agent_id)
        return [self._agents[i] for i in self._order if i != agent_id]

    def spawn(self, count: int, cast: CastFn | None = None, prefix: str = "boid") -> List[Agent]:
        """
        Create agents at random positions inside the spawn box (offset from
        the anchor), each facing a random look point with a random speed.
        """
        origin = np.zeros(3) if self.anchor is None else self.anchor.position
        box = np.asarray(C.SPAWN_BOX, dtype=float)
        lo, hi = C.SPAWN_SPEED_RANGE
        spawned = []
        n = len(self._order)
        while len(spawned) < count:
            agent_id = f"{prefix}{n}"
            n += 1
            if agent_id in self._agents:
                continue
            pos = origin + self.rng.uniform(0.0, 1.0, 3) * box
            look = self.rng.uniform(-C.SPAWN_LOOK_RANGE, C.SPAWN_LOOK_RANGE, 3)
            speed = float(self.rng.uniform(lo, hi))
            agent = Agent(agent_id, pos, look - pos, self.config, speed=speed)
            spawned.append(self.add_agent(agent, cast))
        print(f"[Flock] {self.name}: spawned {count} agents")
        return spawned

    # -----------------------------
    # Events and commands
    # -----------------------------
    def dispatch(self, events: Iterable) -> int:
        """Route overlap events to sensors. Events for other flocks are skipped."""
        handled = 0
        for event in events:
            sensor = self._sensors.get(event.agent_id)
            if sensor is None:
                continue
            sensor.handle(event.kind)
            handled += 1
        return handled

    def assign_target(self, agent_id: str, target: Target) -> None:
        self.get(agent_id).assign_target(target)

    def idle_ids(self) -> List[str]:
        return [i for i in self._order if self._agents[i].mode is Mode.FLOCKING]

    def centroid(self) -> np.ndarray:
        if not self._order:
            return np.zeros(3)
        return np.mean([a.position for a in self], axis=0)

    # -----------------------------
    # Scheduling
    # -----------------------------
    def tick(self, dt: float) -> List[str]:
        """Advance every agent once. Returns ids that reached their target."""
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if self.snapshot_neighbors:
            view = [a.snapshot() for a in self]
        else:
            view = self.agents
        arrived = []
        for agent in self.agents:
            if agent.tick(dt, view, self.anchor):
                arrived.append(agent.id)
        return arrived
