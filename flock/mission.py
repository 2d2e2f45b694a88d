from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import numpy as np

from .agent import Target


@dataclass(order=True)
class Task:
    priority: int
    task_id: str = field(compare=False)
    target: Target = field(compare=False, default=None)
    assigned_to: Optional[str] = field(compare=False, default=None)
    completed: bool = field(compare=False, default=False)

    def __post_init__(self):
        if self.target is None:
            self.target = Target(self.task_id)

    def mark_done(self):
        self.completed = True
        self.assigned_to = None


class MissionPlanner:
    """
    Minimal target dispatcher. Pending tasks sit in a min-heap keyed by
    priority; each one goes to the nearest agent that is currently flocking.
    A task is done only when its agent arrives within arrival threshold of
    the task target.
    """

    def __init__(self, tasks: List[Task] | None = None):
        self._tasks: Dict[str, Task] = {}
        self._queue: list[tuple[int, str]] = []

        for t in tasks or []:
            self.add_task(t)

    # -----------------------------
    # Task management
    # -----------------------------
    def add_task(self, task: Task):
        self._tasks[task.task_id] = task
        heapq.heappush(self._queue, (task.priority, task.task_id))

    def pending_tasks(self) -> List[Task]:
        return [t for t in self._tasks.values() if not t.completed]

    def task_for(self, agent_id: str) -> Optional[Task]:
        for t in self._tasks.values():
            if t.assigned_to == agent_id and not t.completed:
                return t
        return None

    # -----------------------------
    # Assignment logic
    # -----------------------------
    def assign(self, flock) -> List[tuple[str, str]]:
        """
        Hand queued tasks to idle agents, highest priority first.
        Returns (task_id, agent_id) pairs.
        """
        idle = [i for i in flock.idle_ids() if self.task_for(i) is None]
        assigned = []
        while idle and self._queue:
            _, tid = heapq.heappop(self._queue)
            task = self._tasks.get(tid)
            if task is None or task.completed or task.assigned_to:
                continue
            agent_id = min(idle, key=lambda i: np.linalg.norm(flock.get(i).position - task.target.position))
            idle.remove(agent_id)
            flock.assign_target(agent_id, task.target)
            task.assigned_to = agent_id
            assigned.append((task.task_id, agent_id))
        return assigned

    def release(self, agent_id: str) -> Optional[Task]:
        """Requeue the task held by an agent that left the flock or was retargeted."""
        task = self.task_for(agent_id)
        if task is not None:
            task.assigned_to = None
            heapq.heappush(self._queue, (task.priority, task.task_id))
        return task

    def update_progress(self, flock, arrived_ids: Iterable[str]) -> List[Task]:
        """
        Mark tasks complete for agents that arrived at the task's own target.
        An agent that arrived somewhere else was retargeted, so its task goes
        back in the queue.
        """
        done = []
        for agent_id in arrived_ids:
            task = self.task_for(agent_id)
            if task is None:
                continue
            agent = flock.get(agent_id)
            if np.linalg.norm(agent.position - task.target.position) < agent.config.arrival_threshold:
                task.mark_done()
                done.append(task)
            else:
                self.release(agent_id)
        return done
