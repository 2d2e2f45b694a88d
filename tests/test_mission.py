import numpy as np
from flock.agent import Agent, Anchor, Mode, Target
from flock.environment import Environment, GroundPlane, OverlapEvent
from flock.mission import MissionPlanner, Task
from flock.registry import Flock


def make_flock():
    flock = Flock("f", anchor=Anchor(np.zeros(3)))
    flock.add_agent(Agent("near", np.array([1.0, 0, 0])))
    flock.add_agent(Agent("far", np.array([50.0, 0, 0])))
    return flock

def test_nearest_idle_agent_gets_task():
    flock = make_flock()
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.array([0.0, 0, 0])))])
    assert planner.assign(flock) == [("t0", "near")]
    assert flock.get("near").mode is Mode.SEEKING
    assert flock.get("far").mode is Mode.FLOCKING

def test_priority_order():
    flock = make_flock()
    planner = MissionPlanner([
        Task(5, "low", Target("low", np.array([1.0, 0, 0]))),
        Task(1, "high", Target("high", np.array([1.0, 0, 0]))),
    ])
    assigned = dict(planner.assign(flock))
    assert assigned["high"] == "near"
    assert assigned["low"] == "far"

def test_busy_agents_are_skipped():
    flock = make_flock()
    flock.assign_target("near", Target("other", np.zeros(3)))
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.zeros(3)))])
    assert planner.assign(flock) == [("t0", "far")]
    assert planner.assign(flock) == []

def test_progress_marks_done():
    flock = make_flock()
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.zeros(3)))])
    planner.assign(flock)
    flock.get("near").position = np.array([0.1, 0, 0])
    done = planner.update_progress(flock, ["near", "far"])
    assert [t.task_id for t in done] == ["t0"]
    assert planner.pending_tasks() == []

def test_retargeted_arrival_does_not_complete_task():
    flock = Flock("f")
    flock.add_agent(Agent("a", np.zeros(3), np.array([1.0, 0, 0])))
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.array([50.0, 0, 0])))])
    assert planner.assign(flock) == [("t0", "a")]
    flock.assign_target("a", Target("other", np.array([0.2, 0, 0])))
    arrived = flock.tick(1.0 / 60.0)
    assert arrived == ["a"]
    assert planner.update_progress(flock, arrived) == []
    task = planner.pending_tasks()[0]
    assert not task.completed
    assert task.assigned_to is None
    assert planner.assign(flock) == [("t0", "a")]
    assert flock.get("a").target is task.target

def test_seek_to_task_target_completes_it():
    flock = Flock("f")
    flock.add_agent(Agent("a", np.zeros(3), np.array([1.0, 0, 0])))
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.array([1.0, 0, 0])))])
    planner.assign(flock)
    done = []
    for _ in range(100):
        done = planner.update_progress(flock, flock.tick(1.0 / 60.0))
        if done:
            break
    assert [t.task_id for t in done] == ["t0"]
    assert planner.task_for("a") is None

def test_release_requeues_task():
    flock = make_flock()
    planner = MissionPlanner([Task(0, "t0", Target("t0", np.zeros(3)))])
    planner.assign(flock)
    env = Environment([GroundPlane(height=0.0)])
    env.overlap_events(flock, 2.0)
    removed = flock.remove_agent("near")
    env.forget("near")
    task = planner.release("near")
    assert task.assigned_to is None
    assert env.overlap_events(flock, 2.0) == [OverlapEvent("stay", "far")]
    removed.position = np.array([1.0, 50.0, 0])
    assert env.overlap_events([removed], 2.0) == []
    assert planner.assign(flock) == [("t0", "far")]

def test_task_default_target():
    task = Task(0, "spot")
    assert task.target.name == "spot"
    assert np.array_equal(task.target.position, np.zeros(3))
