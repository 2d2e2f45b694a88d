import math
import numpy as np
import pytest
from flock.agent import Agent, Anchor, AvoidanceAccumulator, Mode, SteeringConfig, Target

DT = 1.0 / 60.0


def make_agent(agent_id="a", pos=(0, 0, 0), heading=(0, 0, 1), **cfg):
    return Agent(agent_id, np.array(pos, dtype=float), np.array(heading, dtype=float), SteeringConfig(**cfg))

def test_defaults_match_reference_values():
    cfg = SteeringConfig()
    assert cfg.cohesion_weight == 0.2
    assert cfg.separation_weight == 6.0
    assert cfg.alignment_weight == 1.0
    assert cfg.constrain_weight == 2.0
    assert cfg.avoidance_weight == 20.0
    assert cfg.separation_radius == 6.0
    assert cfg.integration_rate == 3.0
    assert cfg.speed == 6.0
    assert cfg.arrival_threshold == 0.3

def test_config_from_dict_partial():
    cfg = SteeringConfig.from_dict({'weights': {'cohesion': 1.5}, 'speed': 2})
    assert cfg.cohesion_weight == 1.5
    assert cfg.speed == 2.0
    assert cfg.separation_weight == 6.0

def test_initial_state():
    a = make_agent(heading=(0, 0, 5))
    assert a.mode is Mode.FLOCKING
    assert a.target is None
    assert np.allclose(a.heading, [0, 0, 1])
    assert a.avoid.count == 0

def test_zero_heading_defaults_forward():
    a = make_agent(heading=(0, 0, 0))
    assert math.isclose(np.linalg.norm(a.heading), 1.0)

def test_heading_unit_after_every_tick():
    rng = np.random.default_rng(3)
    agents = [make_agent(f"a{i}", rng.uniform(-5, 5, 3), rng.uniform(-1, 1, 3)) for i in range(6)]
    anchor = Anchor(np.array([1.0, 2.0, 3.0]))
    for _ in range(120):
        for a in agents:
            a.tick(DT, agents, anchor)
            assert math.isclose(np.linalg.norm(a.heading), 1.0, rel_tol=1e-9)
            assert np.isfinite(a.position).all()

def test_lonely_agent_uses_only_constrain_and_avoid():
    a = make_agent(pos=(0, 0, 0))
    anchor = Anchor(np.array([0, 0, 10.0]))
    terms = a.steering_terms([a], anchor)
    assert not terms.cohesion.any()
    assert not terms.separation.any()
    assert not terms.alignment.any()
    assert np.allclose(a.steer([a], anchor), 2.0 * np.array([0, 0, 1]))
    a.tick(DT, [a], anchor)
    assert np.isfinite(a.position).all()
    assert np.isfinite(a.heading).all()

def test_lonely_agent_without_anchor_keeps_heading():
    a = make_agent(heading=(1, 0, 0))
    a.tick(DT)
    assert np.allclose(a.heading, [1, 0, 0])
    assert np.allclose(a.position, [6.0 * DT, 0, 0])

def test_separation_excludes_self_and_far_siblings():
    a = make_agent("a", pos=(0, 0, 0))
    near = make_agent("b", pos=(0, 0, 2))
    far = make_agent("c", pos=(0, 0, 50))
    terms = a.steering_terms([a, near, far])
    assert np.allclose(terms.separation, [0, 0, -1])
    isolated = a.steering_terms([a, far])
    assert not isolated.separation.any()

def test_weights_zero_except_constrain():
    a = make_agent(cohesion_weight=0, separation_weight=0, alignment_weight=0,
                   avoidance_weight=0, constrain_weight=1.0)
    others = [make_agent("b", pos=(1, 0, 0), heading=(0, 1, 0)),
              make_agent("c", pos=(0, 1, 0), heading=(1, 0, 0))]
    a.accumulate_avoidance(np.array([0, -1.0, 0]))
    anchor = Anchor(np.array([0, 0, -4.0]))
    assert np.allclose(a.steer([a] + others, anchor), [0, 0, -1])

def test_avoidance_is_mean_of_contributions():
    a = make_agent(pos=(0, 0, 0))
    points = [np.array([0, -2.0, 0]), np.array([3.0, 0, 0]), np.array([0, 0, 1.0])]
    for p in points:
        a.accumulate_avoidance(p)
    expected = np.mean([a.position - p for p in points], axis=0)
    expected /= np.linalg.norm(expected)
    assert np.allclose(a.steering_terms().avoidance, expected)
    a.reset_avoidance()
    assert not a.steering_terms().avoidance.any()

def test_accumulator_uses_position_at_call_time():
    acc = AvoidanceAccumulator()
    acc.add(np.array([1.0, 0, 0]), np.array([0, 0, 0]))
    acc.add(np.array([3.0, 0, 0]), np.array([0, 0, 0]))
    assert acc.count == 2
    assert np.allclose(acc.total, [4, 0, 0])
    acc.reset()
    assert acc.count == 0
    assert not acc.total.any()

def test_assign_target_requires_target():
    a = make_agent()
    with pytest.raises(ValueError):
        a.assign_target(None)
    assert a.mode is Mode.FLOCKING

def test_seek_scenario_reaches_target_and_reverts():
    a = make_agent(pos=(0, 0, 0), heading=(0, 0, 1), integration_rate=3.0)
    target = Target("t", np.array([10.0, 0, 0]))
    a.assign_target(target)
    assert a.mode is Mode.SEEKING

    dist = np.linalg.norm(a.position - target.position)
    arrived = False
    for _ in range(2000):
        arrived = a.tick(DT)
        if arrived:
            break
        new_dist = np.linalg.norm(a.position - target.position)
        assert new_dist < dist
        dist = new_dist
        assert a.mode is Mode.SEEKING
    assert arrived
    assert np.linalg.norm(a.position - target.position) < 0.3
    assert a.mode is Mode.FLOCKING
    assert a.target is None

def test_seek_blend_leans_toward_target():
    a = make_agent(heading=(0, 0, 1))
    a.assign_target(Target("t", np.array([10.0, 0, 0])))
    a.tick(DT)
    # slerp(desired, previous, 0.05): 95% of the way to the target direction
    angle = math.degrees(math.acos(np.clip(np.dot(a.heading, [1, 0, 0]), -1, 1)))
    assert math.isclose(angle, 90 * 0.05, rel_tol=1e-6)

def test_seeking_ignores_flock_terms():
    a = make_agent(pos=(0, 0, 0), heading=(1, 0, 0))
    crowd = [make_agent("b", pos=(1, 0, 0), heading=(-1, 0, 0))]
    a.assign_target(Target("t", np.array([10.0, 0, 0])))
    a.tick(DT, [a] + crowd, Anchor(np.array([-100.0, 0, 0])))
    assert np.allclose(a.heading, [1, 0, 0])

def test_missing_target_reverts_to_flocking():
    a = make_agent()
    a.assign_target(Target("t", np.array([1.0, 0, 0])))
    a.target = None
    assert a.tick(DT) is False
    assert a.mode is Mode.FLOCKING

def test_moving_target_is_followed():
    a = make_agent(pos=(0, 0, 0), heading=(1, 0, 0))
    t = Target("t", np.array([5.0, 0, 0]))
    a.assign_target(t)
    t.position = np.array([0, 0, 5.0])
    a.tick(DT)
    assert a.heading[2] > 0.9

def test_orientation_faces_heading():
    a = make_agent(heading=(1, 0, 0))
    a.tick(DT)
    assert np.allclose(a.forward, a.heading)
    assert abs(np.dot(a.up, a.heading)) < 1e-9
    assert abs(np.dot(a.right, a.heading)) < 1e-9

def test_zero_dt_does_not_move():
    a = make_agent(pos=(1, 2, 3))
    a.tick(0.0, [], Anchor(np.zeros(3)))
    assert np.allclose(a.position, [1, 2, 3])
