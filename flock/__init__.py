"""
Flock package for the boid steering simulation.

This package contains:
- boids.py       : Steering math (cohesion, separation, alignment, constrain, avoidance, slerp)
- agent.py       : Steering agent state machine (flocking / seeking)
- sensor.py      : Five-probe obstacle sensor feeding the avoidance accumulator
- environment.py : Ray casts and overlap events against static geometry
- registry.py    : Flock registry, seeded spawn and tick scheduling
- goals.py       : Anchor route following
- mission.py     : Target dispatch to idle agents
- config.py      : Global configuration values for steering, probes and spawn
"""

# Explicit exports
from . import config
from . import boids
from . import agent
from . import environment
from . import sensor
from . import registry
from . import goals
from . import mission

from .agent import Agent, Anchor, Mode, SteeringConfig, Target
from .registry import Flock

# So you can do:
#   from flock import Flock, Agent, Anchor
# or:
#   from flock.sensor import ObstacleSensor

__all__ = [
    "config", "boids", "agent", "environment", "sensor", "registry", "goals", "mission",
    "Agent", "Anchor", "Mode", "SteeringConfig", "Target", "Flock",
]
