from __future__ import annotations
import math
from typing import Sequence
import numpy as np
from . import config as C

WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_FORWARD = np.array([0.0, 0.0, 1.0])


def _norm(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))

def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v, or the zero vector when v has no length."""
    v = np.asarray(v, dtype=float)
    mag = _norm(v)
    if mag < C.EPSILON:
        return np.zeros(3)
    return v / mag

def _perpendicular(u: np.ndarray) -> np.ndarray:
    # Cross with whichever world axis is least aligned with u
    axis = WORLD_UP if abs(u[1]) < 0.9 else WORLD_FORWARD
    return normalize(np.cross(u, axis))

def slerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """
    Spherical interpolation from a toward b.

    Direction is rotated along the great arc, magnitude is interpolated
    linearly. t is clamped to [0, 1]. Zero-length inputs fall back to a
    plain lerp.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    t = min(1.0, max(0.0, float(t)))
    la, lb = _norm(a), _norm(b)
    if la < C.EPSILON or lb < C.EPSILON:
        return a + (b - a) * t

    ua, ub = a / la, b / lb
    cos_theta = float(np.clip(np.dot(ua, ub), -1.0, 1.0))
    theta = math.acos(cos_theta)
    mag = la + (lb - la) * t

    if theta < C.EPSILON:
        return normalize(ua + (ub - ua) * t) * mag
    if math.pi - theta < C.EPSILON:
        # Antiparallel: any perpendicular axis is a valid great arc
        axis = _perpendicular(ua)
        phi = theta * t
        return (ua * math.cos(phi) + np.cross(axis, ua) * math.sin(phi)) * mag

    sin_theta = math.sin(theta)
    direction = (math.sin((1.0 - t) * theta) * ua + math.sin(t * theta) * ub) / sin_theta
    return direction * mag

def look_rotation(forward: np.ndarray, up: np.ndarray = WORLD_UP) -> np.ndarray:
    """
    Orientation basis facing along forward.

    Returns a 3x3 array whose rows are (right, up, forward), all unit length.
    """
    f = normalize(forward)
    if not f.any():
        f = WORLD_FORWARD.copy()
    right = normalize(np.cross(up, f))
    if not right.any():
        # forward parallel to up, pick the other reference axis
        right = normalize(np.cross(WORLD_FORWARD, f))
    true_up = np.cross(f, right)
    return np.vstack([right, true_up, f])

# -----------------------------
# Steering rules
# -----------------------------
def cohesion(self_pos: np.ndarray, sibling_positions: Sequence[np.ndarray]) -> np.ndarray:
    if len(sibling_positions) == 0:
        return np.zeros(3)
    center = np.mean(np.asarray(sibling_positions, dtype=float), axis=0)
    return normalize(center - self_pos)

def separation(self_pos: np.ndarray,
               sibling_positions: Sequence[np.ndarray],
               radius: float) -> np.ndarray:
    force = np.zeros(3)
    close = 0
    for p in sibling_positions:
        diff = self_pos - p
        if _norm(diff) < radius:
            force += diff
            close += 1
    if close == 0:
        return np.zeros(3)
    return normalize(force)

def alignment(sibling_velocities: Sequence[np.ndarray]) -> np.ndarray:
    if len(sibling_velocities) == 0:
        return np.zeros(3)
    avg_vel = np.mean(np.asarray(sibling_velocities, dtype=float), axis=0)
    return normalize(avg_vel)

def constrain(self_pos: np.ndarray, anchor_pos: np.ndarray | None) -> np.ndarray:
    if anchor_pos is None:
        return np.zeros(3)
    return normalize(np.asarray(anchor_pos, dtype=float) - self_pos)

def avoidance(total: np.ndarray, count: int) -> np.ndarray:
    if count <= 0:
        return np.zeros(3)
    return normalize(total / count)

def blend(terms: dict, weights: dict) -> np.ndarray:
    """Weighted sum of steering terms. Not renormalized."""
    steer = np.zeros(3)
    for name, term in terms.items():
        steer += weights.get(name, 0.0) * term
    return steer
