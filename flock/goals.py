import numpy as np
from . import config as C

class AnchorRoute:
    def __init__(self, anchor, waypoints=None, speed=C.ANCHOR_SPEED,
                 reach_threshold=C.ANCHOR_REACH_THRESHOLD, loop=True):
        # The anchor is moved along the route; agents only ever read it
        self.anchor = anchor
        self.waypoints = [np.asarray(w, dtype=float) for w in (waypoints or [])]
        self.idx = 0
        self.speed = speed
        self.reach_threshold = reach_threshold
        self.loop = loop

    def current_waypoint(self):
        if not self.waypoints:
            return None
        if self.idx >= len(self.waypoints):
            return self.waypoints[-1]
        return self.waypoints[self.idx]

    def waypoint_reached(self, thresh=None):
        goal = self.current_waypoint()
        if goal is None:
            return False
        thresh = self.reach_threshold if thresh is None else thresh
        if np.linalg.norm(self.anchor.position - goal) < thresh:
            if self.loop:
                self.idx = (self.idx + 1) % len(self.waypoints)
            else:
                self.idx = min(self.idx + 1, len(self.waypoints) - 1)
            return True
        return False

    def advance(self, dt):
        """Move the anchor toward the current waypoint. True when one was reached."""
        goal = self.current_waypoint()
        if goal is None:
            return False
        delta = goal - self.anchor.position
        dist = np.linalg.norm(delta)
        step = self.speed * dt
        if dist <= step:
            self.anchor.follow(goal)
        elif dist > 0:
            self.anchor.follow(self.anchor.position + delta / dist * step)
        return self.waypoint_reached()

    def set_waypoints(self, waypoints):
        self.waypoints = [np.asarray(w, dtype=float) for w in waypoints]
        self.idx = 0

    def reset(self):
        self.idx = 0
