import argparse
import os
import time
import numpy as np
from eval.logger import Logger
from eval import metrics
from flock.config import LOG_DIR, get_config
from flock.agent import Anchor, SteeringConfig, Target
from flock.environment import Environment, GroundPlane, SphereObstacle
from flock.goals import AnchorRoute
from flock.mission import MissionPlanner, Task
from flock.registry import Flock

WORLD_SIZE = 80.0
ALTITUDE = 10.0

def build_environment(scenario, rng):
	env = Environment()
	env.add(GroundPlane(height=0.0))
	if scenario == 'single_obstacle':
		env.add(SphereObstacle(np.array([WORLD_SIZE/2, ALTITUDE, WORLD_SIZE/2]), 8.0))
	elif scenario == 'open_field':
		# Add some random rocks
		for _ in range(3):
			center = np.array([
				rng.uniform(10, WORLD_SIZE-10),
				rng.uniform(2, ALTITUDE),
				rng.uniform(10, WORLD_SIZE-10)
			])
			env.add(SphereObstacle(center, rng.uniform(2.0, 5.0)))
	return env

def build_mission(n_targets, rng):
	tasks = []
	for k in range(n_targets):
		pos = np.array([
			rng.uniform(0, WORLD_SIZE),
			rng.uniform(ALTITUDE, ALTITUDE + 10),
			rng.uniform(0, WORLD_SIZE)
		])
		tasks.append(Task(priority=k, task_id=f"target{k}", target=Target(f"target{k}", pos)))
	return MissionPlanner(tasks)

def main(argv=None):
	parser = argparse.ArgumentParser(description='Headless boid flock simulation')
	parser.add_argument('--n', type=int, default=12)
	parser.add_argument('--scenario', type=str, default='open_field', choices=['open_field','single_obstacle'])
	parser.add_argument('--log', type=str, default=LOG_DIR)
	parser.add_argument('--steps', type=int, default=600, help='Number of simulation ticks')
	parser.add_argument('--dt', type=float, default=None, help='Seconds per tick')
	parser.add_argument('--seed', type=int, default=0)
	parser.add_argument('--targets', type=int, default=3, help='Targets dispatched to idle agents')
	parser.add_argument('--snapshot', action='store_true', help='Read neighbors from the previous tick')
	parser.add_argument('--realtime', action='store_true', help='Sleep to keep wall-clock pace')
	args = parser.parse_args(argv)

	# Get configuration
	C = get_config()
	dt = args.dt if args.dt is not None else C['simulation']['time_step']
	probe_radius = C['sensor']['probe_radius']
	assign_every = C['mission']['assign_every']

	rng = np.random.default_rng(args.seed)
	env = build_environment(args.scenario, rng)

	anchor = Anchor(np.array([WORLD_SIZE/2, ALTITUDE, WORLD_SIZE/2]))
	route = AnchorRoute(anchor, waypoints=[
		np.array([WORLD_SIZE-10, ALTITUDE, WORLD_SIZE-10]),
		np.array([10, ALTITUDE, WORLD_SIZE-10]),
		np.array([10, ALTITUDE, 10]),
		np.array([WORLD_SIZE-10, ALTITUDE, 10])
	], speed=C['anchor']['speed'], reach_threshold=C['anchor']['reach_threshold'])

	flock = Flock('main', anchor=anchor,
		config=SteeringConfig.from_dict(C['steering']),
		rng=rng, snapshot_neighbors=args.snapshot)
	flock.spawn(args.n, cast=env.cast)
	mission = build_mission(args.targets, rng)

	os.makedirs(args.log, exist_ok=True)
	logger = Logger(args.log, flock.name)
	print(f"[Run] Scenario '{args.scenario}' with {args.n} agents, seed {args.seed}. Logging to {logger.path}")

	try:
		for step in range(args.steps):
			step_start = time.time()

			# Sensors see last tick's positions, agents respond this tick
			flock.dispatch(env.overlap_events(flock, probe_radius))

			if step % assign_every == 0:
				for task_id, agent_id in mission.assign(flock):
					print(f"[Run] step {step}: {agent_id} -> {task_id}")

			arrived = flock.tick(dt)
			for task in mission.update_progress(flock, arrived):
				print(f"[Run] step {step}: {task.task_id} reached")

			if route.advance(dt):
				print(f"[Run] step {step}: anchor at waypoint, next {route.current_waypoint()}")

			logger.log_flock(step, step * dt, flock)

			if args.realtime:
				sleep_time = dt - (time.time() - step_start)
				if sleep_time > 0:
					time.sleep(sleep_time)
	finally:
		logger.close()

	summary = metrics.episode_summary(metrics.load(logger.path))
	print(f"[Run] Simulation completed. {args.steps} steps executed.")
	for key, value in summary.items():
		print(f"[Run]   {key}: {value}")
	return summary

if __name__ == '__main__':
	main()
