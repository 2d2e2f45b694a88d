# --- Centralized config dictionary and getter ---

def get_config():
	return {
		'steering': {
			'weights': {
				'cohesion': WEIGHT_COHESION,        # Pull to flock center
				'separation': WEIGHT_SEPARATION,    # Push away from close siblings
				'alignment': WEIGHT_ALIGNMENT,      # Heading matching
				'constrain': WEIGHT_CONSTRAIN,      # Stay near the anchor
				'avoidance': WEIGHT_AVOIDANCE,      # Steer off probed geometry
			},
			'separation_radius': SEPARATION_RADIUS,
			'integration_rate': INTEGRATION_RATE,
			'speed': SPEED,
			'arrival_threshold': ARRIVAL_THRESHOLD,
		},
		'sensor': {
			'probe_distance': PROBE_DISTANCE,
			'probe_radius': PROBE_RADIUS,
		},
		'spawn': {
			'box': SPAWN_BOX,
			'look_range': SPAWN_LOOK_RANGE,
			'speed_range': SPAWN_SPEED_RANGE,
		},
		'simulation': {
			'time_step': TIME_STEP,
		},
		'anchor': {
			'speed': ANCHOR_SPEED,
			'reach_threshold': ANCHOR_REACH_THRESHOLD,
		},
		'mission': {
			'assign_every': MISSION_ASSIGN_EVERY,
		},
	}

# Physics / integration
TIME_STEP = 1.0 / 60.0     # seconds per tick
SPEED = 6.0                # units/s cruise speed
INTEGRATION_RATE = 3.0     # heading blend per second (slerp factor = rate * dt)
EPSILON = 1e-6             # below this length a vector counts as zero

# Steering weights
WEIGHT_COHESION = 0.2
WEIGHT_SEPARATION = 6.0
WEIGHT_ALIGNMENT = 1.0
WEIGHT_CONSTRAIN = 2.0
WEIGHT_AVOIDANCE = 20.0    # dominates once a probe reports contact

SEPARATION_RADIUS = 6.0    # units, strict: siblings at exactly this range are ignored
ARRIVAL_THRESHOLD = 0.3    # units, seeking ends below this distance

# Obstacle probes
PROBE_DISTANCE = 10.0      # ray length
PROBE_RADIUS = 4.0         # overlap volume radius around each agent

# Spawn (local to the anchor)
SPAWN_BOX = (80.0, 20.0, 80.0)
SPAWN_LOOK_RANGE = 1000.0            # look point drawn from [-r, r] per axis
SPAWN_SPEED_RANGE = (3.0, 6.0)       # never spawn a stationary agent

# Anchor route
ANCHOR_SPEED = 4.0         # units/s
ANCHOR_REACH_THRESHOLD = 2.0

# Mission
MISSION_ASSIGN_EVERY = 120  # ticks between target dispatches

# Logging
LOG_DIR = "eval/logs"
