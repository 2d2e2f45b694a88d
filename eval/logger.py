import csv, os
from datetime import datetime
import numpy as np

HEADER = ['timestamp','step','time','agent_id','mode','x','y','z','hx','hy','hz','speed','avoid_count','anchor_dist','nearest_dist']

class Logger:
    def __init__(self, log_dir, flock_name):
        os.makedirs(log_dir, exist_ok=True)
        self.path = os.path.join(log_dir, f"flock_{flock_name}.csv")
        self.file = open(self.path, 'w', newline='')
        self.writer = csv.writer(self.file)
        self.writer.writerow(HEADER)
    def log(self, row):
        self.writer.writerow(row)
        self.file.flush()
    def log_flock(self, step, t, flock):
        stamp = datetime.now().isoformat(timespec='milliseconds')
        agents = flock.agents
        for agent in agents:
            others = [np.linalg.norm(agent.position - a.position) for a in agents if a is not agent]
            nearest = min(others) if others else float('nan')
            anchor_dist = np.linalg.norm(agent.position - flock.anchor.position) if flock.anchor is not None else float('nan')
            self.log([
                stamp, step, t, agent.id, agent.mode.value,
                *agent.position, *agent.heading,
                agent.speed, agent.avoid.count, anchor_dist, nearest,
            ])
    def close(self):
        self.file.close()
