import pandas as pd
import numpy as np

def load(path):
    return pd.read_csv(path)

def arrivals(df):
    # A seeking -> flocking transition between consecutive rows of one agent
    ordered = df.sort_values(['agent_id', 'step'])
    prev = ordered.groupby('agent_id')['mode'].shift()
    return int(((prev == 'seeking') & (ordered['mode'] == 'flocking')).sum())

def avg_anchor_distance(df):
    return float(df['anchor_dist'].mean())

def avg_nearest_distance(df):
    return float(df['nearest_dist'].mean())

def avoidance_fraction(df):
    if len(df) == 0:
        return 0.0
    return float((df['avoid_count'] > 0).mean())

def coverage(df, cell_size=2.0):
    x = np.floor(df['x'] / cell_size).astype(int)
    y = np.floor(df['y'] / cell_size).astype(int)
    z = np.floor(df['z'] / cell_size).astype(int)
    return len(set(zip(x, y, z)))

def episode_summary(df):
    return {
        'agents': int(df['agent_id'].nunique()),
        'steps': int(df['step'].max()) + 1 if len(df) else 0,
        'arrivals': arrivals(df),
        'avg_anchor_distance': avg_anchor_distance(df),
        'avg_nearest_distance': avg_nearest_distance(df),
        'avoidance_fraction': avoidance_fraction(df),
        'coverage': coverage(df),
    }
