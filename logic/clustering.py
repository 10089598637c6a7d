# logic/clustering.py
from typing import List, Optional

import numpy as np
from sklearn.cluster import DBSCAN

from core.models import CreatureSpawn, FarmCluster, Position

# Spawns closer than this (yards) belong to the same camp.
CLUSTER_EPS = 80.0
CLUSTER_MIN_SAMPLES = 3
RADIUS_BUFFER = 15.0
FALLBACK_RADIUS = 50.0

def cluster_spawns(spawns: List[CreatureSpawn], eps: float = CLUSTER_EPS,
                   min_samples: int = CLUSTER_MIN_SAMPLES) -> List[FarmCluster]:
    """Group spawns of one map into farm camps, largest camp first."""
    if not spawns:
        return []

    map_id = spawns[0].map
    coords = np.array([[s.position_x, s.position_y] for s in spawns], dtype=float)
    z_values = np.array([s.position_z for s in spawns], dtype=float)

    labels = DBSCAN(eps=eps, min_samples=min_samples).fit(coords).labels_

    clusters = []
    for label in set(labels):
        if label == -1:  # noise
            continue
        members = np.where(labels == label)[0]
        center = coords[members].mean(axis=0)
        radius = np.linalg.norm(coords[members] - center, axis=1).max() + RADIUS_BUFFER
        clusters.append(FarmCluster(
            center=Position(float(center[0]), float(center[1]), float(z_values[members].mean()), map_id),
            radius=float(radius),
            spawn_count=len(members),
        ))

    # Too sparse for DBSCAN: one camp around everything.
    if not clusters:
        center = coords.mean(axis=0)
        clusters.append(FarmCluster(
            center=Position(float(center[0]), float(center[1]), float(z_values.mean()), map_id),
            radius=FALLBACK_RADIUS,
            spawn_count=len(spawns),
        ))

    return sorted(clusters, key=lambda c: -c.spawn_count)

def nearest_cluster(clusters: List[FarmCluster], position: Position) -> Optional[FarmCluster]:
    if not clusters:
        return None
    centers = np.array([[c.center.x, c.center.y] for c in clusters], dtype=float)
    distances = np.linalg.norm(centers - np.array([position.x, position.y]), axis=1)
    return clusters[int(np.argmin(distances))]
