"""Pyramidal-time snapshots of micro-cluster sets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from streamclust.micro_cluster import MicroCluster


class Snapshot:
    """Copies of a set of micro-clusters taken at an elapsed time."""

    def __init__(self, micro_clusters: Iterable[MicroCluster], elapsed_time: int) -> None:
        self.elapsed_time = elapsed_time
        self.micro_clusters = [cluster.copy() for cluster in micro_clusters]

    def copy(self) -> Snapshot:
        return Snapshot(self.micro_clusters, self.elapsed_time)


def find_snapshot(
    ordered_snapshots: Sequence[Sequence[Snapshot]],
    landmark_time: int,
    current_elapsed_time: int,
    current_order: int,
) -> Snapshot:
    """Return a copy of the snapshot closest to ``landmark_time``.

    Orders 0 to ``current_order`` are searched; among equally close
    snapshots the later one wins.
    """
    min_distance = current_elapsed_time
    best_elapsed = -1
    found: Snapshot | None = None
    for order in ordered_snapshots[: current_order + 1]:
        for snapshot in order:
            elapsed = snapshot.elapsed_time
            distance = abs(elapsed - landmark_time)
            if min_distance > distance or (min_distance == distance and best_elapsed < elapsed):
                min_distance = distance
                best_elapsed = elapsed
                found = snapshot
    if found is None:
        raise LookupError(f"no snapshot near landmark time {landmark_time}")
    return Snapshot(found.micro_clusters, found.elapsed_time)


def subtract_snapshot(current: Snapshot, landmark: Snapshot, cluster_number: int) -> Snapshot:
    """Subtract matching landmark clusters from ``current`` in place and return it."""
    landmark_clusters = landmark.micro_clusters[:cluster_number]
    for cluster in current.micro_clusters[:cluster_number]:
        if len(cluster.ids) > 1:
            for other in landmark_clusters:
                if len(other.ids) > 1:
                    if cluster.contains_ids(other):
                        cluster.subtract(other)
                elif other.ids[0] in cluster.ids:
                    cluster.subtract(other)
        else:
            for other in landmark_clusters:
                if len(other.ids) == 1 and cluster.ids[0] == other.ids[0]:
                    cluster.subtract(other)
    return current