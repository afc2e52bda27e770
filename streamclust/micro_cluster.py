"""Micro-clusters summarising groups of stream points."""

from __future__ import annotations

import copy as _copy
import math

from streamclust.point import Point

EPSILON = 0.00005
MIN_VARIANCE = 1e-50
DEFAULT_RADIUS_FACTOR = 1.8


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 else math.nan


def inverse_error(x: float) -> float:
    """Series approximation of the inverse error function."""
    z = math.sqrt(math.pi) * x
    result = z / 2
    z2 = z * z
    z_prod = z * z2
    result += (1.0 / 24) * z_prod
    z_prod *= z2
    result += (7.0 / 960) * z_prod
    z_prod *= z2
    result += (127 * z_prod) / 80640
    z_prod *= z2
    result += (4369 * z_prod) / 11612160
    z_prod *= z2
    result += (34807 * z_prod) / 364953600
    z_prod *= z2
    result += (20036983 * z_prod) / 797058662400
    return result


def quantile(z: float) -> float:
    """Quantile of the standard normal distribution at probability ``z``."""
    if not 0 <= z <= 1:
        raise ValueError(f"probability must lie in [0, 1], got {z}")
    return math.sqrt(2) * inverse_error(2 * z - 1)


class MicroCluster:
    """Linear and squared sums of the points and timestamps of a cluster."""

    def __init__(self, dimension: int, cluster_id: int) -> None:
        self.dimension = dimension
        self.weight = 0.0
        self.ids: list[int] = [cluster_id]
        self.ls: list[float] = []
        self.ss: list[float] = []
        self.centroid: list[float] = []
        self.lst = 0.0
        self.sst = 0.0
        self.visited = False
        self.create_time = 0
        self.last_update_time = 0
        self.radius = 0.0
        self.distance = 0.0

    @classmethod
    def with_point(cls, dimension: int, cluster_id: int, point: Point, radius: float) -> MicroCluster:
        """Create a unit-weight cluster around ``point`` with a fixed radius."""
        cluster = cls(dimension, cluster_id)
        cluster.weight = 1.0
        cluster.radius = radius
        cluster.ls = list(point.features[:dimension])
        cluster.centroid = list(cluster.ls)
        return cluster

    def initialize(self, point: Point, timestamp: int) -> None:
        """Seed the cluster with its first point."""
        self.weight += 1
        for value in point.features[: self.dimension]:
            self.ls.append(value)
            self.ss.append(value * value)
            self.centroid.append(value)
        self.create_time = point.index
        self.lst += timestamp
        self.sst += timestamp * timestamp

    def insert(self, point: Point, timestamp: int) -> None:
        """Absorb a point without decay."""
        self.weight += 1
        for i, value in enumerate(point.features[: len(self.ls)]):
            self.ls[i] += value
            self.ss[i] += value * value
        self.lst += timestamp
        self.sst += timestamp * timestamp
        self.centroid = self.compute_centroid()

    def insert_fixed_radius(self, point: Point) -> None:
        """Pull the linear sum towards ``point`` by a Gaussian of the last distance."""
        self.weight += 1
        pull = math.exp(-((3 * self.distance / self.radius) ** 2 / 2))
        for i, value in enumerate(point.features[: len(self.ls)]):
            self.ls[i] = self.centroid[i] + pull * (value - self.centroid[i])
        self.last_update_time = point.index

    def distance_to_point(self, point: Point) -> float:
        """Centroid distance to ``point``, remembered for the next fixed-radius insert."""
        self.distance = self.centroid_distance(point)
        return self.distance

    def distance_to_cluster(self, other: MicroCluster) -> float:
        return math.dist(self.centroid[: self.dimension], other.centroid[: self.dimension])

    def insert_decayed(self, point: Point, decay_factor: float, epsilon: float) -> bool:
        """Absorb ``point`` with decay if the cluster radius stays below ``epsilon``."""
        new_ls = list(self.ls)
        new_ss = list(self.ss)
        for i in range(self.dimension):
            value = point.features[i]
            new_ls[i] = new_ls[i] * decay_factor + value
            new_ss[i] = new_ss[i] * decay_factor + value * value
        if not self.decayed_radius(decay_factor) < epsilon:
            return False
        self.ls = new_ls
        self.ss = new_ss
        self.weight = self.weight * decay_factor + 1
        for i in range(self.dimension):
            self.centroid[i] = self.ls[i] / self.weight
        self.last_update_time = point.index
        return True

    def merge(self, other: MicroCluster) -> None:
        """Add ``other`` into this cluster and take over its ids."""
        self.weight += other.weight
        for i in range(self.dimension):
            self.ls[i] += other.ls[i]
            self.ss[i] += other.ss[i]
        self.lst += other.lst
        self.sst += other.sst
        self.update_id(other)
        self.centroid = self.compute_centroid()

    def subtract(self, other: MicroCluster) -> None:
        """Remove the statistics of ``other`` from this cluster."""
        self.weight -= other.weight
        for i in range(self.dimension):
            self.ls[i] -= other.ls[i]
            self.ss[i] -= other.ss[i]
        self.lst -= other.lst
        self.sst -= other.sst
        self.centroid = self.compute_centroid()

    def contains_ids(self, other: MicroCluster) -> bool:
        """True if every id of ``other`` is among this cluster's ids."""
        return all(cluster_id in self.ids for cluster_id in other.ids)

    def update_id(self, other: MicroCluster) -> None:
        self.ids.extend(other.ids)
        other.ids = []

    def reset_id(self, index: int) -> None:
        self.ids[-1] = index

    def relevance_stamp(self, last_arriving_num: int) -> float:
        """Estimated arrival time of the last ``last_arriving_num`` points."""
        if self.weight < 2 * last_arriving_num:
            return self.mu_time()
        return self.mu_time() + self.sigma_time() * quantile(
            last_arriving_num / (2 * self.weight)
        )

    def mu_time(self) -> float:
        return self.lst / self.weight

    def sigma_time(self) -> float:
        mean = self.lst / self.weight
        return _sqrt(self.sst / self.weight - mean * mean)

    def radius_estimate(self, radius_factor: float) -> float:
        """RMS deviation scaled by ``radius_factor`` (1.8 when not positive)."""
        if self.weight == 1:
            return 0.0
        if radius_factor <= 0:
            radius_factor = DEFAULT_RADIUS_FACTOR
        return self.deviation() * radius_factor

    def decayed_radius(self, decay_factor: float) -> float:
        total = sum(
            self.ss[i] - self.ls[i] ** 2 / (self.weight * decay_factor + 1)
            for i in range(self.dimension)
        )
        return _sqrt(total / self.weight)

    def deviation(self) -> float:
        return sum(math.sqrt(v) for v in self.variance_vector()) / self.dimension

    def compute_centroid(self) -> list[float]:
        if self.weight == 1:
            return list(self.ls)
        result = [0.0] * len(self.ls)
        if self.weight > 1:
            for i in range(min(len(self.centroid), len(self.ls))):
                result[i] = self.ls[i] / self.weight
        return result

    def inclusion_probability(self, point: Point, radius_factor: float) -> float:
        if self.weight == 1:
            distance = math.dist(self.ls[: self.dimension], point.features[: self.dimension])
            return 1.0 if distance < EPSILON else 0.0
        if self.centroid_distance(point) <= self.radius_estimate(radius_factor):
            return 0.0
        return 1.0

    def variance_vector(self) -> list[float]:
        variances = []
        for i in range(self.dimension):
            mean = self.ls[i] / self.weight
            variance = self.ss[i] / self.weight - mean * mean
            variances.append(variance if variance > 0.0 else MIN_VARIANCE)
        return variances

    def centroid_distance(self, point: Point) -> float:
        return math.dist(self.centroid[: self.dimension], point.features[: self.dimension])

    def move(self) -> None:
        self.centroid = list(self.ls)

    def decay_weight(self, decay_factor: float) -> None:
        self.weight *= decay_factor

    def copy(self) -> MicroCluster:
        clone = _copy.copy(self)
        clone.ids = list(self.ids)
        clone.ls = list(self.ls)
        clone.ss = list(self.ss)
        clone.centroid = list(self.centroid)
        return clone