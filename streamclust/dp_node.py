"""Density-peak cells and the clusters that group them."""

from __future__ import annotations

import copy as _copy
import itertools
import math
import sys

from streamclust.point import Point

FLT_MAX = 3.4028234663852886e38
DBL_MAX = sys.float_info.max

_node_ids = itertools.count()


class DPNode:
    """A cell of the density-peak tree.

    A cell built from a point gets the next id, a local density ``rho`` of 1
    and an unbounded ``delta``. A cell built without a point is a blank
    placeholder with id -1.
    """

    def __init__(self, center: Point | None = None, time: float = 0.0) -> None:
        self.dep: DPNode | None = None
        self.successors: set[DPNode] = set()
        self.cluster: DPCluster | None = None
        self.active = False
        self.inactive_time = 0.0
        self.dis = 0.0
        self.num = 0
        if center is None:
            self.id = -1
            self.cluster_id = -1
            self.rho = 0.0
            self.delta = 0.0
            self.center: Point | None = None
            self.last_time = 0.0
        else:
            self.id = next(_node_ids)
            self.cluster_id = 0
            self.rho = 1.0
            self.delta = FLT_MAX
            self.center = center.copy()
            self.last_time = time

    def __repr__(self) -> str:
        return f"DPNode(id={self.id}, rho={self.rho}, delta={self.delta})"

    def insert(self, time: float) -> None:
        """Count one more point without decay."""
        self.rho += 1
        self.last_time = time

    def add(self, coef: float, time: float) -> None:
        """Decay the density by ``coef`` and count one more point."""
        self.rho = coef * self.rho + 1
        self.last_time = time

    def add_successor(self, node: DPNode) -> None:
        self.successors.add(node)

    def remove_successor(self, node: DPNode) -> None:
        self.successors.discard(node)

    def has_successor(self) -> bool:
        return bool(self.successors)

    def distance_to(self, other: DPNode) -> float:
        """Euclidean distance between the centres of the two cells."""
        dimension = self.center.dimension
        return math.dist(
            self.center.features[:dimension], other.center.features[:dimension]
        )

    def copy(self) -> DPNode:
        """Shallow copy: linked cells and the centre are shared, the successor set is not."""
        clone = _copy.copy(self)
        clone.successors = set(self.successors)
        return clone


class DPCluster:
    """A labelled group of density-peak cells."""

    def __init__(self, label: int = -1) -> None:
        self.label = label
        self.cells: set[DPNode] = set()

    def __repr__(self) -> str:
        return f"DPCluster(label={self.label}, cells={len(self.cells)})"

    def add(self, node: DPNode) -> None:
        if node is None:
            raise ValueError("cannot add a missing cell to a cluster")
        self.cells.add(node)

    def remove(self, node: DPNode) -> None:
        self.cells.discard(node)