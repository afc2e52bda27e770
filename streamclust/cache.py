"""Start-up buffer of density-peak cells built before the tree exists."""

from __future__ import annotations

import math
import struct

from streamclust.dp_node import DBL_MAX, FLT_MAX, DPCluster, DPNode
from streamclust.dp_tree import DPTree
from streamclust.outlier_reservoir import OutlierReservoir
from streamclust.point import Point


def _to_float32(value: float) -> float:
    """Round ``value`` to single precision."""
    if math.isnan(value) or abs(value) > FLT_MAX:
        return value if math.isnan(value) else math.copysign(math.inf, value)
    return struct.unpack("f", struct.pack("f", value))[0]


class Cache:
    """Collects up to ``num`` points into cells of radius ``r``.

    ``a`` and ``lamd`` give the decay ``a ** (lamd * elapsed)`` applied to a
    cell's density between updates.
    """

    def __init__(self, num: int = 0, a: float = 0.0, lamd: float = 0.0, r: float = 0.0) -> None:
        self.num = num
        self.a = a
        self.lamd = lamd
        self.r = r
        self.pnum = 0
        self.buffer: list[DPNode] = []
        self.clus: list[DPNode] = []

    @property
    def size(self) -> int:
        """Number of cells created so far."""
        return len(self.buffer)

    def add(self, point: Point, start_time: float) -> DPNode:
        """Absorb ``point`` into the nearest cell within ``r`` or open a new cell."""
        nearest: DPNode | None = None
        min_dis = FLT_MAX
        for node in self.buffer:
            dis = point.distance_to(node.center)
            if dis < min_dis:
                min_dis = dis
                nearest = node

        if nearest is not None and min_dis <= self.r:
            self.pnum += 1
            coef = self.a ** (self.lamd * (start_time - nearest.last_time))
            nearest.add(coef, start_time)
            return nearest

        if len(self.buffer) >= self.num:
            raise IndexError(f"cache is full ({self.num} cells)")
        self.pnum += 1
        cell = DPNode(point, start_time)
        self.buffer.append(cell)
        return cell

    def is_full(self) -> bool:
        """True once exactly ``num`` points have been added."""
        return self.pnum == self.num

    def compute_delta_rho(self, time: float) -> None:
        """Decay every cell to ``time``, sort by density and find dependencies.

        Each cell but the densest gets its nearest denser cell as ``dep`` and
        that distance as ``delta``; the densest cell gets the largest delta.
        """
        if not self.buffer:
            raise ValueError("cache holds no cells")
        for node in self.buffer:
            node.rho = _to_float32(
                self.a ** (self.lamd * (time - node.last_time)) * node.rho
            )
        self.clus = sorted(self.buffer, key=lambda node: node.rho, reverse=True)

        head = self.clus[0]
        head.delta = 0.0
        for i in range(1, len(self.clus)):
            node = self.clus[i]
            min_dis = DBL_MAX
            for other in reversed(self.clus[:i]):
                dis = node.center.distance_to(other.center)
                if min_dis > dis:
                    min_dis = dis
                    node.dep = other
            node.delta = min_dis
            if head.delta < min_dis:
                head.delta = min_dis

    def build_dp_tree(
        self,
        min_rho: float,
        min_delta: float,
        dp_tree: DPTree,
        outliers: OutlierReservoir,
        clusters: set[DPCluster],
    ) -> None:
        """Hand the sorted cells to ``dp_tree``."""
        dp_tree.initialize(self.clus, self.size, min_rho, min_delta, outliers, clusters)