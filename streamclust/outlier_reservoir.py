"""Holding area for cells whose density is too low for the tree."""

from __future__ import annotations

from streamclust.dp_node import DBL_MAX, DPNode
from streamclust.point import Point


class OutlierReservoir:
    """Sparse cells, expired after ``time_gap`` time units without an update."""

    def __init__(self, r: float = 0.0, a: float = 0.0, lamd: float = 0.0) -> None:
        self.r = r
        self.a = a
        self.lamd = lamd
        self.time_gap = 0.0
        self.last_del_time = 0
        self.outliers: set[DPNode] = set()

    def insert_node(self, node: DPNode) -> None:
        """Move a cell into the reservoir, resetting its ``delta``."""
        node.delta = DBL_MAX
        self.outliers.add(node)

    def insert_point(self, point: Point, time: float) -> DPNode:
        """Absorb ``point`` at ``time`` and return the cell that took it.

        Expired cells are dropped first. If the nearest remaining cell lies
        within ``r``, a copy of it with the decayed density plus one is
        returned; the stored cell itself is left as it was. Otherwise a new
        cell is created, stored and returned.
        """
        expired = [
            node for node in self.outliers if time - node.last_time > self.time_gap
        ]
        self.outliers.difference_update(expired)

        nearest: DPNode | None = None
        min_dis = DBL_MAX
        for node in self.outliers:
            dis = point.distance_to(node.center)
            if dis < min_dis:
                min_dis = dis
                nearest = node

        if nearest is None or min_dis > self.r:
            cell = DPNode(point, time)
            self.outliers.add(cell)
            return cell
        cell = nearest.copy()
        cell.add(self.a ** (self.lamd * (time - cell.last_time)), time)
        return cell

    def remove(self, node: DPNode) -> None:
        self.outliers.discard(node)