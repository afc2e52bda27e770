"""The density-peak tree: active cells ordered by local density."""

from __future__ import annotations

import logging
import math

from streamclust.dp_node import DBL_MAX, DPCluster, DPNode
from streamclust.outlier_reservoir import OutlierReservoir
from streamclust.point import Point

logger = logging.getLogger(__name__)


def _div(numerator: float, denominator: float) -> float:
    """Floating-point division that yields inf or nan instead of raising."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def score(alpha: float, up_avg: float, down_avg: float, avg: float) -> float:
    """Weighted separation score used when tuning the minimum delta."""
    return alpha * _div(avg, up_avg) + (1 - alpha) * _div(down_avg, avg)


class DPTree:
    """Fixed-capacity array of active cells sorted by decreasing ``rho``.

    Each cell points (``dep``) to its nearest denser cell at distance
    ``delta``; cells whose ``delta`` reaches ``min_delta`` head clusters.
    """

    def __init__(self, num: int = 0, clu_r: float = 0.0) -> None:
        self.num = num
        self.clus: list[DPNode | None] = [None] * num
        self.size = 0
        self.clu_r = clu_r
        self.clu_label = 0
        self.min_delta = 0.0
        self.last_time = 0.0
        self.a = 0.0
        self.lamd = 0.0

    def _adjust_for(self, opt: int, index: int) -> None:
        strategy = {
            0: self.adjust_no_opt,
            1: self.adjust_opt1,
            2: self.adjust,
            -1: self.adjust_no_delta,
        }.get(opt)
        if strategy is not None:
            strategy(index)

    @staticmethod
    def _attach(node: DPNode, parent: DPNode, delta: float) -> None:
        if node.dep is not None:
            node.dep.remove_successor(node)
        node.dep = parent
        parent.add_successor(node)
        node.delta = delta

    def _new_cluster(self, clusters: set[DPCluster], node: DPNode) -> DPCluster:
        cluster = DPCluster(self.clu_label)
        self.clu_label += 1
        cluster.add(node)
        node.cluster = cluster
        clusters.add(cluster)
        return cluster

    def insert(self, node: DPNode, opt: int) -> None:
        """Activate ``node`` and put it in place using strategy ``opt`` (-1, 0, 1 or 2)."""
        node.active = True
        if self.size >= len(self.clus):
            raise IndexError(f"DPTree is full ({len(self.clus)} cells)")
        self.clus[self.size] = node
        self.size += 1
        self._adjust_for(opt, self.size - 1)
        if self.size == self.num:
            logger.debug("lack of DPTree nodes")

    def initialize(
        self,
        nodes: list[DPNode],
        size: int,
        min_rho: float,
        min_delta: float,
        outliers: OutlierReservoir,
        clusters: set[DPCluster],
    ) -> None:
        """Load the first ``size`` cells, sorted by decreasing density.

        Cells at or above ``min_rho`` enter the tree and join a cluster; the
        rest go to ``outliers``.
        """
        self.min_delta = min_delta
        self.clus[0] = nodes[0]
        self._new_cluster(clusters, nodes[0])
        i = 1
        while i < size and nodes[i].rho >= min_rho:
            node = nodes[i]
            self.clus[i] = node
            if node.delta > min_delta:
                self._new_cluster(clusters, node)
            else:
                parent_cluster = node.dep.cluster
                parent_cluster.add(node)
                node.cluster = parent_cluster
            i += 1
        self.clus[0].delta = max((node.delta for node in self.clus[1:i]), default=0.0)
        self.size = i
        for node in nodes[i:size]:
            outliers.insert_node(node)

    def find_nn(self, point: Point, coef: float, opt: int, time: float) -> DPNode | None:
        """Decay every cell by ``coef`` and return the one nearest ``point``.

        The nearest cell absorbs the point when it lies within the cluster
        radius. ``point.min_dist`` is set to the nearest distance.
        """
        index = 0
        min_dis = DBL_MAX
        for i, node in enumerate(self.clus[: self.size]):
            node.rho *= coef
            dis = point.distance_to(node.center)
            node.dis = dis
            if dis < min_dis:
                min_dis = dis
                index = i
        point.min_dist = min_dis
        nearest = self.clus[index] if self.clus else None
        if nearest is not None and min_dis <= self.clu_r:
            nearest.insert(time)
            self._adjust_for(opt, index)
        return nearest

    def _bubble_up(self, index: int) -> int:
        clus = self.clus
        node = clus[index]
        position = index
        for i in range(index - 1, -1, -1):
            if node.rho > clus[i].rho:
                clus[i + 1] = clus[i]
                clus[i] = node
                position = i
            else:
                break
        return position

    def adjust_no_delta(self, index: int) -> None:
        """Restore density order without touching dependencies."""
        self.clus[0].delta = DBL_MAX
        self._bubble_up(index)

    def adjust_no_opt(self, index: int) -> None:
        """Restore density order and recompute dependencies exhaustively."""
        self.clus[0].delta = DBL_MAX
        node = self.clus[index]
        position = self._bubble_up(index)
        if self.clus[0] is node:
            node.delta = DBL_MAX
        self.compute_delta_no_opt(position)
        self.compute_head_delta()

    def compute_delta_no_opt(self, index: int) -> None:
        node = self.clus[index]
        if node.dep is not None:
            node.dep.remove_successor(node)
        dis = 0.0
        node.delta = DBL_MAX
        for i in range(self.size - 1, -1, -1):
            other = self.clus[i]
            if i < index:
                dis = node.center.distance_to(other.center)
                if node.delta > dis:
                    self._attach(node, other, dis)
            if i > index and other.delta > dis:
                self._attach(other, node, dis)

    def adjust_opt1(self, index: int) -> None:
        """Restore density order, re-linking passed cells that now lie nearer."""
        clus = self.clus
        clus[0].delta = DBL_MAX
        node = clus[index]
        if node.dep is not None and node.dep.rho < node.rho:
            node.dep.remove_successor(node)
            node.delta = DBL_MAX
        position = index
        for i in range(index - 1, -1, -1):
            other = clus[i]
            if node.rho > other.rho:
                dis = other.distance_to(node)
                if dis <= other.delta:
                    self._attach(other, node, dis)
                clus[i + 1] = other
                clus[i] = node
                position = i
            else:
                break
        if clus[0] is node:
            node.delta = DBL_MAX
            position = 0
        if position != 0 and (node.dep is None or node.rho > node.dep.rho):
            node.delta = DBL_MAX
            self.compute_delta_f1(position)
        self.compute_head_delta()

    def compute_delta_f1(self, index: int) -> None:
        """Find the nearest denser cell of the cell at ``index``."""
        node = self.clus[index]
        if node.dep is not None:
            node.dep.remove_successor(node)
        node.delta = DBL_MAX
        if index == 0:
            return
        for other in self.clus[index - 1 :: -1]:
            dis = node.center.distance_to(other.center)
            if dis < node.delta:
                node.dep = other
                node.delta = dis
        if node.dep is not None:
            node.dep.add_successor(node)

    def adjust(self, index: int) -> None:
        """Like :meth:`adjust_opt1`, pruning distance checks with the triangle inequality."""
        clus = self.clus
        clus[0].delta = DBL_MAX
        node = clus[index]
        if node.dep is not None and node.dep.rho < node.rho:
            node.dep.remove_successor(node)
            node.delta = DBL_MAX
        position = index
        for i in range(index - 1, -1, -1):
            other = clus[i]
            if node.rho > other.rho:
                if other.delta > other.dis - node.dis:
                    dis = other.distance_to(node)
                    if dis < other.delta:
                        self._attach(other, node, dis)
                clus[i + 1] = other
                clus[i] = node
                position = i
            else:
                break
        if clus[0] is node:
            node.delta = DBL_MAX
        if position != 0 and (node.dep is None or node.rho > node.dep.rho):
            node.delta = DBL_MAX
            self.compute_delta(position)
        self.compute_head_delta()

    def compute_head_delta(self) -> None:
        """Set the densest cell's delta from the two largest deltas below it."""
        head = self.clus[0]
        if head.dep is not None:
            head.dep.remove_successor(head)
        max_value = 0.0
        second_value = 0.0
        for node in self.clus[1 : self.size]:
            if max_value < node.delta:
                second_value = max_value
                max_value = node.delta
            elif second_value < node.delta:
                second_value = node.delta
        if max_value > 3 * second_value:
            head.delta = max_value
        else:
            head.delta = (max_value + second_value) / 2

    def compute_delta(self, index: int) -> None:
        """Find the nearest denser cell, skipping cells ruled out by their ``dis``."""
        node = self.clus[index]
        if node.dep is not None:
            node.dep.remove_successor(node)
        node.delta = DBL_MAX
        if index == 0:
            return
        for other in self.clus[index - 1 :: -1]:
            if node.delta > other.dis - node.dis:
                dis = node.center.distance_to(other.center)
                if dis < node.delta:
                    node.dep = other
                    node.delta = dis
        if node.dep is not None:
            node.dep.add_successor(node)

    def _deactivate(self, i: int, outliers: OutlierReservoir, time: float) -> None:
        node = self.clus[i]
        self.clus[i] = None
        self.size -= 1
        node.active = False
        node.inactive_time = time
        if node.cluster is not None:
            node.cluster.remove(node)
        outliers.insert_node(node)

    def delete_inactive(self, outliers: OutlierReservoir, min_rho: float, time: float) -> None:
        """Move trailing cells whose density fell below ``min_rho`` to ``outliers``."""
        for i in range(self.size - 1, 0, -1):
            if self.clus[i].rho < min_rho:
                self._deactivate(i, outliers, time)
            else:
                break
        if self.size > 0 and self.clus[0].rho < min_rho:
            self._deactivate(0, outliers, time)

    def _sorted_deltas(self) -> list[float]:
        return sorted(node.delta for node in self.clus[: self.size])

    def compute_alpha(self, min_delta: float) -> float:
        """Estimate the weight between the two sides of the delta split at ``min_delta``.

        Returns 0.0 when the tree holds fewer than two cells or no delta lies
        below ``min_delta``.
        """
        deltas = self._sorted_deltas()
        if len(deltas) < 2 or deltas[0] >= min_delta:
            return 0.0
        split = 0
        while split < len(deltas) - 1 and deltas[split] < min_delta:
            split += 1
        lower, upper = deltas[:split], deltas[split:]
        n, m = len(lower), len(upper)
        down_total, up_total = sum(lower), sum(upper)
        delta1, delta2 = lower[-1], upper[0]
        avg = (up_total + down_total) / (m + n)
        up = up_total / m
        down = down_total / n
        alpha = _div(
            up * (down - delta1) * (m * up + delta1),
            avg * avg * (delta1 - up) * (n - 1) + (down - delta1) * up * (m * up + delta1),
        )
        alpha2 = _div(
            (delta2 - down) * up * (m * up - delta2),
            (delta2 - down) * up * (m * up - delta2) + avg * avg * (up - delta2) * (n + 1),
        )
        if alpha < alpha2:
            return (alpha + alpha2) / 2
        return 0.0

    def adjust_min_delta(self, alpha: float) -> float:
        """Choose a new minimum delta between two adjacent sorted deltas."""
        if self.size < 2:
            return 0.0
        deltas = self._sorted_deltas()
        up = deltas[-1]
        down = sum(deltas[:-1])
        n = len(deltas) - 1
        m = 1
        avg = (up + down) / (m + n)
        current = score(alpha, up / m, _div(down, n), avg)
        index = len(deltas) - 2
        up += deltas[index]
        m += 1
        down -= deltas[index]
        n -= 1
        lower = score(alpha, up / m, _div(down, n), avg)
        while current > lower and index > 0:
            current = lower
            index -= 1
            up += deltas[index]
            m += 1
            down -= deltas[index]
            n -= 1
            lower = score(alpha, up / m, _div(down, n), avg)
        return (deltas[index + 1] + deltas[index]) / 2

    def adjust_cluster(self, clusters: set[DPCluster]) -> None:
        """Split, create and merge clusters to match the current deltas."""
        seen: list[DPCluster] = []
        head = self.clus[0] if self.clus else None
        if head is None:
            logger.debug("there is no cluster cell; the radius r is too small, increase it")
        elif head.cluster is None:
            seen.append(self._new_cluster(clusters, head))
        else:
            seen.append(head.cluster)

        for node in self.clus[1 : self.size]:
            if node.dep is None:
                logger.debug("cell %d has no dependency", node.id)
            dep_cluster = node.dep.cluster if node.dep is not None else None
            if node.delta >= self.min_delta:
                if node.cluster is dep_cluster:
                    if node.cluster is not None:
                        node.cluster.remove(node)
                    seen.append(self._new_cluster(clusters, node))
                if node.cluster is None:
                    seen.append(self._new_cluster(clusters, node))
                elif any(c.label == node.cluster.label for c in seen):
                    node.cluster.remove(node)
                    seen.append(self._new_cluster(clusters, node))
                else:
                    seen.append(node.cluster)
            elif node.cluster is not dep_cluster:
                if node.cluster is not None:
                    node.cluster.remove(node)
                if dep_cluster is not None:
                    dep_cluster.add(node)
                node.cluster = dep_cluster