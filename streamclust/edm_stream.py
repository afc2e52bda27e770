"""EDMStream: density-peak clustering of an evolving data stream."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from streamclust.cache import Cache
from streamclust.dp_node import DPCluster, DPNode
from streamclust.dp_tree import DPTree
from streamclust.outlier_reservoir import OutlierReservoir
from streamclust.point import Point

logger = logging.getLogger(__name__)

TIME_UNIT = 100000
MIN_DELTA_INTERVAL = 100


@dataclass
class EDMStreamParams:
    """Settings of an :class:`EDMStream` run.

    ``a`` and ``lamd`` define the decay ``a ** (lamd * elapsed)``; ``beta``
    sets the minimum density; ``radius`` is the cell radius; ``opt`` selects
    the tree update strategy (-1, 0, 1 or 2); ``act_clu_max_num`` is the
    capacity of the tree.
    """

    a: float
    lamd: float
    beta: float
    cache_num: int
    radius: float
    min_delta: float
    opt: int = 2
    point_number: int = 0
    dimension: int = 0
    act_clu_max_num: int = 1000
    is_init: bool = False


def count_nodes(node: DPNode) -> int:
    """Count ``node`` and everything reachable through its successors."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        stack.extend(current.successors)
    return count


def _time_of(timestamp: int) -> float:
    quotient = abs(timestamp) // TIME_UNIT
    return float(quotient if timestamp >= 0 else -quotient)


class EDMStream:
    """Buffers the first points in a cache, then maintains a density-peak tree."""

    def __init__(self, params: EDMStreamParams) -> None:
        self.params = params
        self.alpha = 0.0
        self.min_rho = 0.0
        self.delta_t = 0.0
        self.clusters: set[DPCluster] = set()
        self.initialize()

    def initialize(self) -> None:
        """Create an empty cache, outlier reservoir and tree."""
        params = self.params
        self.alpha = 0.0
        self.cache = Cache(params.cache_num, params.a, params.lamd, params.radius)
        self.outres = OutlierReservoir(params.radius, params.a, params.lamd)
        self.dp_tree = DPTree(params.act_clu_max_num, params.radius)
        self.dp_tree.min_delta = params.min_delta

    def set_min_delta(self, min_delta: float) -> None:
        self.params.min_delta = min_delta
        self.dp_tree.min_delta = min_delta

    def init_dp(self, time: float) -> None:
        """Build the tree from the full cache at ``time``."""
        params = self.params
        self.cache.compute_delta_rho(time)
        decay = params.a ** params.lamd
        self.min_rho = params.beta / (1 - decay)
        logger.debug("minRho = %s", self.min_rho)
        self.delta_t = (
            math.log(1 - decay) / math.log(params.a) - math.log(params.beta) / math.log(params.a)
        ) / params.lamd
        logger.debug("deltaT = %s", self.delta_t)
        self.outres.time_gap = self.delta_t
        self.cache.build_dp_tree(
            self.min_rho, params.min_delta, self.dp_tree, self.outres, self.clusters
        )
        logger.debug("dpTree size = %d", self.dp_tree.size)
        self.dp_tree.last_time = time

    def stream_process(self, point: Point, opt: int, time: float) -> DPNode:
        """Absorb ``point`` into the tree or the outlier reservoir."""
        coef = self.params.a ** (self.params.lamd * (time - self.dp_tree.last_time))
        self.dp_tree.last_time = time
        nearest = self.dp_tree.find_nn(point, coef, opt, time)
        if nearest is None or nearest.dis > self.dp_tree.clu_r:
            nearest = self.outres.insert_point(point, time)
            if nearest.rho > self.min_rho:
                self.outres.remove(nearest)
                self.dp_tree.insert(nearest, opt)
        self.dp_tree.delete_inactive(self.outres, self.min_rho, time)
        return nearest

    def compute_alpha(self) -> float:
        return self.dp_tree.compute_alpha(self.params.min_delta)

    def adjust_min_delta(self) -> float:
        return self.dp_tree.adjust_min_delta(self.alpha)

    def remove_empty_clusters(self) -> None:
        self.clusters = {cluster for cluster in self.clusters if cluster.cells}

    def retrieve(self, point: Point, opt: int, time: float) -> DPNode:
        """Feed ``point`` to the cache until it is full, then to the tree."""
        if not self.params.is_init:
            cell = self.cache.add(point, time)
            if self.cache.is_full():
                self.init_dp(time)
                self.alpha = self.compute_alpha()
                logger.debug("alpha = %s", self.alpha)
                self.params.is_init = True
            return cell
        nearest = self.stream_process(point, opt, time)
        self.dp_tree.adjust_cluster(self.clusters)
        self.remove_empty_clusters()
        return nearest

    def run_online_clustering(self, point: Point) -> DPNode:
        """Process one stream point and return the cell that took it.

        Every hundredth point index the minimum delta is retuned.
        """
        time = _time_of(point.timestamp)
        cell = self.retrieve(point, self.params.opt, time)
        if point.index % MIN_DELTA_INTERVAL == 0 and self.params.is_init:
            self.set_min_delta(self.adjust_min_delta())
            self.dp_tree.adjust_cluster(self.clusters)
            self.remove_empty_clusters()
        return cell

    def run_offline_clustering(self) -> list[Point]:
        """Return copies of the centres of all cells in all clusters."""
        logger.debug("cluster number: %d", len(self.clusters))
        return [cell.center.copy() for cluster in self.clusters for cell in cluster.cells]