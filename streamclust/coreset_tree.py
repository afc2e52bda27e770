"""Coreset trees used to reduce two weighted point sets to ``k`` centres."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from streamclust.point import Point

logger = logging.getLogger(__name__)

CHOOSE_CENTRE_ATTEMPTS = 3
DUMMY_COORDINATE = -1 * 1000000


def _centroid(point: Point) -> list[float]:
    """Coordinates of ``point`` divided by its weight, unless the weight is zero."""
    features = point.features[: point.dimension]
    if point.weight != 0.0:
        return [value / point.weight for value in features]
    return list(features)


def _squared_distance(point: Point, centre: Point) -> float:
    centre_coords = _centroid(centre)
    return sum(
        (value - centre_coords[i]) ** 2 for i, value in enumerate(_centroid(point))
    )


def closest_centre(point: Point, centre_a: Point, centre_b: Point) -> Point:
    """Return whichever of the two centres lies nearer ``point``; ties go to ``centre_b``."""
    if _squared_distance(point, centre_a) < _squared_distance(point, centre_b):
        return centre_a
    return centre_b


@dataclass(eq=False)
class TreeNode:
    """A node of a coreset tree: a centre and the points it serves."""

    points: list[Point] = field(default_factory=list)
    centre: Point | None = None
    cost: float = 0.0
    parent: TreeNode | None = None
    lc: TreeNode | None = None
    rc: TreeNode | None = None

    @property
    def n(self) -> int:
        return len(self.points)

    def is_leaf(self) -> bool:
        return self.lc is None and self.rc is None


class CoresetTree:
    """Builds ``k`` weighted centres from two point sets by k-means++ style splits."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def _open_uniform(self) -> float:
        value = self.rng.random()
        while value == 0.0:
            value = self.rng.random()
        return value

    def union_tree_coreset(
        self, k: int, set_a: Sequence[Point], set_b: Sequence[Point]
    ) -> list[Point]:
        """Choose ``k`` centres from ``set_a`` and ``set_b`` and fold the points into them.

        Every input point gets its ``clustering_center`` set to the index of
        its centre. When fewer than ``k`` distinct centres exist the rest are
        zero-weight dummy points with index -1.
        """
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        points = [*set_a, *set_b]
        if not points:
            raise ValueError("cannot build a coreset from no points")

        first = points[self.rng.randrange(len(points))].copy()
        centres: list[Point] = [first]
        root = self._construct_root(points, first, 0)

        for chosen in range(1, k):
            if root.cost > 0.0:
                leaf = self.select_node(root)
                centre = self.choose_centre(leaf)
                self.split(leaf, centre, chosen)
                centres.append(centre.copy())
            else:
                dummy = root.centre.copy()
                for i in range(dummy.dimension):
                    dummy.features[i] = DUMMY_COORDINATE
                dummy.index = -1
                dummy.weight = 0.0
                centres.append(dummy)

        for point in points:
            centre = centres[point.clustering_center]
            if centre.index != point.index:
                centre.weight += point.weight
                if point.weight != 0.0:
                    for i in range(point.dimension):
                        centre.features[i] += point.features[i]
        return centres

    def _construct_root(self, points: list[Point], centre: Point, centre_index: int) -> TreeNode:
        for point in points:
            point.clustering_center = centre_index
        root = TreeNode(points=list(points), centre=centre)
        self.target_function_value(root)
        return root

    def target_function_value(self, node: TreeNode) -> float:
        """Compute, store and return the weighted cost of ``node`` around its centre."""
        node.cost = sum(
            _squared_distance(point, node.centre) * point.weight for point in node.points
        )
        return node.cost

    def select_node(self, root: TreeNode) -> TreeNode:
        """Walk down to a leaf, choosing children in proportion to their cost."""
        draw = self._open_uniform()
        node = root
        while not node.is_leaf():
            if node.lc.cost == 0 and node.rc.cost == 0:
                if node.lc.n == 0:
                    node = node.rc
                elif node.rc.n == 0:
                    node = node.lc
                elif draw < 0.5:
                    draw = self._open_uniform()
                    node = node.lc
                else:
                    draw = self._open_uniform()
                    node = node.rc
            elif draw < node.lc.cost / node.cost:
                node = node.lc
            else:
                node = node.rc
        return node

    def choose_centre(self, node: TreeNode) -> Point:
        """Pick a new centre from ``node`` by the k-means++ distribution.

        Several candidates are drawn and the one giving the cheapest split
        wins; if none improves the cost the node's first point is returned.
        """
        min_cost = node.cost
        best_centre = Point(dimension=len(node.centre.features))
        if node.cost == 0:
            return node.points[0]
        for _ in range(CHOOSE_CENTRE_ATTEMPTS):
            total = 0.0
            draw = self._open_uniform()
            for point in node.points:
                total += self.cost_of_point(node, point) / node.cost
                if total >= draw:
                    if point.weight == 0.0:
                        logger.error("chose a dummy point though others were available")
                        return best_centre
                    current_cost = self.split_cost(node, node.centre, point)
                    if current_cost < min_cost:
                        best_centre = point
                        min_cost = current_cost
                    break
        if best_centre.index == -1:
            return node.points[0]
        return best_centre

    def cost_of_point(self, node: TreeNode, point: Point) -> float:
        """Weighted squared distance of ``point`` to the centre of ``node``."""
        if point.weight == 0.0:
            return 0.0
        return _squared_distance(point, node.centre) * point.weight

    def split_cost(self, node: TreeNode, centre_a: Point, centre_b: Point) -> float:
        """Cost of ``node`` if its points were served by the nearer of two centres."""
        return sum(
            min(_squared_distance(point, centre_a), _squared_distance(point, centre_b))
            * point.weight
            for point in node.points
        )

    def split(self, parent: TreeNode, new_centre: Point, new_centre_index: int) -> None:
        """Split ``parent`` into a child for its old centre and one for ``new_centre``."""
        old_points: list[Point] = []
        new_points: list[Point] = []
        for point in parent.points:
            centre = closest_centre(point, parent.centre, new_centre)
            if centre.index == new_centre.index:
                point.clustering_center = new_centre_index
                new_points.append(point)
            elif centre.index == parent.centre.index:
                old_points.append(point)
            else:
                logger.error("no nearest centre for point %d", point.index)

        left = TreeNode(points=old_points, centre=parent.centre, parent=parent)
        self.target_function_value(left)
        right = TreeNode(points=new_points, centre=new_centre, parent=parent)
        self.target_function_value(right)
        parent.lc = left
        parent.rc = right

        node: TreeNode | None = parent
        while node is not None:
            node.cost = node.lc.cost + node.rc.cost
            node = node.parent