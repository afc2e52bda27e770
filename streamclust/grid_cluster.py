"""Clusters made of connected density grids."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from streamclust.density_grid import DensityGrid
from streamclust.point import Point

logger = logging.getLogger(__name__)


class GridCluster:
    """A labelled group of grids, each marked inside or outside.

    A grid is inside when all its neighbours along every axis belong to the
    cluster.
    """

    def __init__(self, label: int = 0, grids: Mapping[DensityGrid, bool] | None = None) -> None:
        self.label = label
        self.grids: dict[DensityGrid, bool] = dict(grids) if grids else {}
        self.visited: dict[DensityGrid, bool] = {}

    def __repr__(self) -> str:
        return f"GridCluster(label={self.label}, grids={len(self.grids)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridCluster):
            return NotImplemented
        return (
            self.label == other.label
            and len(self.grids) == len(other.grids)
            and len(self.visited) == len(other.visited)
        )

    __hash__ = None  # type: ignore[assignment]

    def add_grid(self, grid: DensityGrid) -> None:
        """Add ``grid`` and re-evaluate every grid that was outside."""
        self.grids[grid] = self.is_inside(grid)
        for member, inside in self.grids.items():
            if not inside:
                self.grids[member] = self.is_inside(member)

    def remove_grid(self, grid: DensityGrid) -> None:
        self.grids.pop(grid, None)

    def absorb_cluster(self, other: GridCluster) -> None:
        """Take over the grids of ``other`` and recompute inside/outside."""
        logger.info("absorb cluster %s into cluster %s", other.label, self.label)
        for grid in other.grids:
            self.grids.setdefault(grid, False)
        self.grids = {grid: self.is_inside(grid) for grid in self.grids}

    def is_inside(self, grid: DensityGrid) -> bool:
        return all(neighbour in self.grids for neighbour in grid.neighbours())

    def is_inside_with(self, grid: DensityGrid, other: DensityGrid) -> bool:
        """False if ``other`` is a neighbour of ``grid`` already in the cluster."""
        return not any(
            neighbour in self.grids and neighbour == other for neighbour in grid.neighbours()
        )

    def is_connected(self) -> bool:
        """True if every grid is reachable from the first through neighbours.

        Reached grids are accumulated in ``visited`` across calls.
        """
        if self.grids:
            first, inside = next(iter(self.grids.items()))
            self.visited[first] = inside
            changes_made = True
            while changes_made:
                changes_made = False
                to_add: dict[DensityGrid, bool] = {}
                for reached in self.visited:
                    for neighbour in reached.neighbours():
                        if neighbour in self.grids and neighbour not in self.visited:
                            to_add[neighbour] = self.grids[neighbour]
                    if to_add:
                        break
                if to_add:
                    self.visited.update(to_add)
                    changes_made = True
        return len(self.visited) == len(self.grids)

    def inclusion_probability(self, point: Point) -> float:
        """1.0 if ``point`` falls in any grid of the cluster, else 0.0."""
        if any(grid.inclusion_probability(point) == 1.0 for grid in self.grids):
            return 1.0
        return 0.0