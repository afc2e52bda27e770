"""Integer-coordinate cells of a density grid."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from streamclust.point import Point


@dataclass(unsafe_hash=True)
class DensityGrid:
    """A grid cell identified by its integer coordinates."""

    coordinates: tuple[int, ...]
    is_visited: bool = field(default=False, compare=False, hash=False)

    def __init__(self, coordinates: Iterable[int], is_visited: bool = False) -> None:
        self.coordinates = tuple(int(value) for value in coordinates)
        self.is_visited = is_visited

    @property
    def dimensions(self) -> int:
        return len(self.coordinates)

    def neighbours(self) -> list[DensityGrid]:
        """Cells one step away along each axis, lower then upper, axis by axis.

        Whether the neighbours lie inside the grid's bounds is not checked.
        """
        result = []
        for i, value in enumerate(self.coordinates):
            for step in (-1, 1):
                coords = list(self.coordinates)
                coords[i] = value + step
                result.append(DensityGrid(coords))
        return result

    def inclusion_probability(self, point: Point) -> float:
        """1.0 if the truncated features of ``point`` equal the coordinates, else 0.0."""
        for i, value in enumerate(self.coordinates):
            if int(point.features[i]) != value:
                return 0.0
        return 1.0