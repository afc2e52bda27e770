"""Weighted points in a real-valued feature space."""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass

DEFAULT_DIMENSION = 54


@dataclass
class Point:
    """A data point with a weight, a cost and a feature vector.

    When ``features`` is omitted the point gets ``dimension`` zero features
    (54 when no dimension is given either). When ``features`` is given the
    dimension defaults to its length and must match it otherwise.
    """

    index: int = -1
    weight: float = 1.0
    dimension: int | None = None
    cost: float = 0.0
    timestamp: int = 0
    clustering_center: int = -1
    min_dist: float = 0.0
    features: list[float] | None = None

    def __post_init__(self) -> None:
        if self.features is None:
            if self.dimension is None:
                self.dimension = DEFAULT_DIMENSION
            if self.dimension < 0:
                raise ValueError(f"dimension must not be negative, got {self.dimension}")
            self.features = [0.0] * self.dimension
        else:
            self.features = [float(value) for value in self.features]
            if self.dimension is None:
                self.dimension = len(self.features)
            elif self.dimension != len(self.features):
                raise ValueError(
                    f"dimension {self.dimension} does not match "
                    f"{len(self.features)} features"
                )

    def copy(self) -> Point:
        """Return an independent copy of this point."""
        return dataclasses.replace(self, features=list(self.features))

    def distance_to(self, other: Point) -> float:
        """Euclidean distance to ``other`` over this point's dimensions."""
        if len(other.features) < self.dimension:
            raise ValueError(
                f"other point has {len(other.features)} features, "
                f"need at least {self.dimension}"
            )
        return math.dist(self.features[: self.dimension], other.features[: self.dimension])