"""Per-grid density records of a grid-based stream clusterer."""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from enum import Enum

CLOCKS_PER_SEC = 1_000_000


class GridAttribute(Enum):
    SPARSE = "sparse"
    DENSE = "dense"
    TRANSITIONAL = "transitional"


@dataclass
class CharacteristicVector:
    """Density, label and status of one grid.

    Times are processor clock ticks, ``CLOCKS_PER_SEC`` per second. ``dl``
    and ``dm`` are the sparse and dense thresholds used to classify the
    grid at creation.
    """

    update_time: int = 0
    remove_time: int = 0
    grid_density: float = 0.0
    label: int = 0
    is_sporadic: bool = False
    dl: InitVar[float] = 0.0
    dm: InitVar[float] = 0.0
    density_update_time: int = field(init=False)
    attribute: GridAttribute = field(init=False)
    att_change: bool = field(init=False, default=False)

    def __post_init__(self, dl: float, dm: float) -> None:
        self.density_update_time = self.update_time
        self.change_attribute(dl, dm)
        self.att_change = False

    def is_sparse(self, dl: float) -> bool:
        return self.grid_density <= dl

    def is_dense(self, dm: float) -> bool:
        return self.grid_density >= dm

    def is_transitional(self, dm: float, dl: float) -> bool:
        return dl <= self.grid_density <= dm

    def current_density(self, now: int, decay: float) -> float:
        """Density decayed from the last update time to ``now``."""
        return decay ** ((now - self.update_time) / CLOCKS_PER_SEC) * self.grid_density

    def density_with_new(self, now: int, decay: float) -> None:
        """Decay the density to ``now`` and count one new point."""
        self.grid_density = self.current_density(now, decay) + 1.0
        self.density_update_time = now

    def update_all_density(self, now: int, decay: float, dl: float, dm: float) -> None:
        """Decay the density to ``now``, reclassify and record whether the class changed."""
        last = self.attribute
        self.grid_density = self.current_density(now, decay)
        self.density_update_time = now
        self.change_attribute(dl, dm)
        self.att_change = self.attribute != last

    def change_attribute(self, dl: float, dm: float) -> None:
        if self.is_sparse(dl):
            self.attribute = GridAttribute.SPARSE
        elif self.is_dense(dm):
            self.attribute = GridAttribute.DENSE
        else:
            self.attribute = GridAttribute.TRANSITIONAL