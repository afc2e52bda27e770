"""Decaying edge weights for a weighted adjacency list."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AdjustedWeight:
    """A weight decayed between updates.

    ``update_time`` is a logical clock; ``update_time_wallclock`` is a
    wall-clock timestamp in microseconds.
    """

    weight: float
    update_time: int
    update_time_wallclock: int = 0

    def add(self, start_time: int, decay_value: float) -> None:
        """Count one more hit at logical time ``start_time``."""
        if start_time == self.update_time:
            self.weight += 1
        else:
            self.weight = self.weight * decay_value + 1
            self.update_time = start_time

    def add_wallclock(self, start_time: int, decay_value: float) -> None:
        """Count one more hit at wall-clock time ``start_time`` (microseconds)."""
        if self.update_time_wallclock == start_time:
            self.weight += 1
        else:
            self.weight *= decay_value + 1
            self.update_time_wallclock = start_time

    def current_weight(self, decay_factor: float) -> float:
        return self.weight * decay_factor