"""Clustering features and the nodes and settings of a CF tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from streamclust.point import Point


def _assign(current: list[float], values, name: str) -> list[float]:
    new_values = [float(value) for value in values]
    if current and len(current) != len(new_values):
        raise ValueError(
            f"{name} size mismatch: CF holds {len(current)}, got {len(new_values)}"
        )
    return new_values


@dataclass
class CF:
    """A clustering feature: point count, linear sum and squared sum."""

    n: int = 0
    ls: list[float] = field(default_factory=list)
    ss: list[float] = field(default_factory=list)

    def set_ls(self, values) -> None:
        """Replace the linear sum; its length is fixed once set."""
        self.ls = _assign(self.ls, values, "LS")

    def set_ss(self, values) -> None:
        """Replace the squared sum; its length is fixed once set."""
        self.ss = _assign(self.ss, values, "SS")

    def copy(self) -> CF:
        return CF(self.n, list(self.ls), list(self.ss))


@dataclass(eq=False)
class CFNode:
    """A node of a CF tree holding a clustering feature and its points."""

    cf: CF = field(default_factory=CF)
    parents: list[CFNode] = field(default_factory=list)
    children: list[CFNode] = field(default_factory=list)
    index: int = 0
    is_leaf: bool = True
    points: list[Point] = field(default_factory=list)

    def insert_point(self, point: Point) -> None:
        """Store a copy of ``point`` in this node."""
        self.points.append(point.copy())

    def add_parent(self, parent: CFNode) -> None:
        self.parents.append(parent)

    def add_child(self, child: CFNode) -> None:
        self.children.append(child)

    def remove_child(self, child: CFNode) -> None:
        """Remove every child whose index equals ``child.index``."""
        self.children = [node for node in self.children if node.index != child.index]

    def clear_parents(self) -> None:
        self.parents = []

    def set_cf(self, cf: CF) -> None:
        """Copy the values of ``cf`` into this node's own clustering feature."""
        self.cf.n = cf.n
        self.cf.set_ls(cf.ls)
        self.cf.set_ss(cf.ss)

    def copy(self) -> CFNode:
        """Copy the node; the clustering feature and linked nodes are shared."""
        return CFNode(
            cf=self.cf,
            parents=list(self.parents),
            children=list(self.children),
            index=self.index,
            is_leaf=self.is_leaf,
            points=list(self.points),
        )


@dataclass
class CFTree:
    """Branching limits and absorption threshold of a CF tree."""

    max_internal_nodes: int = 0
    max_leaf_nodes: int = 0
    threshold: float = 0.0

    def reset(self, max_internal_nodes: int, max_leaf_nodes: int, threshold: float) -> None:
        self.max_internal_nodes = max_internal_nodes
        self.max_leaf_nodes = max_leaf_nodes
        self.threshold = threshold