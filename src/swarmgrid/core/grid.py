"""
Square grid geography for the SwarmGrid market.

Cells are addressed as ``(x, y)`` with ``0 <= x < width`` and
``0 <= y < height`` and stored row-major (``cells[y][x]``). Each cell
holds the indices of the agents standing on it, a static resource pool
seeded at initialization, and a decorative heat value for the heatmap
view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from swarmgrid.core.config import RESOURCE_TYPES

# Hotspot parameters for stochastic resource placement.
HOTSPOT_COUNT_RANGE = (3, 7)            # inclusive
HOTSPOT_SHARE_RANGE = (0.1, 0.4)        # fraction of the remaining pool
SCATTER_INCREMENT_RANGE = (1, 10)       # inclusive


@dataclass
class GridCell:
    """A single grid position.

    Attributes:
        x: Column coordinate.
        y: Row coordinate.
        occupants: Arena indices of agents currently on this cell.
        resources: Resource pool per type (non-negative).
        heat: Trade activity in the most recent tick (display only).
    """

    x: int
    y: int
    occupants: set[int] = field(default_factory=set)
    resources: dict[str, int] = field(
        default_factory=lambda: {r: 0 for r in RESOURCE_TYPES}
    )
    heat: float = 0.0

    @property
    def coords(self) -> tuple[int, int]:
        return (self.x, self.y)

    def copy(self) -> GridCell:
        return GridCell(
            x=self.x,
            y=self.y,
            occupants=set(self.occupants),
            resources=dict(self.resources),
            heat=self.heat,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "occupants": sorted(self.occupants),
            "resources": dict(self.resources),
            "heat": self.heat,
        }


class GridSpace:
    """A ``width x height`` grid of cells with occupancy bookkeeping.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        cells: Row-major ``cells[y][x]`` storage.
    """

    # Cardinal steps: up, right, down, left.
    DIRECTIONS: tuple[tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.cells: list[list[GridCell]] = [
            [GridCell(x=x, y=y) for x in range(width)]
            for y in range(height)
        ]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> GridCell:
        """Return the cell at ``(x, y)``. Raises ``IndexError`` off-grid."""
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is outside a {self.width}x{self.height} grid")
        return self.cells[y][x]

    def iter_cells(self):
        """Yield every cell in row-major order."""
        for row in self.cells:
            yield from row

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        """Clamp a coordinate into the grid (no wraparound)."""
        return (
            max(0, min(self.width - 1, x)),
            max(0, min(self.height - 1, y)),
        )

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------
    def place(self, agent_index: int, x: int, y: int) -> None:
        self.cell(x, y).occupants.add(agent_index)

    def relocate(
        self, agent_index: int,
        old: tuple[int, int], new: tuple[int, int],
    ) -> None:
        """Move an agent index from ``old`` to ``new`` in one update."""
        if old == new:
            return
        self.cell(*old).occupants.discard(agent_index)
        self.cell(*new).occupants.add(agent_index)

    def occupancy_matches(self, positions: dict[int, tuple[int, int]]) -> bool:
        """True if every cell holds exactly the agents positioned on it."""
        expected: dict[tuple[int, int], set[int]] = {}
        for idx, pos in positions.items():
            expected.setdefault(pos, set()).add(idx)
        return all(
            cell.occupants == expected.get(cell.coords, set())
            for cell in self.iter_cells()
        )

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    def distribute_resources(
        self, totals: dict[str, int], rng: np.random.Generator,
    ) -> None:
        """Scatter each type's total over the grid.

        A handful of hotspots each take a random share of whatever is
        left, then the remainder is spent in small increments at random
        cells until exhausted. The amount placed per type always equals
        the requested total.
        """
        for rtype in RESOURCE_TYPES:
            remaining = int(totals.get(rtype, 0))

            lo, hi = HOTSPOT_COUNT_RANGE
            hotspots = int(rng.integers(lo, hi + 1))
            for _ in range(hotspots):
                x, y = self._random_coords(rng)
                share = rng.uniform(*HOTSPOT_SHARE_RANGE)
                amount = int(share * remaining)
                self.cells[y][x].resources[rtype] += amount
                remaining -= amount

            lo, hi = SCATTER_INCREMENT_RANGE
            while remaining > 0:
                x, y = self._random_coords(rng)
                amount = min(int(rng.integers(lo, hi + 1)), remaining)
                self.cells[y][x].resources[rtype] += amount
                remaining -= amount

    def total_resources(self, rtype: str) -> int:
        return sum(cell.resources[rtype] for cell in self.iter_cells())

    def resource_distribution(self, rtype: str) -> np.ndarray:
        """``height x width`` matrix of the pool of one resource type."""
        return np.array(
            [[cell.resources[rtype] for cell in row] for row in self.cells],
            dtype=np.int64,
        )

    def _random_coords(self, rng: np.random.Generator) -> tuple[int, int]:
        return int(rng.integers(0, self.width)), int(rng.integers(0, self.height))

    # ------------------------------------------------------------------
    # Copy / serialization
    # ------------------------------------------------------------------
    def copy(self) -> GridSpace:
        clone = GridSpace.__new__(GridSpace)
        clone.width = self.width
        clone.height = self.height
        clone.cells = [[cell.copy() for cell in row] for row in self.cells]
        return clone

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [cell.to_dict() for cell in self.iter_cells()],
        }

    def __repr__(self) -> str:
        occupied = sum(1 for c in self.iter_cells() if c.occupants)
        return f"GridSpace({self.width}x{self.height}, occupied={occupied})"
