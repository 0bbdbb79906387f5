"""
Movement stage: one random cardinal step per agent per tick.
"""

from __future__ import annotations

import numpy as np

from swarmgrid.core.grid import GridSpace
from swarmgrid.core.registry import AgentRegistry


class MovementStage:
    """Random-walk agents on the grid, clamping at the edges.

    Each move touches only the moving agent's position and the two cells
    involved, so the resulting occupancy does not depend on the order in
    which agents are processed.
    """

    def __init__(self, movement_probability: float):
        self.movement_probability = movement_probability

    def run(
        self, grid: GridSpace, registry: AgentRegistry,
        rng: np.random.Generator,
    ) -> int:
        """Advance every agent; return how many changed cell."""
        moved = 0
        for agent in registry:
            if rng.random() >= self.movement_probability:
                continue
            dx, dy = GridSpace.DIRECTIONS[int(rng.integers(0, len(GridSpace.DIRECTIONS)))]
            old = agent.position
            new = grid.clamp(agent.x + dx, agent.y + dy)
            if new == old:
                continue
            grid.relocate(agent.index, old, new)
            agent.x, agent.y = new
            moved += 1
        return moved
