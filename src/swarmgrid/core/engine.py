"""
Main simulation engine.

``initialize`` builds a fresh world from settings; ``step`` advances a
state by one tick and returns the result without touching its input.
Each tick runs three stages in a fixed order:

1. Movement
2. Trade matching
3. Metrics aggregation

``SimulationEngine`` is a thin stateful wrapper that owns the random
stream and the current state for callers that step repeatedly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from swarmgrid.core.agent import Agent, Transaction
from swarmgrid.core.config import RESOURCE_TYPES, SimulationSettings
from swarmgrid.core.grid import GridSpace
from swarmgrid.core.movement import MovementStage
from swarmgrid.core.registry import AgentRegistry
from swarmgrid.core.trading import TradeMatchingStage, TradeStats
from swarmgrid.metrics.aggregator import EconomicMetrics, MetricsAggregator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Simulation state
# ---------------------------------------------------------------------------
@dataclass
class SimulationState:
    """Everything a tick reads and writes."""

    tick: int
    grid: GridSpace
    registry: AgentRegistry
    transactions: list[Transaction] = field(default_factory=list)
    metrics: EconomicMetrics = field(default_factory=EconomicMetrics)
    resource_totals: dict[str, int] = field(default_factory=dict)

    # Stats from the most recent trade stage, for tick summaries
    last_trade_stats: TradeStats = field(default_factory=TradeStats)

    @property
    def agents(self) -> list[Agent]:
        return self.registry.agents

    def copy(self) -> SimulationState:
        """Independent copy; immutable Transaction records are shared."""
        return SimulationState(
            tick=self.tick,
            grid=self.grid.copy(),
            registry=self.registry.copy(),
            transactions=list(self.transactions),
            metrics=self.metrics.copy(),
            resource_totals=dict(self.resource_totals),
            last_trade_stats=TradeStats(**vars(self.last_trade_stats)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "grid": self.grid.to_dict(),
            "agents": [
                {
                    "index": a.index,
                    "id": a.id,
                    "kind": a.kind.value,
                    "position": list(a.position),
                    "resources": dict(a.resources),
                    "reputation": a.reputation,
                    "history": [t.id for t in a.history],
                }
                for a in self.agents
            ],
            "transactions": [t.to_dict() for t in self.transactions],
            "metrics": self.metrics.to_dict(),
            "resource_totals": dict(self.resource_totals),
        }


# ---------------------------------------------------------------------------
# Pure core surface
# ---------------------------------------------------------------------------
def initialize(settings: SimulationSettings, rng: np.random.Generator) -> SimulationState:
    """Build tick 0: empty grid, seeded resources, founding population."""
    settings.validate()

    grid = GridSpace(settings.grid_width, settings.grid_height)
    registry = AgentRegistry()
    registry.populate(settings, grid, rng)
    grid.distribute_resources(settings.initial_resources, rng)

    return SimulationState(
        tick=0,
        grid=grid,
        registry=registry,
        resource_totals={r: int(settings.initial_resources[r]) for r in RESOURCE_TYPES},
    )


def step(
    state: SimulationState, settings: SimulationSettings,
    rng: np.random.Generator,
) -> SimulationState:
    """Advance one tick. ``state`` is left unchanged; a new state is returned."""
    settings.validate()
    nxt = state.copy()
    nxt.tick += 1

    # === Stage 1: Movement ===
    MovementStage(settings.movement_probability).run(nxt.grid, nxt.registry, rng)

    # === Stage 2: Trade matching ===
    trading = TradeMatchingStage(settings.trade_probability, settings.reputation_impact)
    nxt.last_trade_stats = trading.run(
        nxt.grid, nxt.registry, nxt.transactions, nxt.tick, rng,
    )

    # === Stage 3: Metrics ===
    nxt.metrics = MetricsAggregator().aggregate(
        nxt.metrics, nxt.transactions, nxt.agents, nxt.tick,
    )
    return nxt


# ---------------------------------------------------------------------------
# Simulation Engine
# ---------------------------------------------------------------------------
class SimulationEngine:
    """Stateful driver around ``initialize`` / ``step``."""

    def __init__(self, settings: SimulationSettings):
        self.settings = settings.validate()
        self.rng = np.random.default_rng(settings.random_seed)
        self.state = initialize(settings, self.rng)

    @property
    def tick(self) -> int:
        return self.state.tick

    def step(self) -> SimulationState:
        """Advance one tick and return the new state."""
        self.state = step(self.state, self.settings, self.rng)
        stats = self.state.last_trade_stats
        logger.debug(
            "tick %d complete: %d transactions (%d total)",
            self.state.tick, stats.transactions, len(self.state.transactions),
        )
        return self.state

    def run(self, ticks: int) -> SimulationState:
        for _ in range(ticks):
            self.step()
        return self.state
