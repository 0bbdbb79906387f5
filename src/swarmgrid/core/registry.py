"""
Agent registry: the arena that owns every agent in a simulation.

Agents are appended once at initialization and never removed, so an
agent's ``index`` is stable for the lifetime of the state and can be used
by grid cells as a non-aliasing reference.
"""

from __future__ import annotations

import math
from typing import Iterator

import numpy as np

from swarmgrid.core.agent import Agent, AgentKind
from swarmgrid.core.config import NEUTRAL_REPUTATION, RESOURCE_TYPES, SimulationSettings
from swarmgrid.core.grid import GridSpace

# Provider / hybrid starting holdings are drawn per type from this range.
PROVIDER_HOLDINGS_RANGE = (20, 119)     # inclusive
CONSUMER_HOLDINGS = 10


def kind_counts(
    total: int, provider_ratio: float, consumer_ratio: float,
) -> dict[AgentKind, int]:
    """Split a population by ratio; hybrids absorb the rounding remainder."""
    providers = math.floor(total * provider_ratio)
    consumers = math.floor(total * consumer_ratio)
    return {
        AgentKind.PROVIDER: providers,
        AgentKind.CONSUMER: consumers,
        AgentKind.HYBRID: total - providers - consumers,
    }


class AgentRegistry:
    """Canonical, index-addressed list of agents."""

    def __init__(self) -> None:
        self.agents: list[Agent] = []
        self._by_id: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def spawn(
        self, kind: AgentKind, grid: GridSpace, rng: np.random.Generator,
    ) -> Agent:
        """Create an agent at a random cell and register it on the grid."""
        x = int(rng.integers(0, grid.width))
        y = int(rng.integers(0, grid.height))

        if kind.can_provide:
            lo, hi = PROVIDER_HOLDINGS_RANGE
            resources = {r: int(rng.integers(lo, hi + 1)) for r in RESOURCE_TYPES}
        else:
            resources = {r: CONSUMER_HOLDINGS for r in RESOURCE_TYPES}

        index = len(self.agents)
        agent = Agent(
            index=index,
            id=f"agent_{index + 1:04d}",
            kind=kind,
            x=x,
            y=y,
            resources=resources,
            reputation=NEUTRAL_REPUTATION,
        )
        self.add(agent)
        grid.place(index, x, y)
        return agent

    def add(self, agent: Agent) -> None:
        """Register a prebuilt agent. Its index must be the next free slot."""
        if agent.index != len(self.agents):
            raise ValueError(
                f"Agent index {agent.index} does not match next slot {len(self.agents)}"
            )
        if agent.id in self._by_id:
            raise ValueError(f"Duplicate agent id {agent.id!r}")
        self.agents.append(agent)
        self._by_id[agent.id] = agent.index

    def populate(
        self, settings: SimulationSettings, grid: GridSpace,
        rng: np.random.Generator,
    ) -> None:
        """Spawn the founding population: providers, consumers, then hybrids."""
        counts = kind_counts(
            settings.initial_agent_count,
            settings.provider_ratio,
            settings.consumer_ratio,
        )
        for kind in (AgentKind.PROVIDER, AgentKind.CONSUMER, AgentKind.HYBRID):
            for _ in range(counts[kind]):
                self.spawn(kind, grid, rng)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self.agents)

    def __getitem__(self, index: int) -> Agent:
        return self.agents[index]

    def by_id(self, agent_id: str) -> Agent:
        """Look up an agent by id. Raises ``KeyError`` if unknown."""
        try:
            return self.agents[self._by_id[agent_id]]
        except KeyError:
            raise KeyError(f"Agent '{agent_id}' not found") from None

    def positions(self) -> dict[int, tuple[int, int]]:
        return {a.index: a.position for a in self.agents}

    def total_holdings(self, rtype: str) -> int:
        return sum(a.resources[rtype] for a in self.agents)

    def count_by_kind(self) -> dict[str, int]:
        counts = {k.value: 0 for k in AgentKind}
        for a in self.agents:
            counts[a.kind.value] += 1
        return counts

    def copy(self) -> AgentRegistry:
        clone = AgentRegistry()
        clone.agents = [a.copy() for a in self.agents]
        clone._by_id = dict(self._by_id)
        return clone
