"""Tests for AgentRegistry and population seeding."""

import numpy as np
import pytest

from swarmgrid.core.agent import Agent, AgentKind
from swarmgrid.core.config import RESOURCE_TYPES, SimulationSettings
from swarmgrid.core.grid import GridSpace
from swarmgrid.core.registry import (
    CONSUMER_HOLDINGS,
    PROVIDER_HOLDINGS_RANGE,
    AgentRegistry,
    kind_counts,
)


def _populate(seed=42, **overrides):
    settings = SimulationSettings(**overrides)
    grid = GridSpace(settings.grid_width, settings.grid_height)
    registry = AgentRegistry()
    registry.populate(settings, grid, np.random.default_rng(seed))
    return grid, registry


class TestKindCounts:
    def test_default_split(self):
        counts = kind_counts(50, 0.4, 0.4)
        assert counts == {AgentKind.PROVIDER: 20, AgentKind.CONSUMER: 20, AgentKind.HYBRID: 10}

    def test_hybrids_absorb_remainder(self):
        counts = kind_counts(7, 0.4, 0.4)
        assert counts[AgentKind.PROVIDER] == 2
        assert counts[AgentKind.CONSUMER] == 2
        assert counts[AgentKind.HYBRID] == 3

    def test_zero_population(self):
        assert sum(kind_counts(0, 0.4, 0.4).values()) == 0


class TestPopulate:
    def test_population_size(self):
        _, registry = _populate()
        assert len(registry) == 50

    def test_counts_by_kind(self):
        _, registry = _populate(initial_agent_count=10)
        assert registry.count_by_kind() == {"provider": 4, "consumer": 4, "hybrid": 2}

    def test_kind_order(self):
        _, registry = _populate(initial_agent_count=10)
        kinds = [a.kind for a in registry]
        assert kinds == [AgentKind.PROVIDER] * 4 + [AgentKind.CONSUMER] * 4 + [AgentKind.HYBRID] * 2

    def test_ids_sequential(self):
        _, registry = _populate(initial_agent_count=3)
        assert [a.id for a in registry] == ["agent_0001", "agent_0002", "agent_0003"]
        assert [a.index for a in registry] == [0, 1, 2]

    def test_starting_reputation(self):
        _, registry = _populate()
        assert all(a.reputation == 50.0 for a in registry)

    def test_consumer_holdings(self):
        _, registry = _populate()
        for a in registry:
            if a.kind is AgentKind.CONSUMER:
                assert a.resources == {r: CONSUMER_HOLDINGS for r in RESOURCE_TYPES}

    def test_provider_holdings_in_range(self):
        _, registry = _populate()
        lo, hi = PROVIDER_HOLDINGS_RANGE
        for a in registry:
            if a.kind.can_provide:
                assert all(lo <= v <= hi for v in a.resources.values())

    def test_agents_placed_on_grid(self):
        grid, registry = _populate()
        assert grid.occupancy_matches(registry.positions())

    def test_positions_in_bounds(self):
        grid, registry = _populate(grid_width=3, grid_height=2)
        assert all(grid.in_bounds(a.x, a.y) for a in registry)


class TestAccess:
    def test_by_id(self):
        _, registry = _populate(initial_agent_count=5)
        assert registry.by_id("agent_0003").index == 2

    def test_by_id_unknown(self):
        _, registry = _populate(initial_agent_count=5)
        with pytest.raises(KeyError):
            registry.by_id("agent_9999")

    def test_add_rejects_wrong_slot(self):
        registry = AgentRegistry()
        with pytest.raises(ValueError):
            registry.add(Agent(index=3, id="x", kind=AgentKind.PROVIDER, x=0, y=0))

    def test_add_rejects_duplicate_id(self):
        registry = AgentRegistry()
        registry.add(Agent(index=0, id="x", kind=AgentKind.PROVIDER, x=0, y=0))
        with pytest.raises(ValueError):
            registry.add(Agent(index=1, id="x", kind=AgentKind.CONSUMER, x=0, y=0))

    def test_total_holdings(self):
        _, registry = _populate(initial_agent_count=5)
        assert registry.total_holdings("data") == sum(a.resources["data"] for a in registry)

    def test_copy_is_independent(self):
        _, registry = _populate(initial_agent_count=5)
        clone = registry.copy()
        clone[0].resources["compute"] = -1
        clone[0].reputation = 0.0
        assert registry[0].resources["compute"] >= 0
        assert registry[0].reputation == 50.0


class TestAgentKind:
    def test_roles(self):
        assert AgentKind.PROVIDER.can_provide and not AgentKind.PROVIDER.can_consume
        assert AgentKind.CONSUMER.can_consume and not AgentKind.CONSUMER.can_provide
        assert AgentKind.HYBRID.can_provide and AgentKind.HYBRID.can_consume

    def test_string_value(self):
        assert AgentKind("hybrid") is AgentKind.HYBRID
