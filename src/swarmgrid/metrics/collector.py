"""
Metrics Collector: per-tick history on top of ``EconomicMetrics``.

Keeps one snapshot per completed tick (market statistics plus population
aggregates such as reputation by agent kind), and provides time series
extraction, price trends, recent-trade listings and the trade network for
visualization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from swarmgrid.core.agent import AgentKind, Transaction
from swarmgrid.core.config import RESOURCE_TYPES
from swarmgrid.core.engine import SimulationState

PRICE_TREND_SAMPLE = 20
PRICE_TREND_MIN_SAMPLE = 10
NETWORK_RECENT_TRADES = 3


@dataclass
class TickMetrics:
    """Snapshot of one completed tick."""

    tick: int
    agent_count: int

    # Market statistics (windowed)
    total_transactions: int
    success_rate: float
    average_price: dict[str, float]
    resource_utilization: dict[str, float]

    # This tick only
    transactions_this_tick: int
    successes_this_tick: int

    # Population
    mean_reputation: float
    reputation_by_kind: dict[str, float]
    holdings: dict[str, int]

    # Busiest cells by heat, as (x, y, heat)
    hot_cells: list[tuple[int, int, float]] = field(default_factory=list)


@dataclass
class PriceTrend:
    """Direction of unit price over recent successful trades."""
    change_pct: float = 0.0
    increasing: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"change_pct": self.change_pct, "increasing": self.increasing}


class MetricsCollector:
    """Collects tick snapshots across a run."""

    def __init__(self, hot_cell_count: int = 5):
        self.hot_cell_count = hot_cell_count
        self.metrics_history: list[TickMetrics] = []

    def collect(self, state: SimulationState) -> TickMetrics:
        """Record a snapshot of a completed tick."""
        agents = state.agents
        reputations = [a.reputation for a in agents]

        by_kind: dict[str, float] = {}
        for kind in AgentKind:
            values = [a.reputation for a in agents if a.kind is kind]
            by_kind[kind.value] = float(np.mean(values)) if values else 0.0

        n_new = state.last_trade_stats.transactions
        this_tick = state.transactions[len(state.transactions) - n_new:]

        hot = sorted(
            (c for c in state.grid.iter_cells() if c.heat > 0),
            key=lambda c: (-c.heat, c.y, c.x),
        )[: self.hot_cell_count]

        m = state.metrics
        metrics = TickMetrics(
            tick=state.tick,
            agent_count=len(agents),
            total_transactions=m.total_transactions,
            success_rate=m.success_rate,
            average_price=dict(m.average_price),
            resource_utilization=dict(m.resource_utilization),
            transactions_this_tick=len(this_tick),
            successes_this_tick=sum(1 for t in this_tick if t.success),
            mean_reputation=float(np.mean(reputations)) if reputations else 0.0,
            reputation_by_kind=by_kind,
            holdings={r: state.registry.total_holdings(r) for r in RESOURCE_TYPES},
            hot_cells=[(c.x, c.y, c.heat) for c in hot],
        )
        self.metrics_history.append(metrics)
        return metrics

    def get_time_series(self, field_name: str) -> list[Any]:
        """Extract a time series for a specific metric field."""
        return [getattr(m, field_name) for m in self.metrics_history]

    def export_for_visualization(self) -> list[dict[str, Any]]:
        """Export all snapshots as JSON-serializable dicts."""
        return [
            {
                "tick": m.tick,
                "agent_count": m.agent_count,
                "total_transactions": m.total_transactions,
                "success_rate": m.success_rate,
                "average_price": m.average_price,
                "resource_utilization": m.resource_utilization,
                "transactions_this_tick": m.transactions_this_tick,
                "successes_this_tick": m.successes_this_tick,
                "mean_reputation": m.mean_reputation,
                "reputation_by_kind": m.reputation_by_kind,
                "holdings": m.holdings,
                "hot_cells": [list(c) for c in m.hot_cells],
            }
            for m in self.metrics_history
        ]


# ---------------------------------------------------------------------------
# Log views
# ---------------------------------------------------------------------------
def price_trends(transactions: list[Transaction]) -> dict[str, PriceTrend]:
    """Unit-price trend per resource type.

    Uses the last 20 successful trades of each type; with at least 10,
    compares the mean unit price of the older half against the newer half.
    """
    trends: dict[str, PriceTrend] = {}
    for rtype in RESOURCE_TYPES:
        sample = [t for t in transactions if t.success and t.resource_type == rtype]
        sample = sample[-PRICE_TREND_SAMPLE:]
        if len(sample) < PRICE_TREND_MIN_SAMPLE:
            trends[rtype] = PriceTrend()
            continue

        mid = len(sample) // 2
        first = float(np.mean([t.unit_price for t in sample[:mid]]))
        second = float(np.mean([t.unit_price for t in sample[mid:]]))
        pct = (second - first) / first * 100 if first != 0 else 0.0
        trends[rtype] = PriceTrend(change_pct=abs(pct), increasing=pct > 0)
    return trends


def recent_transactions(transactions: list[Transaction], limit: int = 5) -> list[Transaction]:
    """The newest ``limit`` transactions, newest first."""
    if limit <= 0:
        return []
    return list(reversed(transactions[-limit:]))


def trade_network(state: SimulationState) -> list[dict[str, Any]]:
    """Edges from each agent to the counterparties of its latest trades."""
    edges: list[dict[str, Any]] = []
    for agent in state.agents:
        for t in agent.history[-NETWORK_RECENT_TRADES:]:
            other_id = t.consumer_id if agent.id == t.provider_id else t.provider_id
            other = state.registry.by_id(other_id)
            edges.append({
                "source": agent.id,
                "target": other_id,
                "source_position": list(agent.position),
                "target_position": list(other.position),
                "resource_type": t.resource_type,
                "amount": t.amount,
                "success": t.success,
                "transaction_id": t.id,
            })
    return edges
