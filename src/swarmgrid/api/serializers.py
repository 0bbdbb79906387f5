"""
Serializers for converting simulation objects to JSON-safe dicts.

Handles numpy scalars/arrays, enums, and the Agent/GridCell dataclasses.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from swarmgrid.core.agent import Agent
from swarmgrid.core.config import RESOURCE_TYPES
from swarmgrid.core.grid import GridCell, GridSpace
from swarmgrid.metrics.collector import TickMetrics


def _float(v) -> float:
    """Safely convert numpy floats to a rounded Python float."""
    return round(float(v), 4)


def serialize_agent_summary(agent: Agent) -> dict[str, Any]:
    """Lightweight agent summary for list views."""
    return {
        "id": agent.id,
        "index": agent.index,
        "kind": agent.kind.value,
        "position": [agent.x, agent.y],
        "resources": {r: int(agent.resources[r]) for r in RESOURCE_TYPES},
        "reputation": _float(agent.reputation),
        "trade_count": len(agent.history),
    }


def serialize_agent_detail(agent: Agent) -> dict[str, Any]:
    """Full agent detail including its trade history."""
    return {
        **serialize_agent_summary(agent),
        "history": [t.to_dict() for t in agent.history],
    }


def serialize_cell(cell: GridCell, agents: list[Agent]) -> dict[str, Any]:
    return {
        "x": cell.x,
        "y": cell.y,
        "agents": [
            {"id": agents[i].id, "kind": agents[i].kind.value,
             "reputation": _float(agents[i].reputation)}
            for i in sorted(cell.occupants)
        ],
        "resources": dict(cell.resources),
        "heat": _float(cell.heat),
    }


def serialize_grid(grid: GridSpace, agents: list[Agent], occupied_only: bool = False) -> dict[str, Any]:
    cells = [
        serialize_cell(c, agents)
        for c in grid.iter_cells()
        if c.occupants or not occupied_only
    ]
    return {"width": grid.width, "height": grid.height, "cells": cells}


def serialize_matrix(matrix: np.ndarray) -> list[list[int]]:
    return matrix.astype(int).tolist()


def serialize_metrics(m: TickMetrics) -> dict[str, Any]:
    """Convert a TickMetrics snapshot to a JSON-safe dict."""
    return {
        "tick": m.tick,
        "agent_count": m.agent_count,
        "total_transactions": m.total_transactions,
        "success_rate": _float(m.success_rate),
        "average_price": {k: _float(v) for k, v in m.average_price.items()},
        "resource_utilization": {k: _float(v) for k, v in m.resource_utilization.items()},
        "transactions_this_tick": m.transactions_this_tick,
        "successes_this_tick": m.successes_this_tick,
        "mean_reputation": _float(m.mean_reputation),
        "reputation_by_kind": {k: _float(v) for k, v in m.reputation_by_kind.items()},
        "holdings": {k: int(v) for k, v in m.holdings.items()},
        "hot_cells": [[x, y, _float(h)] for x, y, h in m.hot_cells],
    }
