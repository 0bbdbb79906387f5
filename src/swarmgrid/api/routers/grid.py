"""Grid occupancy, cell resources and resource distribution endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from swarmgrid.api.serializers import serialize_cell, serialize_grid, serialize_matrix
from swarmgrid.core.config import RESOURCE_TYPES

router = APIRouter()


def _get_session(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}")
def get_grid(
    session_id: str,
    request: Request,
    occupied_only: bool = Query(False),
) -> dict[str, Any]:
    """All cells with occupants, resource pools and heat."""
    session = _get_session(request, session_id)
    with session.lock:
        state = session.engine.state
        return {
            "tick": state.tick,
            "visualization_mode": session.settings.visualization_mode,
            **serialize_grid(state.grid, state.agents, occupied_only=occupied_only),
        }


@router.get("/{session_id}/cells/{x}/{y}")
def get_cell(session_id: str, x: int, y: int, request: Request) -> dict[str, Any]:
    session = _get_session(request, session_id)
    with session.lock:
        state = session.engine.state
        try:
            cell = state.grid.cell(x, y)
        except IndexError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        return serialize_cell(cell, state.agents)


@router.get("/{session_id}/resources/{resource_type}")
def get_resource_distribution(
    session_id: str, resource_type: str, request: Request,
) -> dict[str, Any]:
    """Height x width matrix of one resource type's placement."""
    if resource_type not in RESOURCE_TYPES:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown resource type '{resource_type}'. Choose from: {list(RESOURCE_TYPES)}",
        )
    session = _get_session(request, session_id)
    with session.lock:
        state = session.engine.state
        matrix = state.grid.resource_distribution(resource_type)
        return {
            "resource_type": resource_type,
            "total": state.resource_totals.get(resource_type, 0),
            "placed": int(matrix.sum()),
            "distribution": serialize_matrix(matrix),
        }
