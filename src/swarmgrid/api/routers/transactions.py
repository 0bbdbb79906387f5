"""Transaction log and trade network endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from swarmgrid.core.config import RESOURCE_TYPES
from swarmgrid.metrics.collector import recent_transactions, trade_network

router = APIRouter()


def _get_session(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}")
def list_transactions(
    session_id: str,
    request: Request,
    limit: int = Query(5, ge=1, le=1000),
    resource_type: str | None = Query(None),
    success: bool | None = Query(None),
) -> dict[str, Any]:
    """Most recent transactions, newest first."""
    if resource_type is not None and resource_type not in RESOURCE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown resource type '{resource_type}'")
    session = _get_session(request, session_id)
    with session.lock:
        log = session.engine.state.transactions
        filtered = [
            t for t in log
            if (resource_type is None or t.resource_type == resource_type)
            and (success is None or t.success == success)
        ]
        return {
            "total": len(log),
            "transactions": [t.to_dict() for t in recent_transactions(filtered, limit)],
        }


@router.get("/{session_id}/network")
def get_network(session_id: str, request: Request) -> dict[str, Any]:
    """Edges from each agent to the partners of its most recent trades."""
    session = _get_session(request, session_id)
    with session.lock:
        edges = trade_network(session.engine.state)
    return {"edges": edges, "edge_count": len(edges)}
