"""Agent list and detail endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from swarmgrid.api.schemas import AgentDetailResponse, PaginatedAgentList
from swarmgrid.api.serializers import serialize_agent_detail, serialize_agent_summary

router = APIRouter()

_SORT_KEYS = {
    "index": lambda a: a.index,
    "reputation": lambda a: -a.reputation,
    "trades": lambda a: -len(a.history),
}


@router.get("/{session_id}", response_model=PaginatedAgentList)
def list_agents(
    session_id: str,
    request: Request,
    kind: str | None = Query(None),
    min_reputation: float | None = Query(None, ge=0, le=100),
    sort: str = Query("index"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> dict[str, Any]:
    mgr = request.app.state.session_manager
    try:
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    if sort not in _SORT_KEYS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown sort '{sort}'. Choose from: {list(_SORT_KEYS)}",
        )

    with session.lock:
        agents = list(session.engine.state.agents)
        if kind is not None:
            agents = [a for a in agents if a.kind.value == kind]
        if min_reputation is not None:
            agents = [a for a in agents if a.reputation >= min_reputation]
        agents.sort(key=_SORT_KEYS[sort])

        total = len(agents)
        start = (page - 1) * page_size
        page_agents = agents[start:start + page_size]

        return {
            "agents": [serialize_agent_summary(a) for a in page_agents],
            "total": total,
            "page": page,
            "page_size": page_size,
        }


@router.get("/{session_id}/{agent_id}", response_model=AgentDetailResponse)
def get_agent_detail(session_id: str, agent_id: str, request: Request) -> dict[str, Any]:
    mgr = request.app.state.session_manager
    try:
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")

    with session.lock:
        try:
            agent = session.engine.state.registry.by_id(agent_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Agent '{agent_id}' not found")
        return serialize_agent_detail(agent)
