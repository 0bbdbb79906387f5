"""Economic metrics endpoints."""

from __future__ import annotations

from typing import Any

import numpy as np
from fastapi import APIRouter, HTTPException, Query, Request

from swarmgrid.api.schemas import SummaryResponse, TimeSeriesResponse
from swarmgrid.api.serializers import serialize_metrics
from swarmgrid.metrics.collector import price_trends

router = APIRouter()


def _get_session(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}/current")
def get_current(session_id: str, request: Request) -> dict[str, Any]:
    session = _get_session(request, session_id)
    with session.lock:
        return {"tick": session.tick, **session.engine.state.metrics.to_dict()}


@router.get("/{session_id}/ticks")
def get_ticks(
    session_id: str,
    request: Request,
    from_tick: int = Query(0, ge=0),
    to_tick: int | None = Query(None),
) -> list[dict[str, Any]]:
    session = _get_session(request, session_id)
    with session.lock:
        history = session.collector.metrics_history
        return [
            serialize_metrics(m) for m in history
            if m.tick >= from_tick and (to_tick is None or m.tick < to_tick)
        ]


@router.get("/{session_id}/time-series/{field_name}", response_model=TimeSeriesResponse)
def get_time_series(session_id: str, field_name: str, request: Request):
    session = _get_session(request, session_id)
    with session.lock:
        collector = session.collector
        try:
            values = collector.get_time_series(field_name)
        except AttributeError:
            raise HTTPException(status_code=400, detail=f"Unknown metric field: '{field_name}'")
        ticks = collector.get_time_series("tick")

    # Convert numpy types to Python scalars
    safe_values = []
    for v in values:
        if isinstance(v, np.ndarray):
            safe_values.append(v.tolist())
        elif isinstance(v, (np.integer, np.floating)):
            safe_values.append(v.item())
        else:
            safe_values.append(v)

    return {"field": field_name, "ticks": ticks, "values": safe_values}


@router.get("/{session_id}/summary", response_model=SummaryResponse)
def get_summary(session_id: str, request: Request):
    session = _get_session(request, session_id)
    with session.lock:
        state = session.engine.state
        history = session.collector.metrics_history
        reputations = [a.reputation for a in state.agents]
        successes = sum(1 for t in state.transactions if t.success)
        return {
            "ticks": state.tick,
            "total_transactions": len(state.transactions),
            "success_rate": round(successes / len(state.transactions), 4) if state.transactions else 0.0,
            "peak_transactions_per_tick": max(
                (m.transactions_this_tick for m in history), default=0,
            ),
            "mean_reputation": round(float(np.mean(reputations)), 4) if reputations else 0.0,
            "average_price": dict(state.metrics.average_price),
            "resource_utilization": dict(state.metrics.resource_utilization),
        }


@router.get("/{session_id}/price-trends")
def get_price_trends(session_id: str, request: Request) -> dict[str, Any]:
    session = _get_session(request, session_id)
    with session.lock:
        trends = price_trends(session.engine.state.transactions)
        prices = dict(session.engine.state.metrics.average_price)
    return {
        rtype: {"average_price": prices[rtype], **trend.to_dict()}
        for rtype, trend in trends.items()
    }
