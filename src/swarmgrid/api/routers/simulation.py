"""Simulation session management and control endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from swarmgrid.api.schemas import (
    CreateSessionRequest,
    SessionResponse,
    SessionSummary,
    SettingsUpdateRequest,
    SpeedRequest,
    StepRequest,
)
from swarmgrid.api.sessions import SessionBusyError
from swarmgrid.core.config import ConfigurationError, SimulationSettings
from swarmgrid.experiment.presets import get_preset

router = APIRouter()


def _session_response(session) -> dict:
    with session.lock:
        return {
            "id": session.id,
            "name": session.name,
            "status": session.status,
            "tick": session.tick,
            "agent_count": len(session.engine.state.agents),
            "is_running": session.is_running,
            "settings": session.settings.to_dict(),
            "metrics": session.engine.state.metrics.to_dict(),
        }


def _get_session(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.post("/sessions", response_model=SessionResponse)
def create_session(req: CreateSessionRequest, request: Request):
    mgr = request.app.state.session_manager

    try:
        settings = None
        if req.preset:
            settings = get_preset(req.preset)
        if req.settings:
            base = settings or SimulationSettings()
            settings = base.with_overrides(**req.settings)
        session = mgr.create_session(settings=settings, name=req.name)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]))
    except (ConfigurationError, TypeError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _session_response(session)


@router.get("/sessions", response_model=list[SessionSummary])
def list_sessions(request: Request):
    mgr = request.app.state.session_manager
    return mgr.list_sessions()


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, request: Request):
    return _session_response(_get_session(request, session_id))


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        mgr.delete_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}


@router.post("/sessions/{session_id}/step", response_model=SessionResponse)
def step_session(session_id: str, req: StepRequest, request: Request):
    mgr = request.app.state.session_manager
    session = _get_session(request, session_id)
    if session.is_running:
        raise HTTPException(status_code=409, detail="Cannot step while running")
    mgr.step(session_id, req.n)
    return _session_response(session)


@router.post("/sessions/{session_id}/start", response_model=SessionResponse)
def start_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    _get_session(request, session_id)
    return _session_response(mgr.start(session_id))


@router.post("/sessions/{session_id}/pause", response_model=SessionResponse)
def pause_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    _get_session(request, session_id)
    return _session_response(mgr.pause(session_id))


@router.post("/sessions/{session_id}/speed", response_model=SessionResponse)
def set_speed(session_id: str, req: SpeedRequest, request: Request):
    mgr = request.app.state.session_manager
    _get_session(request, session_id)
    try:
        session = mgr.set_speed(session_id, req.speed)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _session_response(session)


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
def reset_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    _get_session(request, session_id)
    return _session_response(mgr.reset_session(session_id))


@router.patch("/sessions/{session_id}/settings", response_model=SessionResponse)
def update_settings(session_id: str, req: SettingsUpdateRequest, request: Request):
    mgr = request.app.state.session_manager
    _get_session(request, session_id)
    try:
        session = mgr.update_settings(session_id, req.overrides)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (ConfigurationError, TypeError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _session_response(session)
