"""
In-memory session manager for SwarmGrid simulations.

Each session wraps a SimulationEngine + MetricsCollector + TickDriver.
Ticks run under the session lock, and every reader takes the same lock,
so callers only ever observe state between completed ticks.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any

from swarmgrid.api.driver import TickDriver
from swarmgrid.core.config import SimulationSettings
from swarmgrid.core.engine import SimulationEngine
from swarmgrid.metrics.collector import MetricsCollector

logger = logging.getLogger(__name__)


class SessionBusyError(ValueError):
    """Raised for operations that are not allowed while a session is running."""


@dataclass
class SimulationSession:
    """A simulation and the controls layered over it."""

    id: str
    name: str
    settings: SimulationSettings
    engine: SimulationEngine
    collector: MetricsCollector
    status: str = "created"  # created | running | paused | error
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    driver: TickDriver | None = field(default=None, repr=False)

    @property
    def tick(self) -> int:
        return self.engine.tick

    @property
    def is_running(self) -> bool:
        return self.driver is not None and self.driver.is_running


class SessionManager:
    """Creates, drives and tears down simulation sessions."""

    def __init__(self, default_settings: SimulationSettings | None = None):
        self.sessions: dict[str, SimulationSession] = {}
        self._default_settings = default_settings

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_session(
        self,
        settings: SimulationSettings | None = None,
        name: str | None = None,
    ) -> SimulationSession:
        """Create and initialize a new session (tick 0)."""
        if settings is None:
            settings = self._default_settings or SimulationSettings()
        engine = SimulationEngine(settings)

        session_id = uuid.uuid4().hex[:8]
        session = SimulationSession(
            id=session_id,
            name=name or settings.experiment_name,
            settings=settings,
            engine=engine,
            collector=MetricsCollector(),
        )
        session.driver = self._build_driver(session)

        self.sessions[session_id] = session
        logger.info(
            "Created session %s (%dx%d grid, %d agents)",
            session_id, settings.grid_width, settings.grid_height,
            len(engine.state.agents),
        )
        return session

    def get_session(self, session_id: str) -> SimulationSession:
        """Get a session by ID. Raises KeyError if not found."""
        try:
            return self.sessions[session_id]
        except KeyError:
            raise KeyError(f"Session '{session_id}' not found") from None

    def list_sessions(self) -> list[dict[str, Any]]:
        """List all sessions as summary dicts."""
        result = []
        for s in list(self.sessions.values()):
            with s.lock:
                result.append({
                    "id": s.id,
                    "name": s.name,
                    "status": s.status,
                    "tick": s.tick,
                    "agent_count": len(s.engine.state.agents),
                    "is_running": s.is_running,
                })
        return result

    def delete_session(self, session_id: str) -> None:
        """Stop a session's timer and forget it."""
        session = self.get_session(session_id)
        if session.driver is not None:
            session.driver.pause()
        del self.sessions[session_id]
        logger.info("Deleted session %s", session_id)

    def close(self) -> None:
        """Stop every running timer."""
        for session in list(self.sessions.values()):
            if session.driver is not None:
                session.driver.pause()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def step(self, session_id: str, n: int = 1) -> SimulationSession:
        """Advance a paused session by N ticks."""
        session = self.get_session(session_id)
        if session.is_running:
            return session  # Timer owns the cadence, don't interfere

        with session.lock:
            for _ in range(n):
                self._tick(session)
            if session.status == "created":
                session.status = "paused"
        return session

    def start(self, session_id: str) -> SimulationSession:
        """Start the repeating timer. No-op if already running."""
        session = self.get_session(session_id)
        if session.driver is not None and session.driver.start():
            session.status = "running"
            logger.info("Session %s running at %.1fx", session_id, session.driver.speed)
        return session

    def pause(self, session_id: str) -> SimulationSession:
        """Cancel the repeating timer. No-op if already paused."""
        session = self.get_session(session_id)
        if session.driver is not None and session.driver.pause():
            session.status = "paused"
            logger.info("Session %s paused at tick %d", session_id, session.tick)
        return session

    def set_speed(self, session_id: str, speed: float) -> SimulationSession:
        """Change the timer period; a running timer is replaced, not doubled."""
        session = self.get_session(session_id)
        with session.lock:
            settings = session.settings.with_overrides(speed=speed).validate()
            session.settings = settings
            session.engine.settings = settings
        if session.driver is not None:
            session.driver.set_speed(speed)
        return session

    def is_running(self, session_id: str) -> bool:
        return self.get_session(session_id).is_running

    # ------------------------------------------------------------------
    # Reset / settings
    # ------------------------------------------------------------------
    def reset_session(self, session_id: str) -> SimulationSession:
        """Replace the whole state with a fresh initialization."""
        session = self.get_session(session_id)
        if session.driver is not None:
            session.driver.pause()

        with session.lock:
            session.engine = SimulationEngine(session.settings)
            session.collector = MetricsCollector()
            session.status = "created"
        logger.info("Reset session %s", session_id)
        return session

    def update_settings(
        self, session_id: str, overrides: dict[str, Any],
    ) -> SimulationSession:
        """Apply setting overrides.

        Structural changes (grid size, population, resources, seed)
        rebuild the world; behavioural ones apply from the next tick.
        Raises ``ConfigurationError`` and leaves the session untouched if
        the merged settings are invalid.
        """
        session = self.get_session(session_id)
        new_settings = session.settings.with_overrides(**overrides).validate()

        if session.settings.requires_reset(new_settings):
            if session.is_running:
                raise SessionBusyError(
                    f"Session '{session_id}' is running; pause before changing "
                    f"grid, population or resources"
                )
            # Build the new world before touching the session
            engine = SimulationEngine(new_settings)
            if session.driver is not None:
                session.driver.pause()
            with session.lock:
                session.settings = new_settings
                session.engine = engine
                session.collector = MetricsCollector()
                session.status = "created"
            if session.driver is not None and session.driver.speed != new_settings.speed:
                session.driver.set_speed(new_settings.speed)
            logger.info("Rebuilt session %s with new settings", session_id)
            return session

        with session.lock:
            session.settings = new_settings
            session.engine.settings = new_settings
        if session.driver is not None and session.driver.speed != new_settings.speed:
            session.driver.set_speed(new_settings.speed)
        return session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _tick(self, session: SimulationSession) -> None:
        state = session.engine.step()
        session.collector.collect(state)

    def _build_driver(self, session: SimulationSession) -> TickDriver:
        def _timer_tick() -> None:
            with session.lock:
                self._tick(session)

        def _on_error(exc: BaseException) -> None:
            session.status = "error"

        return TickDriver(
            _timer_tick,
            speed=session.settings.speed,
            on_error=_on_error,
            name=f"session-{session.id}",
        )
