"""
FastAPI application factory for the SwarmGrid API.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swarmgrid.api.sessions import SessionManager
from swarmgrid.api.routers import agents, experiments, grid, metrics, simulation, transactions
from swarmgrid.experiment.presets import get_preset

logger = logging.getLogger(__name__)

# Load .env from the project root, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/swarmgrid/api/app.py -> project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")


@asynccontextmanager
async def _lifespan(application: FastAPI):
    yield
    # Cancel every running timer on shutdown
    application.state.session_manager.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="SwarmGrid API",
        description="REST API for the SwarmGrid resource-market simulation",
        version="0.1.0",
        lifespan=_lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    default_settings = None
    preset_name = os.environ.get("SWARMGRID_DEFAULT_PRESET")
    if preset_name:
        default_settings = get_preset(preset_name)
        logger.info("Default session settings from preset %r", preset_name)
    application.state.session_manager = SessionManager(default_settings=default_settings)

    application.include_router(simulation.router, prefix="/api/simulation", tags=["simulation"])
    application.include_router(agents.router, prefix="/api/agents", tags=["agents"])
    application.include_router(grid.router, prefix="/api/grid", tags=["grid"])
    application.include_router(metrics.router, prefix="/api/metrics", tags=["metrics"])
    application.include_router(transactions.router, prefix="/api/transactions", tags=["transactions"])
    application.include_router(experiments.router, prefix="/api/experiments", tags=["experiments"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return application


app = create_app()
