"""Simulation core: settings, grid, agents, tick stages and the engine."""

from swarmgrid.core.agent import Agent, AgentKind, Transaction
from swarmgrid.core.config import ConfigurationError, SimulationSettings
from swarmgrid.core.engine import SimulationEngine, SimulationState, initialize, step
from swarmgrid.core.grid import GridCell, GridSpace
from swarmgrid.core.registry import AgentRegistry

__all__ = [
    "Agent",
    "AgentKind",
    "Transaction",
    "ConfigurationError",
    "SimulationSettings",
    "SimulationEngine",
    "SimulationState",
    "initialize",
    "step",
    "GridCell",
    "GridSpace",
    "AgentRegistry",
]
