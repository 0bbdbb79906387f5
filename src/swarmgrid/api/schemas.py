"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any


# === Simulation ===

class CreateSessionRequest(BaseModel):
    settings: dict[str, Any] | None = None
    preset: str | None = None
    name: str | None = None


class StepRequest(BaseModel):
    n: int = Field(1, ge=1, le=10_000)


class SpeedRequest(BaseModel):
    speed: float = Field(..., gt=0)


class SettingsUpdateRequest(BaseModel):
    overrides: dict[str, Any]


class SessionSummary(BaseModel):
    id: str
    name: str
    status: str
    tick: int
    agent_count: int
    is_running: bool


class SessionResponse(SessionSummary):
    settings: dict[str, Any]
    metrics: dict[str, Any]


# === Agents ===

class AgentSummaryResponse(BaseModel):
    id: str
    index: int
    kind: str
    position: list[int]
    resources: dict[str, int]
    reputation: float
    trade_count: int


class AgentDetailResponse(AgentSummaryResponse):
    history: list[dict[str, Any]]


class PaginatedAgentList(BaseModel):
    agents: list[AgentSummaryResponse]
    total: int
    page: int
    page_size: int


# === Metrics ===

class SummaryResponse(BaseModel):
    ticks: int
    total_transactions: int
    success_rate: float
    peak_transactions_per_tick: int
    mean_reputation: float
    average_price: dict[str, float]
    resource_utilization: dict[str, float]


class TimeSeriesResponse(BaseModel):
    field: str
    ticks: list[int]
    values: list[Any]


# === Experiments ===

class PresetInfo(BaseModel):
    name: str
    settings: dict[str, Any]
