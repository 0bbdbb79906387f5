"""
Agent and transaction records for the SwarmGrid market.

Agents live in an arena (``SimulationState.agents``) and are addressed by
their stable ``index``; grid cells only hold those indices. Transactions
are immutable and shared between the global log and both participants'
histories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from swarmgrid.core.config import NEUTRAL_REPUTATION, RESOURCE_TYPES


class AgentKind(str, Enum):
    """Closed set of market roles."""

    PROVIDER = "provider"
    CONSUMER = "consumer"
    HYBRID = "hybrid"

    @property
    def can_provide(self) -> bool:
        return self in (AgentKind.PROVIDER, AgentKind.HYBRID)

    @property
    def can_consume(self) -> bool:
        return self in (AgentKind.CONSUMER, AgentKind.HYBRID)


@dataclass(frozen=True)
class Transaction:
    """One trade attempt between a provider and a consumer."""

    id: str
    provider_id: str
    consumer_id: str
    resource_type: str
    amount: int
    price: int
    timestamp: int
    success: bool

    @property
    def unit_price(self) -> float:
        return self.price / self.amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "provider_id": self.provider_id,
            "consumer_id": self.consumer_id,
            "resource_type": self.resource_type,
            "amount": self.amount,
            "price": self.price,
            "timestamp": self.timestamp,
            "success": self.success,
        }


@dataclass
class Agent:
    """A market participant with holdings, reputation and trade history."""

    # === Identity ===
    index: int
    id: str
    kind: AgentKind

    # === Position (always within grid bounds) ===
    x: int
    y: int

    # === Economic state ===
    resources: dict[str, int] = field(
        default_factory=lambda: {r: 0 for r in RESOURCE_TYPES}
    )
    reputation: float = NEUTRAL_REPUTATION

    # === History (append-only, shared Transaction records) ===
    history: list[Transaction] = field(default_factory=list)

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    def record(self, transaction: Transaction) -> None:
        """Append a transaction this agent took part in."""
        self.history.append(transaction)

    def copy(self) -> Agent:
        """Independent copy; Transaction records are immutable and shared."""
        return Agent(
            index=self.index,
            id=self.id,
            kind=self.kind,
            x=self.x,
            y=self.y,
            resources=dict(self.resources),
            reputation=self.reputation,
            history=list(self.history),
        )

    def __repr__(self) -> str:
        return (
            f"Agent(id={self.id!r}, kind={self.kind.value}, pos=({self.x}, {self.y}), "
            f"reputation={self.reputation:.1f}, trades={len(self.history)})"
        )
