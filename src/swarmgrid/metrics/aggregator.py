"""
Rolling economic statistics over the transaction log.

Statistics are recomputed from scratch every tick over a trailing window of
``METRICS_WINDOW`` ticks. Any ratio whose denominator is empty keeps its
previous value instead of dropping to zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from swarmgrid.core.agent import Agent, Transaction
from swarmgrid.core.config import METRICS_WINDOW, RESOURCE_TYPES


def _per_type(value: float = 0.0) -> dict[str, float]:
    return {r: value for r in RESOURCE_TYPES}


@dataclass
class EconomicMetrics:
    """Windowed market statistics for one tick."""

    total_transactions: int = 0
    success_rate: float = 0.0
    average_price: dict[str, float] = field(default_factory=_per_type)
    resource_utilization: dict[str, float] = field(default_factory=_per_type)

    def copy(self) -> EconomicMetrics:
        return EconomicMetrics(
            total_transactions=self.total_transactions,
            success_rate=self.success_rate,
            average_price=dict(self.average_price),
            resource_utilization=dict(self.resource_utilization),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_transactions": self.total_transactions,
            "success_rate": self.success_rate,
            "average_price": dict(self.average_price),
            "resource_utilization": dict(self.resource_utilization),
        }


def windowed(transactions: list[Transaction], tick: int) -> list[Transaction]:
    """Transactions stamped strictly after ``tick - METRICS_WINDOW``."""
    cutoff = tick - METRICS_WINDOW
    # The log is chronological, so scan back from the newest entry.
    start = len(transactions)
    while start > 0 and transactions[start - 1].timestamp > cutoff:
        start -= 1
    return transactions[start:]


class MetricsAggregator:
    """Recompute ``EconomicMetrics`` from the log and current holdings."""

    def aggregate(
        self,
        previous: EconomicMetrics,
        transactions: list[Transaction],
        agents: Iterable[Agent],
        tick: int,
    ) -> EconomicMetrics:
        metrics = previous.copy()
        metrics.total_transactions = len(transactions)

        window = windowed(transactions, tick)
        if not window:
            return metrics

        successful = [t for t in window if t.success]
        metrics.success_rate = len(successful) / len(window)

        traded = _per_type()
        priced = _per_type()
        for t in successful:
            traded[t.resource_type] += t.amount
            priced[t.resource_type] += t.price

        for rtype in RESOURCE_TYPES:
            if traded[rtype] > 0:
                metrics.average_price[rtype] = priced[rtype] / traded[rtype]

        holdings = _per_type()
        for agent in agents:
            for rtype in RESOURCE_TYPES:
                holdings[rtype] += agent.resources[rtype]

        for rtype in RESOURCE_TYPES:
            if holdings[rtype] > 0:
                metrics.resource_utilization[rtype] = traded[rtype] / holdings[rtype]

        return metrics
