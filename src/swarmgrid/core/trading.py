"""
Trade matching stage: cell-local provider/consumer matching.

Within every occupied cell, each eligible consumer may attempt one trade
per tick with a provider drawn at random, weighted by reputation. The
provider's price scales with its reputation, the trade succeeds with a
fixed probability, and the outcome feeds back into the provider's
reputation.

Settlement is first-served: providers' holdings are read live, so a
provider that serves several consumers in the same cell-tick exposes its
already-reduced balance to the later ones.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from swarmgrid.core.agent import Agent, AgentKind, Transaction
from swarmgrid.core.config import (
    BASE_PRICE,
    MAX_REPUTATION,
    MIN_REPUTATION,
    NEUTRAL_REPUTATION,
    RESOURCE_TYPES,
    TRADE_SUCCESS_PROBABILITY,
)
from swarmgrid.core.grid import GridCell, GridSpace
from swarmgrid.core.registry import AgentRegistry

logger = logging.getLogger(__name__)

HYBRID_CONSUMER_SKIP_PROBABILITY = 0.5
MAX_REQUEST_SIZE = 10
SUCCESS_REPUTATION_GAIN = 10.0   # multiplied by reputation_impact
FAILURE_REPUTATION_LOSS = 15.0   # multiplied by reputation_impact


def price_for(amount: int, reputation: float) -> int:
    """Price of ``amount`` units; reputation 50 is price-neutral."""
    return max(1, math.floor(BASE_PRICE * amount * (reputation / NEUTRAL_REPUTATION)))


def clamp_reputation(value: float) -> float:
    return max(MIN_REPUTATION, min(MAX_REPUTATION, value))


@dataclass
class TradeStats:
    """Counters for one trade stage pass."""
    cells_considered: int = 0
    attempts: int = 0
    self_matches: int = 0
    empty_caps: int = 0
    successes: int = 0
    failures: int = 0

    @property
    def transactions(self) -> int:
        return self.successes + self.failures


class TradeMatchingStage:
    """Match providers and consumers inside each cell and settle trades."""

    def __init__(self, trade_probability: float, reputation_impact: float):
        self.trade_probability = trade_probability
        self.reputation_impact = reputation_impact

    def run(
        self,
        grid: GridSpace,
        registry: AgentRegistry,
        log: list[Transaction],
        tick: int,
        rng: np.random.Generator,
    ) -> TradeStats:
        """Process every cell in row-major order, appending to ``log``."""
        stats = TradeStats()
        for cell in grid.iter_cells():
            before = len(log)
            self._trade_in_cell(cell, registry, log, tick, rng, stats)
            cell.heat = float(len(log) - before)
        logger.debug(
            "tick %d: %d attempts, %d ok, %d failed",
            tick, stats.attempts, stats.successes, stats.failures,
        )
        return stats

    # ------------------------------------------------------------------
    # Per-cell matching
    # ------------------------------------------------------------------
    def _trade_in_cell(
        self,
        cell: GridCell,
        registry: AgentRegistry,
        log: list[Transaction],
        tick: int,
        rng: np.random.Generator,
        stats: TradeStats,
    ) -> None:
        if len(cell.occupants) < 2:
            return
        providers, consumers = self._partition(cell, registry, rng)
        if not providers or not consumers:
            return
        stats.cells_considered += 1

        for consumer in consumers:
            if rng.random() >= self.trade_probability:
                continue
            stats.attempts += 1
            outcome = self._attempt(consumer, providers, tick, len(log), rng, stats)
            if outcome is None:
                continue
            provider, transaction = outcome
            log.append(transaction)
            provider.record(transaction)
            consumer.record(transaction)

    def _partition(
        self, cell: GridCell, registry: AgentRegistry,
        rng: np.random.Generator,
    ) -> tuple[list[Agent], list[Agent]]:
        """Split occupants into eligible providers and consumers.

        A hybrid sits out the consumer role with probability 0.5 per tick;
        it remains available as a provider either way.
        """
        occupants = [registry[i] for i in sorted(cell.occupants)]
        providers = [a for a in occupants if a.kind.can_provide]
        consumers: list[Agent] = []
        for a in occupants:
            if not a.kind.can_consume:
                continue
            if a.kind is AgentKind.HYBRID and rng.random() < HYBRID_CONSUMER_SKIP_PROBABILITY:
                continue
            consumers.append(a)
        return providers, consumers

    def _attempt(
        self,
        consumer: Agent,
        providers: list[Agent],
        tick: int,
        log_size: int,
        rng: np.random.Generator,
        stats: TradeStats,
    ) -> tuple[Agent, Transaction] | None:
        provider = self._select_provider(providers, rng)
        if provider.index == consumer.index:
            stats.self_matches += 1
            return None

        rtype = self._choose_resource_type(rng)
        amount = self._draw_amount(provider.resources[rtype], rng)
        if amount is None:
            stats.empty_caps += 1
            return None

        price = price_for(amount, provider.reputation)
        success = self._roll_success(rng)

        if success:
            provider.resources[rtype] -= amount
            consumer.resources[rtype] += amount
            provider.reputation = clamp_reputation(
                provider.reputation + self.reputation_impact * SUCCESS_REPUTATION_GAIN
            )
            stats.successes += 1
        else:
            provider.reputation = clamp_reputation(
                provider.reputation - self.reputation_impact * FAILURE_REPUTATION_LOSS
            )
            stats.failures += 1

        return provider, Transaction(
            id=f"txn_{log_size + 1:06d}",
            provider_id=provider.id,
            consumer_id=consumer.id,
            resource_type=rtype,
            amount=amount,
            price=price,
            timestamp=tick,
            success=success,
        )

    # ------------------------------------------------------------------
    # Stochastic choices
    # ------------------------------------------------------------------
    def _select_provider(
        self, providers: list[Agent], rng: np.random.Generator,
    ) -> Agent:
        """Reputation-weighted pick, falling back to a uniform pick."""
        weights = [max(0.0, p.reputation) for p in providers]
        total = sum(weights)
        if total > 0:
            remainder = rng.random() * total
            for provider, weight in zip(providers, weights):
                remainder -= weight
                if remainder <= 0:
                    return provider
        return providers[int(rng.integers(0, len(providers)))]

    def _choose_resource_type(self, rng: np.random.Generator) -> str:
        return RESOURCE_TYPES[int(rng.integers(0, len(RESOURCE_TYPES)))]

    def _draw_amount(self, available: int, rng: np.random.Generator) -> int | None:
        """Units to trade, capped by the provider's live holdings.

        Returns ``None`` when the provider has nothing of this type.
        """
        cap = min(available, int(rng.integers(1, MAX_REQUEST_SIZE + 1)))
        if cap <= 0:
            return None
        return int(rng.integers(1, cap + 1))

    def _roll_success(self, rng: np.random.Generator) -> bool:
        return bool(rng.random() < TRADE_SUCCESS_PROBABILITY)
