"""
Experiment Runner: A/B testing, parameter sweeps, and batch execution.

Runs simulations headless for a fixed number of ticks and summarizes the
resulting market.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from swarmgrid.core.config import RESOURCE_TYPES, SimulationSettings
from swarmgrid.core.engine import SimulationEngine, SimulationState
from swarmgrid.metrics.collector import MetricsCollector, TickMetrics


@dataclass
class ExperimentResult:
    """Result of a single experiment run."""
    settings: SimulationSettings
    ticks: int
    final_state: SimulationState
    metrics: list[TickMetrics]
    total_transactions: int
    success_rate: float
    mean_reputation: float
    reputation_std: float
    final_average_price: dict[str, float]

    def summary(self) -> dict[str, Any]:
        return {
            "experiment_name": self.settings.experiment_name,
            "ticks": self.ticks,
            "total_transactions": self.total_transactions,
            "success_rate": round(self.success_rate, 4),
            "mean_reputation": round(self.mean_reputation, 4),
            "reputation_std": round(self.reputation_std, 4),
            "final_average_price": {
                r: round(v, 4) for r, v in self.final_average_price.items()
            },
        }


@dataclass
class ComparisonResult:
    """Result of comparing two or more experiments."""
    results: dict[str, ExperimentResult]
    settings_diffs: dict[str, Any]


class ExperimentRunner:
    """
    Run, compare, and sweep simulation experiments.
    """

    def __init__(self, ticks: int = 200):
        self.ticks = ticks

    def run_experiment(
        self,
        settings: SimulationSettings,
        ticks: int | None = None,
    ) -> ExperimentResult:
        """Run a single experiment and return results."""
        ticks = self.ticks if ticks is None else ticks
        engine = SimulationEngine(settings)
        collector = MetricsCollector()
        for _ in range(ticks):
            collector.collect(engine.step())

        state = engine.state
        reputations = np.array([a.reputation for a in state.agents], dtype=float)
        successes = sum(1 for t in state.transactions if t.success)

        return ExperimentResult(
            settings=settings,
            ticks=ticks,
            final_state=state,
            metrics=collector.metrics_history,
            total_transactions=len(state.transactions),
            success_rate=successes / len(state.transactions) if state.transactions else 0.0,
            mean_reputation=float(reputations.mean()) if reputations.size else 0.0,
            reputation_std=float(reputations.std()) if reputations.size else 0.0,
            final_average_price={r: state.metrics.average_price[r] for r in RESOURCE_TYPES},
        )

    def compare_experiments(
        self,
        settings: dict[str, SimulationSettings],
        ticks: int | None = None,
    ) -> ComparisonResult:
        """Run multiple experiments and compare results."""
        results: dict[str, ExperimentResult] = {}
        for name, s in settings.items():
            results[name] = self.run_experiment(s, ticks)

        names = list(settings.keys())
        diffs: dict[str, Any] = {}
        if len(names) >= 2:
            base = settings[names[0]]
            for name in names[1:]:
                diffs[f"{names[0]}_vs_{name}"] = base.diff(settings[name])

        return ComparisonResult(results=results, settings_diffs=diffs)

    def run_ab_test(
        self,
        settings_a: SimulationSettings,
        settings_b: SimulationSettings,
        label_a: str = "A",
        label_b: str = "B",
        ticks: int | None = None,
    ) -> ComparisonResult:
        """Run an A/B test between two settings objects."""
        return self.compare_experiments({label_a: settings_a, label_b: settings_b}, ticks)

    def run_parameter_sweep(
        self,
        base_settings: SimulationSettings,
        param_name: str,
        values: list[Any],
        ticks: int | None = None,
    ) -> dict[str, ExperimentResult]:
        """
        Sweep a single parameter across multiple values.

        Args:
            base_settings: Settings to modify
            param_name: Attribute on SimulationSettings to sweep
            values: Values to test
            ticks: Ticks per run (defaults to the runner's)

        Returns:
            Dict mapping "param=value" label -> ExperimentResult
        """
        results: dict[str, ExperimentResult] = {}
        for val in values:
            s = base_settings.with_overrides(
                **{param_name: val},
                experiment_name=f"sweep_{param_name}={val}",
            )
            results[f"{param_name}={val}"] = self.run_experiment(s, ticks)
        return results

    def run_multi_seed(
        self,
        settings: SimulationSettings,
        seeds: list[int],
        ticks: int | None = None,
    ) -> list[ExperimentResult]:
        """Run the same settings with several random seeds to measure variance."""
        return [
            self.run_experiment(
                settings.with_overrides(
                    random_seed=seed,
                    experiment_name=f"{settings.experiment_name}_seed{seed}",
                ),
                ticks,
            )
            for seed in seeds
        ]
