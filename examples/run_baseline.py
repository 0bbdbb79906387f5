#!/usr/bin/env python3
"""Run a baseline SwarmGrid market and print per-tick results."""

from swarmgrid.core.config import RESOURCE_TYPES, SimulationSettings
from swarmgrid.core.engine import SimulationEngine
from swarmgrid.metrics.collector import MetricsCollector, price_trends


def main():
    settings = SimulationSettings(experiment_name="baseline", random_seed=42)
    ticks = 100

    print(f"=== SwarmGrid: {settings.experiment_name} ===")
    print(f"Grid: {settings.grid_width}x{settings.grid_height}")
    print(f"Agents: {settings.initial_agent_count} "
          f"(P {settings.provider_ratio:.0%} / C {settings.consumer_ratio:.0%} "
          f"/ H {settings.hybrid_ratio:.0%})")
    print(f"Ticks: {ticks}")
    print()

    engine = SimulationEngine(settings)
    collector = MetricsCollector()

    print(f"{'Tick':>4} {'Txns':>5} {'OK':>4} {'Rate':>5} {'AvgRep':>6} "
          + " ".join(f"{r[:4]:>6}" for r in RESOURCE_TYPES))
    print("-" * 60)

    for _ in range(ticks):
        snap = collector.collect(engine.step())
        if snap.tick % 10 != 0:
            continue
        prices = " ".join(f"{snap.average_price[r]:6.2f}" for r in RESOURCE_TYPES)
        print(
            f"{snap.tick:4d} {snap.transactions_this_tick:5d} "
            f"{snap.successes_this_tick:4d} {snap.success_rate:5.2f} "
            f"{snap.mean_reputation:6.1f} {prices}"
        )

    print()
    state = engine.state
    print(f"Total transactions: {len(state.transactions)}")
    for rtype, trend in price_trends(state.transactions).items():
        arrow = "up" if trend.increasing else "down"
        print(f"  {rtype:8s} price trend: {arrow} {trend.change_pct:.1f}%")


if __name__ == "__main__":
    main()
