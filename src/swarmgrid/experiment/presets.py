"""
Experiment presets: pre-configured market templates.

Each preset returns a SimulationSettings with parameters chosen to probe
a different question about how reputation and movement shape the market.
"""

from __future__ import annotations

from swarmgrid.core.config import SimulationSettings


def baseline() -> SimulationSettings:
    """Stock 20x20 market with default parameters."""
    return SimulationSettings(experiment_name="baseline")


def provider_heavy() -> SimulationSettings:
    """Supply glut: most agents are providers competing for few consumers."""
    return SimulationSettings(
        experiment_name="provider_heavy",
        provider_ratio=0.7,
        consumer_ratio=0.2,
        hybrid_ratio=0.1,
    )


def consumer_heavy() -> SimulationSettings:
    """Scarcity: few providers are drained by many consumers."""
    return SimulationSettings(
        experiment_name="consumer_heavy",
        provider_ratio=0.15,
        consumer_ratio=0.75,
        hybrid_ratio=0.1,
    )


def hybrid_market() -> SimulationSettings:
    """Peer-to-peer market made almost entirely of hybrids."""
    return SimulationSettings(
        experiment_name="hybrid_market",
        provider_ratio=0.1,
        consumer_ratio=0.1,
        hybrid_ratio=0.8,
    )


def static_market() -> SimulationSettings:
    """No movement: trading partners are fixed by the initial placement."""
    return SimulationSettings(
        experiment_name="static_market",
        grid_width=10,
        grid_height=10,
        initial_agent_count=80,
        movement_probability=0.0,
        trade_probability=0.8,
    )


def high_reputation_impact() -> SimulationSettings:
    """Strong reputation feedback: each trade swings price and selection."""
    return SimulationSettings(
        experiment_name="high_reputation_impact",
        reputation_impact=1.0,
        trade_probability=0.7,
    )


PRESETS = {
    "baseline": baseline,
    "provider_heavy": provider_heavy,
    "consumer_heavy": consumer_heavy,
    "hybrid_market": hybrid_market,
    "static_market": static_market,
    "high_reputation_impact": high_reputation_impact,
}


def get_preset(name: str) -> SimulationSettings:
    """Get a preset settings object by name."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]()


def list_presets() -> list[str]:
    """Return all available preset names."""
    return list(PRESETS.keys())
