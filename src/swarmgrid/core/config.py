"""
Configuration for the SwarmGrid simulation.

Every caller-tunable parameter lives in ``SimulationSettings``. The
algorithmic constants below are fixed properties of the market model and
are not part of the settings object.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any

# ---------------------------------------------------------------------------
# Fixed model constants
# ---------------------------------------------------------------------------
RESOURCE_TYPES: tuple[str, ...] = ("compute", "storage", "data")

METRICS_WINDOW = 50               # ticks
TRADE_SUCCESS_PROBABILITY = 0.8
BASE_PRICE = 10                   # per unit at neutral reputation
NEUTRAL_REPUTATION = 50.0
MIN_REPUTATION = 0.0
MAX_REPUTATION = 100.0

VISUALIZATION_MODES = ("normal", "heatmap", "network")

# Fields whose change invalidates the current world and forces a reset.
STRUCTURAL_FIELDS = frozenset({
    "grid_width",
    "grid_height",
    "initial_agent_count",
    "provider_ratio",
    "consumer_ratio",
    "hybrid_ratio",
    "initial_resources",
    "random_seed",
})

_RATIO_TOLERANCE = 1e-6


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigurationError(ValueError):
    """Raised when settings violate the caller contract."""


@dataclass
class SimulationSettings:
    """
    All tunable parameters for one simulation run.

    Defaults reproduce the stock 20x20 market. Call ``validate()`` before
    use; the engine does so on every ``initialize`` and ``step``.
    """

    # === Identity ===
    experiment_name: str = "default"
    random_seed: int | None = None

    # === World ===
    grid_width: int = 20
    grid_height: int = 20

    # === Population ===
    initial_agent_count: int = 50
    provider_ratio: float = 0.4
    consumer_ratio: float = 0.4
    hybrid_ratio: float = 0.2

    # === Resources placed on the grid at initialization ===
    initial_resources: dict[str, int] = field(default_factory=lambda: {
        "compute": 1000,
        "storage": 1000,
        "data": 1000,
    })

    # === Behaviour ===
    movement_probability: float = 0.3
    trade_probability: float = 0.5
    reputation_impact: float = 0.1

    # === Driver / presentation ===
    speed: float = 1.0  # timer period is 1 / speed seconds
    visualization_mode: str = "normal"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> SimulationSettings:
        """Check the caller contract; raise ``ConfigurationError`` on violation."""
        for name in ("grid_width", "grid_height", "initial_agent_count"):
            value = getattr(self, name)
            if not _is_int(value):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.random_seed is not None and not _is_int(self.random_seed):
            raise ConfigurationError(
                f"random_seed must be an integer or None, got {self.random_seed!r}"
            )

        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got "
                f"{self.grid_width}x{self.grid_height}"
            )
        if self.initial_agent_count < 0:
            raise ConfigurationError(
                f"initial_agent_count must be >= 0, got {self.initial_agent_count}"
            )

        ratios = (self.provider_ratio, self.consumer_ratio, self.hybrid_ratio)
        if any(r < 0 for r in ratios):
            raise ConfigurationError(f"Agent ratios must be non-negative, got {ratios}")
        if not math.isclose(sum(ratios), 1.0, abs_tol=_RATIO_TOLERANCE):
            raise ConfigurationError(
                f"provider_ratio + consumer_ratio + hybrid_ratio must equal 1, "
                f"got {sum(ratios):.6f}"
            )

        missing = [r for r in RESOURCE_TYPES if r not in self.initial_resources]
        if missing:
            raise ConfigurationError(f"initial_resources missing types: {missing}")
        unknown = [r for r in self.initial_resources if r not in RESOURCE_TYPES]
        if unknown:
            raise ConfigurationError(f"Unknown resource types: {unknown}")
        for rtype, total in self.initial_resources.items():
            if not _is_int(total):
                raise ConfigurationError(
                    f"initial_resources[{rtype!r}] must be an integer, got {total!r}"
                )
            if total < 0:
                raise ConfigurationError(
                    f"initial_resources[{rtype!r}] must be >= 0, got {total}"
                )

        for name in ("movement_probability", "trade_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.reputation_impact < 0:
            raise ConfigurationError(
                f"reputation_impact must be >= 0, got {self.reputation_impact}"
            )

        if self.speed <= 0:
            raise ConfigurationError(f"speed must be positive, got {self.speed}")
        if self.visualization_mode not in VISUALIZATION_MODES:
            raise ConfigurationError(
                f"Unknown visualization_mode {self.visualization_mode!r}. "
                f"Choose from: {list(VISUALIZATION_MODES)}"
            )
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            d[f.name] = dict(v) if isinstance(v, dict) else v
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SimulationSettings:
        """Deserialize from a dict. Unknown keys are a configuration error."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {unknown}")
        return cls(**d)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, s: str) -> SimulationSettings:
        return cls.from_dict(json.loads(s))

    def with_overrides(self, **overrides: Any) -> SimulationSettings:
        """Return a copy with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {unknown}")
        # Partial resource dicts merge into the current totals
        resources = dict(self.initial_resources)
        resources.update(overrides.pop("initial_resources", None) or {})
        return replace(self, initial_resources=resources, **overrides)

    def diff(self, other: SimulationSettings) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two settings objects."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs

    def requires_reset(self, other: SimulationSettings) -> bool:
        """True if moving from ``self`` to ``other`` changes the world shape."""
        return any(k in STRUCTURAL_FIELDS for k in self.diff(other))
