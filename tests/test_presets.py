"""Tests for experiment presets."""

import pytest

from swarmgrid.core.config import SimulationSettings
from swarmgrid.core.engine import SimulationEngine
from swarmgrid.experiment.presets import (
    PRESETS,
    baseline,
    consumer_heavy,
    get_preset,
    high_reputation_impact,
    hybrid_market,
    list_presets,
    provider_heavy,
    static_market,
)


class TestPresetCount:
    def test_six_presets_defined(self):
        assert len(PRESETS) == 6

    def test_list_presets(self):
        names = list_presets()
        assert "baseline" in names
        assert "static_market" in names


class TestPresetReturnTypes:
    def test_all_presets_return_settings(self):
        for name, factory in PRESETS.items():
            settings = factory()
            assert isinstance(settings, SimulationSettings), f"{name} failed"
            assert settings.experiment_name == name

    def test_all_presets_validate(self):
        for factory in PRESETS.values():
            factory().validate()


class TestPresetValues:
    def test_baseline_is_default(self):
        assert baseline().with_overrides(experiment_name="default") == SimulationSettings()

    def test_provider_heavy(self):
        assert provider_heavy().provider_ratio > provider_heavy().consumer_ratio

    def test_consumer_heavy(self):
        assert consumer_heavy().consumer_ratio > consumer_heavy().provider_ratio

    def test_hybrid_market(self):
        assert hybrid_market().hybrid_ratio == 0.8

    def test_static_market(self):
        assert static_market().movement_probability == 0.0

    def test_high_reputation_impact(self):
        assert high_reputation_impact().reputation_impact == 1.0


class TestGetPreset:
    def test_get_known(self):
        assert get_preset("hybrid_market").experiment_name == "hybrid_market"

    def test_get_unknown(self):
        with pytest.raises(KeyError, match="Available"):
            get_preset("nope")

    def test_returns_fresh_object(self):
        a = get_preset("baseline")
        a.initial_resources["compute"] = 0
        assert get_preset("baseline").initial_resources["compute"] == 1000


class TestPresetsRun:
    @pytest.mark.parametrize("name", list(PRESETS))
    def test_preset_runs(self, name):
        settings = get_preset(name).with_overrides(random_seed=1)
        state = SimulationEngine(settings).run(5)
        assert state.tick == 5
