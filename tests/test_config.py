"""Configuration resolution from explicit values, the environment and defaults."""

import pytest

from liquid_hook.config import (
    BASELINE_SETTINGS,
    build_router_config,
    build_simulation_settings,
    resolve_db_path,
    resolve_log_level,
)
from liquid_hook.core.errors import InvalidConfiguration
from liquid_hook.core.types import OutputEstimate


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LIQUID_HOOK_RESERVE_RATIO_BPS",
        "LIQUID_HOOK_MIN_DEPOSIT",
        "LIQUID_HOOK_OUTPUT_ESTIMATE",
        "LIQUID_HOOK_DB",
        "LIQUID_HOOK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestRouterConfigResolution:

    def test_defaults(self):
        config = build_router_config()

        assert config.reserve_ratio_bps == 2000
        assert config.min_deposit == 0
        assert config.output_estimate is OutputEstimate.QUOTE

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("LIQUID_HOOK_RESERVE_RATIO_BPS", "3500")
        monkeypatch.setenv("LIQUID_HOOK_MIN_DEPOSIT", "10")
        monkeypatch.setenv("LIQUID_HOOK_OUTPUT_ESTIMATE", "specified_amount")

        config = build_router_config()

        assert config.reserve_ratio_bps == 3500
        assert config.min_deposit == 10
        assert config.output_estimate is OutputEstimate.SPECIFIED_AMOUNT

    def test_explicit_values_override_environment(self, monkeypatch):
        monkeypatch.setenv("LIQUID_HOOK_RESERVE_RATIO_BPS", "3500")

        assert build_router_config(reserve_ratio_bps=100).reserve_ratio_bps == 100

    def test_out_of_range_ratio_rejected(self):
        with pytest.raises(InvalidConfiguration):
            build_router_config(reserve_ratio_bps=10_001)

    def test_unknown_output_estimate_rejected(self):
        with pytest.raises(ValueError):
            build_router_config(output_estimate="guess")


class TestSimulationSettings:

    def test_overrides_applied(self):
        settings = build_simulation_settings(n_steps=10, seed=3)

        assert settings.n_steps == 10
        assert settings.seed == 3
        assert settings.pool_fee == BASELINE_SETTINGS.pool_fee

    def test_none_ignored(self):
        assert build_simulation_settings(n_steps=None) == BASELINE_SETTINGS

    def test_unknown_setting_rejected(self):
        with pytest.raises(TypeError):
            build_simulation_settings(steps=10)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"n_steps": 0},
            {"initial_price": 0.0},
            {"retail_buy_prob": 1.5},
            {"utilization_bps": 10_001},
            {"harvest_interval": -1},
        ],
    )
    def test_invalid_settings_rejected(self, overrides):
        with pytest.raises(ValueError):
            build_simulation_settings(**overrides)


class TestEnvironmentPaths:

    def test_db_path_default(self):
        assert resolve_db_path() == "data/liquid_hook.db"

    def test_db_path_from_environment(self, monkeypatch):
        monkeypatch.setenv("LIQUID_HOOK_DB", "/tmp/runs.db")
        assert resolve_db_path() == "/tmp/runs.db"

    def test_log_level(self, monkeypatch):
        assert resolve_log_level() == "WARNING"
        monkeypatch.setenv("LIQUID_HOOK_LOG_LEVEL", "debug")
        assert resolve_log_level() == "DEBUG"
