"""Smoke tests for core liquidator modules.

These tests verify basic functionality without deep validation.
Run these first to catch obvious breakage.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pydantic import ValidationError

from liquidator.config.loader import config_from_dict, load_config
from liquidator.config.schema import Config
from liquidator.simulation.runner import SimulationRunner, SimulationResult


class TestConfigLoading:
    """Smoke tests for configuration loading."""

    def test_load_default_config(self):
        """Config loads without errors."""
        config = load_config()
        assert config is not None
        assert isinstance(config, Config)

    def test_config_has_required_sections(self):
        """Config contains all expected sections."""
        config = load_config()
        assert hasattr(config, 'liquidator')
        assert hasattr(config, 'initial_state')
        assert hasattr(config, 'schedules')
        assert hasattr(config, 'simulation')

    def test_reference_values(self):
        """Defaults match the reference scenario."""
        config = load_config()
        assert config.liquidator.ema_alpha == 0.7
        assert config.liquidator.swap_multiplier == 0.3
        assert config.liquidator.liquidity_fraction == 0.02
        assert config.liquidator.min_profit == 1.0
        assert config.initial_state.yield_reserve == 500
        assert config.initial_state.reward_reserve == 50
        assert config.initial_state.yield_ema == 0
        assert config.simulation.duration == 1000
        assert config.simulation.output_csv is None
        assert config.schedules.market_rates[350] == 32
        assert config.schedules.accrual_rates[800] == 10000

    def test_config_hash_is_deterministic(self):
        """Same config produces same hash."""
        assert load_config().compute_hash() == load_config().compute_hash()

    def test_yaml_defaults_match_schema_defaults(self):
        """defaults.yaml and the schema defaults describe the same scenario."""
        assert load_config().compute_hash() == Config().compute_hash()

    def test_hash_changes_with_parameters(self):
        """Different parameters produce different hashes."""
        base = Config()
        other = config_from_dict({'liquidator': {'ema_alpha': 0.5}})
        assert base.compute_hash() != other.compute_hash()

    def test_round_trip_dict(self):
        """to_dict/from_dict preserve the config."""
        config = load_config()
        assert Config.from_dict(config.to_dict()).compute_hash() == config.compute_hash()


class TestConfigValidation:
    """Invalid parameters are rejected."""

    @pytest.mark.parametrize("section,key,value", [
        ('liquidator', 'ema_alpha', 0.0),
        ('liquidator', 'ema_alpha', 1.5),
        ('liquidator', 'swap_multiplier', -0.1),
        ('liquidator', 'liquidity_fraction', 0.0),
        ('initial_state', 'yield_reserve', 0.0),
        ('initial_state', 'reward_reserve', -1.0),
        ('simulation', 'duration', 0),
    ])
    def test_out_of_range_rejected(self, section, key, value):
        with pytest.raises(ValidationError):
            config_from_dict({section: {key: value}})

    def test_schedule_requires_tick_zero(self):
        with pytest.raises(ValidationError):
            config_from_dict({'schedules': {'market_rates': {5: 10.0}}})

    def test_schedule_rejects_negative_rate(self):
        with pytest.raises(ValidationError):
            config_from_dict({'schedules': {'accrual_rates': {0: 10.0, 5: -1.0}}})

    def test_initial_market_rate_must_be_positive(self):
        with pytest.raises(ValidationError):
            config_from_dict({'schedules': {'market_rates': {0: 0.0}}})

    def test_invalid_zero_rate_policy(self):
        with pytest.raises(ValidationError):
            config_from_dict({'schedules': {'zero_rate_policy': 'fix'}})

    def test_yaml_file_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(str(path))


class TestSimulationSmoke:
    """Smoke tests for a complete run."""

    def test_short_run(self):
        """Runner completes a short run."""
        config = config_from_dict({'simulation': {'duration': 20}})
        result = SimulationRunner(config).run()
        assert isinstance(result, SimulationResult)
        assert result.arb_count == len(result.records)
        assert result.final_metrics['arb_count'] == result.arb_count

    def test_full_reference_run(self):
        """Reference scenario runs to completion with arbitrages."""
        result = SimulationRunner(load_config()).run()
        assert result.arb_count > 0
        assert result.cumulative_reward_spent > 0
        assert result.final_market_state.reserves.is_valid()
