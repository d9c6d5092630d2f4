"""
Tests for engine settings and logging setup
"""
import json
import logging
import math

import pytest

from config.settings import EngineSettings, load_settings
from monte_carlo_engine import MonteCarloEngine
from utils.constants import ConvergenceCriterion, SamplingStrategy
from utils.exceptions import ConfigurationError, MonteCarloEngineError
from utils.logging_config import EngineLogger, setup_logging

class TestEngineSettings:
    """Test defaults, environment overrides and validation"""

    def test_defaults(self):
        settings = load_settings()

        assert settings.max_samples == 100_000
        assert settings.batch_size == 1_000
        assert settings.convergence_threshold == 0.001
        assert settings.confidence_level == 0.95
        assert settings.burn_in == 500
        assert settings.thinning == 1
        assert settings.seed is None
        assert settings.strategy is SamplingStrategy.IMPORTANCE
        assert settings.criterion is ConvergenceCriterion.CONFIDENCE_INTERVAL
        assert settings.mcts_exploration_constant == pytest.approx(math.sqrt(2))
        assert settings.mcts_simulations_per_node == 50
        assert settings.mcts_max_depth == 20
        assert settings.mcts_total_simulations == 1000
        assert settings.risk_samples == 10_000
        assert settings.sensitivity_samples == 5_000
        assert settings.logging_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MCE_MAX_SAMPLES", "2500")
        monkeypatch.setenv("MCE_STRATEGY", "antithetic")
        monkeypatch.setenv("MCE_SEED", "17")

        settings = load_settings()
        assert settings.max_samples == 2500
        assert settings.strategy is SamplingStrategy.ANTITHETIC
        assert str(settings.seed) == "17"

    def test_explicit_values_beat_environment(self, monkeypatch):
        monkeypatch.setenv("MCE_BATCH_SIZE", "10")
        assert load_settings(batch_size=20).batch_size == 20

    def test_logging_level_normalised(self):
        assert load_settings(logging_level="debug").logging_level == "DEBUG"

    @pytest.mark.parametrize("kwargs", [
        {"max_samples": 0},
        {"batch_size": -1},
        {"convergence_threshold": 0},
        {"convergence_threshold": float("inf")},
        {"confidence_level": 1.0},
        {"burn_in": -1},
        {"thinning": 0},
        {"strategy": "sobol"},
        {"criterion": "rhat"},
        {"mcts_exploration_constant": -1.0},
        {"mcts_max_depth": -1},
        {"logging_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            load_settings(**kwargs)

    def test_configuration_error_is_engine_error(self):
        with pytest.raises(MonteCarloEngineError):
            load_settings(max_samples=0)

    def test_settings_are_frozen(self):
        settings = load_settings()
        with pytest.raises(Exception):
            settings.max_samples = 5

    def test_with_overrides_ignores_none(self):
        base = load_settings(seed=1, max_samples=500)
        derived = base.with_overrides(max_samples=None, batch_size=50)

        assert derived.max_samples == 500
        assert derived.batch_size == 50
        assert derived.seed == 1
        assert base.batch_size == 1000

    def test_engine_accepts_settings_and_overrides(self):
        base = load_settings(seed=4)
        engine = MonteCarloEngine(base, max_samples=10)

        assert isinstance(engine.settings, EngineSettings)
        assert engine.settings.max_samples == 10
        assert engine.settings.seed == 4

@pytest.fixture
def restore_logging():
    yield
    for name in ("", "monte_carlo_engine", "tree_search", "analytics_engine"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if handler.get_name() not in ("console", "file", "json_file"):
                continue
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True

@pytest.mark.usefixtures("restore_logging")
class TestLogging:
    """Test logging configuration"""

    def test_file_handlers(self, tmp_path):
        setup_logging(level="DEBUG", log_dir=tmp_path)
        events = EngineLogger("monte_carlo_engine.engine")
        events.log_simulation_start("simulation", {"max_samples": 10})

        for handler in logging.getLogger("monte_carlo_engine").handlers:
            handler.flush()

        assert (tmp_path / "montecarlo.log").exists()
        json_lines = (tmp_path / "montecarlo.json.log").read_text().strip().splitlines()
        record = json.loads(json_lines[-1])
        assert record["message"] == "simulation started"
        assert record["event_type"] == "simulation_start"

    def test_json_console(self, capsys):
        setup_logging(level="INFO", json_format=True)
        logging.getLogger("analytics_engine.test").info("hello")

        out = capsys.readouterr().out.strip().splitlines()
        assert json.loads(out[-1])["message"] == "hello"
