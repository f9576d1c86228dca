"""Tests for configuration loading, logging setup and timers."""

import logging
from pathlib import Path

import pytest
import yaml

from svjcal.calibration import CalibrationConfig, EndCriteria, LevenbergMarquardt
from svjcal.errors import ConfigurationError
from svjcal.models import BatesModel, HestonModel
from svjcal.pricers import BatesEngine, MCEuropeanHestonEngine
from svjcal.utils import (
    Timer,
    get_nested_value,
    load_config,
    merge_configs,
    setup_logging,
)

CONFIG_PATH = Path(__file__).resolve().parents[1] / "configs" / "calibration.yaml"


@pytest.fixture
def package_logger():
    """Restore the package logger after tests that reconfigure it."""
    logger = logging.getLogger("svjcal")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestConfigHelpers:
    """YAML loading and nested-dict helpers."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"end_criteria": {"max_iterations": 10}}))
        assert load_config(path) == {"end_criteria": {"max_iterations": 10}}

    def test_empty_file_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == {}

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_merge_is_recursive_and_pure(self):
        base = {"a": {"x": 1, "y": 2}, "b": 3}
        merged = merge_configs(base, {"a": {"y": 20}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 20}, "b": 3, "c": 4}
        assert base == {"a": {"x": 1, "y": 2}, "b": 3}

    def test_get_nested_value(self):
        config = {"a": {"b": {"c": 5}}}
        assert get_nested_value(config, "a.b.c") == 5
        assert get_nested_value(config, "a.x", 7) == 7
        assert get_nested_value(config, "a.b.c.d") is None


class TestLogging:
    def test_setup_logging_writes_file(self, tmp_path, package_logger):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging("debug", log_file=log_file, console=False)

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        logging.getLogger("svjcal.calibration").debug("hello")
        for handler in logger.handlers:
            handler.flush()

        assert "svjcal.calibration - DEBUG - hello" in log_file.read_text()

    def test_setup_logging_replaces_handlers(self, package_logger):
        setup_logging(console=True)
        setup_logging(console=True)
        assert len(package_logger.handlers) == 1


class TestTimer:
    def test_context_manager(self, caplog):
        with caplog.at_level(logging.INFO, logger="svjcal"):
            with Timer("pricing") as timer:
                pass
        assert timer.elapsed >= 0.0
        assert any("Completed pricing" in r.getMessage() for r in caplog.records)

    def test_failure_is_logged_and_propagated(self, caplog):
        with caplog.at_level(logging.INFO, logger="svjcal"):
            with pytest.raises(ValueError):
                with Timer("pricing"):
                    raise ValueError("boom")
        assert any("pricing failed" in r.getMessage() for r in caplog.records)

    def test_decorator(self, caplog):
        @Timer()
        def work(x):
            return 2 * x

        with caplog.at_level(logging.INFO, logger="svjcal"):
            assert work(3) == 6
        assert any("Completed work" in r.getMessage() for r in caplog.records)


class TestCalibrationConfig:
    """Config file defaults, overrides and engine factories."""

    def test_shipped_defaults(self):
        config = CalibrationConfig.from_yaml(CONFIG_PATH)
        assert config.max_iterations == 400
        assert config.max_stationary_state_iterations == 40
        assert config.calibrate_volatility is True
        assert config.integration_order == 144
        assert config.monte_carlo.required_samples is None
        assert config.monte_carlo.required_tolerance == 0.25

    def test_overrides_keep_other_defaults(self):
        config = CalibrationConfig.from_dict({
            "end_criteria": {"max_iterations": 50},
            "monte_carlo": {"seed": 7, "n_workers": 2},
        })
        assert config.max_iterations == 50
        assert config.function_epsilon == 1e-8
        assert config.monte_carlo.seed == 7
        assert config.monte_carlo.n_workers == 2
        assert config.monte_carlo.steps_per_year == 10

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError):
            CalibrationConfig.from_dict({"solver": {}})

    def test_unknown_monte_carlo_key(self):
        with pytest.raises(ConfigurationError):
            CalibrationConfig.from_dict({"monte_carlo": {"paths": 100}})

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            CalibrationConfig.from_dict({"end_criteria": {"max_iterations": 0}})
        with pytest.raises(ConfigurationError):
            CalibrationConfig(integration_order=0)

    def test_to_dict_round_trip(self):
        config = CalibrationConfig(max_iterations=77, epsfcn=1e-6)
        assert CalibrationConfig.from_dict(config.to_dict()) == config

    def test_builds_optimizer_and_engines(self, heston_process):
        config = CalibrationConfig.from_dict({"engine": {"integration_order": 32}})

        criteria = config.end_criteria()
        assert isinstance(criteria, EndCriteria)
        assert criteria.max_iterations == 400
        assert isinstance(config.optimizer(), LevenbergMarquardt)

        engine = config.analytic_engine(BatesModel(heston_process, 0.5, -0.1, 0.2))
        assert isinstance(engine, BatesEngine)
        assert config.analytic_engine(HestonModel(heston_process)).integration_order == 32

        mc = config.monte_carlo_engine(heston_process)
        assert isinstance(mc, MCEuropeanHestonEngine)
