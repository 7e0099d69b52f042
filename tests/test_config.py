"""Tests for engine configuration loading."""

import json
import logging

import pytest

from holdem_engine.core.config import EngineConfig, load_engine_config
from holdem_engine.core.errors import InvalidInput


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.sample_budget == 2_000
        assert config.strong_threshold == 0.70
        assert config.mix_frequency == 0.10
        assert config.parallel_workers is None

    def test_to_dict(self) -> None:
        data = EngineConfig(aggression=1.5).to_dict()
        assert data["aggression"] == 1.5
        assert EngineConfig(**data) == EngineConfig(aggression=1.5)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sample_budget": 0},
            {"mix_frequency": 1.5},
            {"strong_threshold": -0.1},
            {"aggression": 0},
            {"pot_fraction": -1},
            {"parallel_workers": 0},
            {"sample_budget": 1000.0},
            {"sample_budget": True},
            {"parallel_workers": 2.5},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(InvalidInput):
            EngineConfig(**kwargs)


class TestLoadEngineConfig:
    def test_missing_file_uses_defaults(self, tmp_path) -> None:
        assert load_engine_config(tmp_path / "absent.json") == EngineConfig()

    def test_loads_values(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sample_budget": 5_000, "mix_frequency": 0.05}))
        config = load_engine_config(path)
        assert config.sample_budget == 5_000
        assert config.mix_frequency == 0.05
        assert config.aggression == 1.0

    def test_bad_json_falls_back(self, tmp_path, caplog) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="holdem_engine.config"):
            assert load_engine_config(path) == EngineConfig()
        assert "Failed to read engine config" in caplog.text

    def test_non_object_falls_back(self, tmp_path, caplog) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")
        with caplog.at_level(logging.WARNING, logger="holdem_engine.config"):
            assert load_engine_config(path) == EngineConfig()
        assert "not a JSON object" in caplog.text

    def test_unknown_key_falls_back(self, tmp_path, caplog) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sample_budget": 100, "bluff_everything": True}))
        with caplog.at_level(logging.WARNING, logger="holdem_engine.config"):
            assert load_engine_config(path) == EngineConfig()
        assert "bluff_everything" in caplog.text

    def test_out_of_range_falls_back(self, tmp_path, caplog) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"mix_frequency": 3}))
        with caplog.at_level(logging.WARNING, logger="holdem_engine.config"):
            assert load_engine_config(path) == EngineConfig()
        assert "Invalid engine config" in caplog.text

    def test_float_budget_falls_back(self, tmp_path, caplog) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sample_budget": 1000.0}))
        with caplog.at_level(logging.WARNING, logger="holdem_engine.config"):
            config = load_engine_config(path)
        assert config == EngineConfig()
        assert isinstance(config.sample_budget, int)
        assert "sample_budget must be an integer" in caplog.text
