"""
tests/test_settings.py

YAML config loading: defaults, shallow per-section overlay, and conversion to
validated ScenarioSettings.
"""

from pathlib import Path

import pytest

from engine.models import ConfidenceLevel, DistributionType, ScenarioSettings
from engine.validation import ValidationError
from services.settings import DEFAULTS, load_cfg, load_config, scenario_settings_from_config


def test_defaults_without_file(tmp_path: Path) -> None:
    cfg = load_config(None)
    assert cfg == DEFAULTS
    assert cfg is not DEFAULTS

    cfg["monte_carlo"]["iterations"] = 1
    assert DEFAULTS["monte_carlo"]["iterations"] == 50000

    assert load_config(tmp_path / "missing.yaml") == DEFAULTS


def test_overlay_merges_sections(tmp_path: Path) -> None:
    fp = tmp_path / "config.yaml"
    fp.write_text(
        "monte_carlo:\n  iterations: 2000\nscenario:\n  project_name: Depot\nextra: 1\n",
        encoding="utf-8",
    )
    cfg = load_config(fp)
    assert cfg["monte_carlo"]["iterations"] == 2000
    assert cfg["monte_carlo"]["seed"] == "spert"
    assert cfg["scenario"]["project_name"] == "Depot"
    assert cfg["scenario"]["probability_target"] == 0.5
    assert cfg["extra"] == 1


def test_empty_yaml(tmp_path: Path) -> None:
    fp = tmp_path / "empty.yaml"
    fp.write_text("", encoding="utf-8")
    assert load_cfg(str(fp)) == {}
    assert load_config(fp) == DEFAULTS


def test_settings_from_defaults() -> None:
    assert scenario_settings_from_config(load_config()) == ScenarioSettings()


def test_settings_from_custom_config(tmp_path: Path) -> None:
    fp = tmp_path / "config.yaml"
    fp.write_text(
        "scenario:\n"
        "  probability_target: 0.8\n"
        "  default_confidence_level: low_confidence\n"
        "  default_distribution_type: triangular\n"
        "monte_carlo:\n"
        "  iterations: 1000\n"
        "  seed: 42\n",
        encoding="utf-8",
    )
    s = scenario_settings_from_config(load_config(fp))
    assert s.probability_target == 0.8
    assert s.trial_count == 1000
    assert s.rng_seed == "42"
    assert s.default_confidence_level is ConfidenceLevel.LOW
    assert s.default_distribution_type is DistributionType.TRIANGULAR


def test_invalid_config_values() -> None:
    cfg = load_config()
    cfg["monte_carlo"]["iterations"] = 10
    with pytest.raises(ValidationError):
        scenario_settings_from_config(cfg)

    cfg = load_config()
    cfg["scenario"]["default_distribution_type"] = "beta"
    with pytest.raises(ValueError):
        scenario_settings_from_config(cfg)
