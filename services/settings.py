# services/settings.py
"""
Configuration service.

- Loads config.yaml (if present) and overlays it on built-in defaults so a
  missing key or a missing file never crashes a run.
- Converts the `scenario` + `monte_carlo` sections into validated
  ScenarioSettings for the engine.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from engine.models import ConfidenceLevel, DistributionType, ScenarioSettings
from engine.validation import validate_settings

DEFAULTS: Dict[str, Any] = {
    "paths": {
        "samples_dir": "data/samples",
        "processed_dir": "data/processed",
    },
    "scenario": {
        "name": "Baseline",
        "project_name": "Untitled project",
        "start_date": None,
        "probability_target": 0.50,
        "project_probability_target": 0.95,
        "default_confidence_level": ConfidenceLevel.MEDIUM.value,
        "default_distribution_type": DistributionType.NORMAL.value,
        "use_us_holidays": False,
    },
    "monte_carlo": {
        "iterations": 50000,
        "seed": "spert",
        "progress_interval": 10000,
    },
    "analytics": {
        "bootstrap_iterations": 500,
        "ci_level": 0.95,
        "cdf_max_points": 200,
        "top_sensitive": 5,
    },
    "display": {"date_format": "MM/DD/YYYY"},
}


def load_cfg(fp: str) -> dict:
    """Load YAML config; return empty dict if the file is empty."""
    with open(fp, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(cfg_path: Optional[Path] = None) -> Dict[str, Any]:
    """Return a config dict: defaults overlaid with the user's YAML if present."""
    cfg = copy.deepcopy(DEFAULTS)
    if cfg_path is None or not Path(cfg_path).exists():
        return cfg

    user_cfg = load_cfg(str(cfg_path))
    for k, v in user_cfg.items():
        if isinstance(v, dict) and isinstance(cfg.get(k), dict):
            cfg[k].update(v)  # shallow-merge sections
        else:
            cfg[k] = v
    return cfg


def scenario_settings_from_config(cfg: Dict[str, Any]) -> ScenarioSettings:
    """
    Build ScenarioSettings from the merged config.

    Raises engine.validation.ValidationError for out-of-range targets or
    trial counts, and ValueError for unknown enum values.
    """
    sc = cfg.get("scenario", {})
    mc = cfg.get("monte_carlo", {})
    settings = ScenarioSettings(
        probability_target=float(sc.get("probability_target", 0.50)),
        project_probability_target=float(sc.get("project_probability_target", 0.95)),
        trial_count=int(mc.get("iterations", 50000)),
        rng_seed=str(mc.get("seed", "spert")),
        default_confidence_level=ConfidenceLevel(sc.get("default_confidence_level", "medium_confidence")),
        default_distribution_type=DistributionType(sc.get("default_distribution_type", "normal")),
    )
    return validate_settings(settings)
