"""Configuration management for desmos-text."""

from __future__ import annotations

import json
from pathlib import Path

from desmos_text.errors import ConfigError
from desmos_text.models import ConverterConfig

CONFIG_DIR = ".desmos-text"
CONFIG_FILE = "config.json"


def _config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIR / CONFIG_FILE


def save_config(config: ConverterConfig, project_root: Path) -> Path:
    """Save config to .desmos-text/config.json. Returns the config path."""
    config_dir = project_root / CONFIG_DIR
    config_dir.mkdir(parents=True, exist_ok=True)
    path = _config_path(project_root)
    data = {
        "graph_flags": config.graph_flags,
        "output_suffix": config.output_suffix,
    }
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def load_config(project_root: Path) -> ConverterConfig:
    """Load config from .desmos-text/config.json."""
    path = _config_path(project_root)
    if not path.exists():
        raise FileNotFoundError(f"No config found at {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a JSON object")

    graph_flags = data.get("graph_flags", False)
    if not isinstance(graph_flags, bool):
        raise ConfigError("graph_flags must be true or false")
    output_suffix = data.get("output_suffix", ".dest")
    if not isinstance(output_suffix, str) or not output_suffix.startswith("."):
        raise ConfigError("output_suffix must be a string starting with '.'")

    return ConverterConfig(graph_flags=graph_flags, output_suffix=output_suffix)


def load_config_or_default(project_root: Path) -> ConverterConfig:
    """Load the project config, falling back to defaults when there is none."""
    if not is_initialized(project_root):
        return ConverterConfig()
    return load_config(project_root)


def is_initialized(project_root: Path) -> bool:
    """Check if the project has a desmos-text config file."""
    return _config_path(project_root).exists()
