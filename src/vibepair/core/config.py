"""3-layer configuration system for vibepair.

Loads and merges configuration from:
1. Default settings (built-in)
2. Project config (.vibepair/config.yaml)
3. CLI parameters (override)
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

CONFIG_DIR = ".vibepair"

DEFAULT_CONFIG: dict = {
    "project": {
        "name": "",
        "language": "typescript",
    },
    "workflow": {
        "max_iterations": 3,
        "converge_max_iterations": 5,
        "min_score": 80,
        "history_limit": 100,
    },
    "analysis": {
        "debounce_seconds": 1.5,
        "min_chunk_size": 50,
        "drop_stale_results": False,
    },
    "writer": {
        "temperature": 0.91,
        "refine_temperature": 0.85,
        "max_tokens": 2048,
        "analysis_temperature": 0.91,
        "analysis_max_tokens": 1000,
    },
    "reviewer": {
        "temperature": 0.2,
        "max_tokens": 2048,
        "analysis_temperature": 0.3,
        "analysis_max_tokens": 1000,
        "include_security": True,
        "include_performance": True,
        "include_style": True,
    },
    "ai": {
        "provider": "anthropic",
        "timeout_seconds": 120,
        "retry_attempts": 3,
        "retry_delay_seconds": 5,
        "anthropic": {
            "model": "claude-sonnet-4-5-20250929",
            "api_key_env": "ANTHROPIC_API_KEY",
        },
        "openai": {
            "model": "gpt-4o",
            "api_key_env": "OPENAI_API_KEY",
        },
        "ollama": {
            "endpoint": "http://localhost:11434",
            "model": "qwen2.5-coder:14b",
        },
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts. Lists are replaced, not merged."""
    result = dict(base)
    for key, value in override.items():
        base_value = result.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            result[key] = deep_merge(base_value, value)
        else:
            result[key] = value
    return result


def load_project_config(project_path: Path) -> dict:
    """Load project configuration from .vibepair/config.yaml."""
    config_path = project_path / CONFIG_DIR / "config.yaml"
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_config(
    project_path: Optional[Path] = None,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for a run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    if project_path is not None:
        project_config = load_project_config(project_path)
        if project_config:
            config = deep_merge(config, project_config)
        config["_project_path"] = str(project_path)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config


def initialize_project(project_path: Path) -> Path:
    """Create .vibepair/config.yaml with the workflow defaults spelled out."""
    config_dir = project_path / CONFIG_DIR
    config_dir.mkdir(parents=True, exist_ok=True)

    config_path = config_dir / "config.yaml"
    if not config_path.exists():
        config_path.write_text(
            "# vibepair project configuration\n"
            "\n"
            "project:\n"
            f'  name: "{project_path.name}"\n'
            "\n"
            "workflow:\n"
            "  max_iterations: 3\n"
            "  min_score: 80\n"
            "\n"
            "ai:\n"
            "  provider: anthropic\n",
            encoding="utf-8",
        )
    return config_path
