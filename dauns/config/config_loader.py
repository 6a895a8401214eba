"""Layered configuration loading with project and global files."""

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..cli.errors import ConfigurationError
from ..scan_logging import get_logger
from .models import DaunsConfig

logger = get_logger()

ENV_PREFIX = "DAUNS_"
PROJECT_CONFIG_DIR = ".dauns"
PROJECT_CONFIG_NAMES = ("config.json", "config.yaml", "config.yml")

# Settings read from the environment as comma-separated lists
LIST_FIELDS = {("scan", "skip_dirs"), ("scan", "file_extensions")}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML config file into a dict.

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read configuration: {e}", config_file=str(path)
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration must be a mapping of sections", config_file=str(path)
        )
    return data


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect ``DAUNS_<SECTION>_<FIELD>`` variables into nested overrides."""
    environ = os.environ if environ is None else environ
    sections = DaunsConfig.model_fields
    overrides: dict[str, Any] = {}

    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, field_name = name[len(ENV_PREFIX) :].lower().partition("_")
        if section not in sections or not field_name:
            continue
        if (section, field_name) in LIST_FIELDS:
            parsed: Any = [item.strip() for item in value.split(",") if item.strip()]
        else:
            parsed = value
        overrides.setdefault(section, {})[field_name] = parsed

    return overrides


class ConfigLoader:
    """Loads DaunsConfig from defaults, files, environment and overrides."""

    def __init__(
        self,
        project_path: Path | str | None = None,
        config_file: Path | str | None = None,
        global_config_path: Path | None = None,
    ):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        # Explicit file replaces the project config file lookup
        self.config_file = Path(config_file) if config_file else None
        self.global_config_path = (
            global_config_path or Path.home() / PROJECT_CONFIG_DIR / "config.json"
        )

    def find_project_config(self) -> Path | None:
        if self.config_file is not None:
            return self.config_file
        config_dir = self.project_path / PROJECT_CONFIG_DIR
        for name in PROJECT_CONFIG_NAMES:
            candidate = config_dir / name
            if candidate.is_file():
                return candidate
        return None

    def load(self, **overrides: Any) -> DaunsConfig:
        """Load configuration from all sources.

        Precedence (highest to lowest):
        1. Explicit overrides (nested dicts per section)
        2. Environment variables (DAUNS_SCAN_MAX_WORKERS=8)
        3. Project config (.dauns/config.json, .yaml or .yml)
        4. Global config (~/.dauns/config.json)
        5. Defaults

        Raises:
            ConfigurationError: If a file is unreadable or a value is invalid.
        """
        config_dict: dict[str, Any] = {}
        sources = []

        if self.global_config_path.is_file():
            config_dict = deep_merge(
                config_dict, read_config_file(self.global_config_path)
            )
            sources.append(str(self.global_config_path))

        project_config = self.find_project_config()
        if project_config is not None:
            if not project_config.is_file():
                raise ConfigurationError(
                    f"Configuration file not found: {project_config}",
                    config_file=str(project_config),
                )
            config_dict = deep_merge(config_dict, read_config_file(project_config))
            sources.append(str(project_config))
            logger.debug(f"Loaded project config from {project_config}")

        environment = env_overrides()
        if environment:
            config_dict = deep_merge(config_dict, environment)
            sources.append("environment")
            logger.debug(f"Applied {len(environment)} environment config sections")

        if overrides:
            config_dict = deep_merge(config_dict, overrides)
            sources.append("overrides")

        try:
            return DaunsConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                config_file=", ".join(sources) or None,
            ) from e


def load_config(
    project_path: Path | str | None = None, **overrides: Any
) -> DaunsConfig:
    """Convenience wrapper around ``ConfigLoader(project_path).load()``."""
    return ConfigLoader(project_path).load(**overrides)
