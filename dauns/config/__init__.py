"""Configuration package: pydantic models and the layered loader."""

from .config_loader import ConfigLoader, deep_merge, env_overrides, load_config
from .models import (
    AnalysisSettings,
    CacheSettings,
    DaunsConfig,
    DebounceSettings,
    MemorySettings,
    MonitorSettings,
    ScanSettings,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "deep_merge",
    "env_overrides",
    "DaunsConfig",
    "CacheSettings",
    "DebounceSettings",
    "ScanSettings",
    "MemorySettings",
    "MonitorSettings",
    "AnalysisSettings",
]
