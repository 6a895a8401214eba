"""Configuration models for the variable scanner."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class CacheSettings(BaseModel):
    max_cache_size_bytes: int = Field(default=50 * 1024 * 1024, ge=0)
    max_entries: int = Field(default=1000, ge=1)


class DebounceSettings(BaseModel):
    delay_ms: int = Field(default=300, ge=0)


class ScanSettings(BaseModel):
    """Workspace scan settings."""

    skip_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", ".git", "dist", "build"]
    )
    # Empty means every extension a registered parser supports
    file_extensions: list[str] = Field(default_factory=list)
    include_node_modules: bool = Field(default=False)
    max_file_size_kb: int = Field(default=1024, ge=1)
    max_workers: int = Field(default=4, ge=1, le=64)
    executor: Literal["inline", "thread", "process"] = Field(default="inline")

    @field_validator("file_extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        normalized = []
        for extension in v:
            extension = extension.strip().lower()
            if not extension:
                raise ValueError("File extensions cannot be empty")
            normalized.append(extension if extension.startswith(".") else f".{extension}")
        return normalized

    @property
    def effective_skip_dirs(self) -> list[str]:
        if self.include_node_modules:
            return [name for name in self.skip_dirs if name != "node_modules"]
        return list(self.skip_dirs)


class MemorySettings(BaseModel):
    warning_mb: float = Field(default=100, gt=0)
    critical_mb: float = Field(default=200, gt=0)
    check_interval_seconds: float = Field(default=30.0, gt=0)
    history_limit: int = Field(default=100, ge=1)

    @model_validator(mode="after")
    def check_threshold_order(self) -> "MemorySettings":
        if self.critical_mb < self.warning_mb:
            raise ValueError("critical_mb must be greater than or equal to warning_mb")
        return self


class MonitorSettings(BaseModel):
    window_size: int = Field(default=100, ge=1)
    sample_interval_seconds: float = Field(default=5.0, gt=0)


class AnalysisSettings(BaseModel):
    hotspot_threshold: int = Field(default=10, ge=1)
    show_function_variables: bool = Field(default=True)


class DaunsConfig(BaseModel):
    """Complete scanner configuration, one nested model per component."""

    cache: CacheSettings = Field(default_factory=CacheSettings)
    debounce: DebounceSettings = Field(default_factory=DebounceSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    memory: MemorySettings = Field(default_factory=MemorySettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
