"""
Configuration Schema and Models

Pydantic models for mirror options and the application configuration,
providing validation, default values, and type checking.

Author: dirmirror Project
License: MIT
"""

import os
from enum import Enum
from fnmatch import fnmatch
from typing import Callable, List
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def accept_all(path: str) -> bool:
    """Default copy filter: every entry participates."""
    return True


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MirrorOptions(BaseModel):
    """
    Copy options for one mapping.

    ``errorOnExist`` is accepted as an alias of ``error_on_exist``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True
    )

    overwrite: bool = Field(
        default=True,
        description="Overwrite existing destination entries"
    )
    error_on_exist: bool = Field(
        default=False,
        alias="errorOnExist",
        description="Treat existing destination entries as errors when overwrite is off"
    )
    filter: Callable[[str], bool] = Field(
        default=accept_all,
        description="Predicate over source paths selecting entries to copy"
    )

    @field_validator("filter", mode="before")
    @classmethod
    def default_filter(cls, v):
        """Treat an explicit None as accept-all."""
        return accept_all if v is None else v


class MappingConfig(BaseModel):
    """A source/destination pair declared in the configuration file."""

    source: str = Field(description="Source directory, relative to the working directory or absolute")
    destination: str = Field(description="Destination directory")
    overwrite: bool = Field(default=True)
    error_on_exist: bool = Field(default=False)
    include: List[str] = Field(
        default=[],
        description="Glob patterns for files to copy (empty means all)"
    )
    exclude: List[str] = Field(
        default=[],
        description="Glob patterns for files and directories to skip"
    )

    @field_validator("source", "destination")
    @classmethod
    def validate_path(cls, v):
        """Ensure paths are non-empty."""
        if not v or not v.strip():
            raise ValueError("Directory paths must be non-empty strings")
        return v

    def build_filter(self) -> Callable[[str], bool]:
        """
        Build a path predicate from the include/exclude patterns.

        Patterns are matched against both the entry name and its path
        relative to the source directory. Include patterns only apply to
        files so that directories are still descended into.
        """
        if not self.include and not self.exclude:
            return accept_all

        root = os.path.abspath(self.source)
        include = list(self.include)
        exclude = list(self.exclude)

        def _filter(path: str) -> bool:
            relative = os.path.relpath(path, root)
            if relative == os.curdir:
                return True
            relative = relative.replace(os.sep, "/")
            name = os.path.basename(path)

            if any(fnmatch(name, p) or fnmatch(relative, p) for p in exclude):
                return False
            if include and not os.path.isdir(path):
                return any(fnmatch(name, p) or fnmatch(relative, p) for p in include)
            return True

        return _filter

    def to_options(self) -> MirrorOptions:
        """Convert to the options passed to the registry."""
        return MirrorOptions(
            overwrite=self.overwrite,
            error_on_exist=self.error_on_exist,
            filter=self.build_filter()
        )


class AppConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(use_enum_values=True)

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        validate_default=True,
        description="Application logging level"
    )
    log_to_file: bool = Field(
        default=False,
        description="Enable logging to file"
    )
    log_file_path: str = Field(
        default="logs/dirmirror.log",
        description="Log file location"
    )
    log_rotation_size: int = Field(
        default=10485760,  # 10MB
        description="Log file size before rotation (bytes)"
    )
    log_retention_count: int = Field(
        default=5,
        description="Number of rotated log files to keep"
    )
    json_format: bool = Field(
        default=False,
        description="Emit logs as JSON"
    )


class WatchConfig(BaseModel):
    """Watch mode configuration."""

    initial_scan: bool = Field(
        default=True,
        description="Mirror entries already present when watching starts"
    )
    use_polling: bool = Field(
        default=False,
        description="Use the polling observer instead of native OS events"
    )
    polling_interval: float = Field(
        default=1.0,
        gt=0,
        description="Polling interval in seconds (polling observer only)"
    )
    stop_timeout: float = Field(
        default=5.0,
        ge=0,
        description="Seconds to wait for each observer thread on stop"
    )
    history_size: int = Field(
        default=1000,
        gt=0,
        description="Number of event results kept per watched mapping"
    )


class MirrorConfig(BaseModel):
    """Bulk operation configuration."""

    max_workers: int = Field(
        default=4,
        gt=0,
        description="Maximum number of mappings processed concurrently"
    )


class Config(BaseModel):
    """
    Root configuration model for dirmirror.

    Loaded from a YAML file and overridable by environment variables.
    """

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    app: AppConfig = Field(default_factory=AppConfig)
    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    mappings: List[MappingConfig] = Field(
        default=[],
        description="Source/destination pairs to mirror"
    )

    @model_validator(mode="after")
    def validate_unique_sources(self):
        """Ensure no two mappings share a source directory."""
        sources = [os.path.abspath(m.source) for m in self.mappings]
        if len(sources) != len(set(sources)):
            raise ValueError("Duplicate mapping sources detected in configuration")
        return self
