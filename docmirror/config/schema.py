# docmirror Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from docmirror.sync.mirror import DirectoryPolicy


class SourceConfig(BaseModel):
    """Source tree settings."""

    root: str = Field(description="Directory exposed as the source tree")

    @field_validator("root")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class MirrorSettings(BaseModel):
    """Local mirror settings."""

    root: str = Field(description="Local directory kept in sync with the source tree")
    directory_policy: DirectoryPolicy = Field(
        default=DirectoryPolicy.KEEP,
        description="keep: never delete local directories; prune: delete directories missing from the source",
    )
    copy_buffer_size: int = Field(default=64 * 1024, gt=0, description="Chunk size in bytes for streamed copies")
    mtime_tolerance_ms: int = Field(
        default=0,
        ge=0,
        description="Timestamp slack in millis for filesystems with coarse mtimes (FAT: 2000)",
    )

    @field_validator("root")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class SchedulerConfig(BaseModel):
    """Worker pool settings."""

    max_workers: int | None = Field(default=None, ge=1, description="Pool size, None = CPU count")


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: str | None = Field(default=None, description="Path to log file")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: str | None) -> str | None:
        """Expand ~ in optional path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    @field_validator("log_level")
    @classmethod
    def check_level(cls, v: str) -> str:
        """Normalize and validate the level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class MirrorConfig(BaseModel):
    """Root configuration model for docmirror."""

    source: SourceConfig = Field(description="Source tree settings")
    mirror: MirrorSettings = Field(description="Local mirror settings")
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig, description="Worker pool settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
