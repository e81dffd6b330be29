# gitbulk Configuration Schema
# Pydantic models for YAML configuration validation

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from gitbulk.sync.actions import RESET_TOKENS, SYNC_TOKENS


class CloneMethod(str, Enum):
    """Transport used for cloning."""

    HTTPS = "https"
    SSH = "ssh"


class SyncSettings(BaseModel):
    """Settings for the sync and reset commands."""

    max_depth: int = Field(default=20, ge=0, description="Maximum walk depth for sync operations")
    reset_max_depth: int = Field(default=10, ge=0, description="Maximum walk depth for reset operations")
    default_operation: str = Field(default="rebase", description="Operation used when none is given")
    default_reset_mode: str = Field(default="hard", description="Reset mode used when none is given")
    auto_stash: bool = Field(default=True, description="Stash uncommitted changes before mutating operations")
    force: bool = Field(default=False, description="Pull even when no upstream is configured")
    follow_symlinks: bool = Field(default=False, description="Descend into symlinked directories")
    exclude: list[str] = Field(
        default_factory=lambda: ["node_modules"],
        description="Directory names that are never searched",
    )

    @field_validator("default_operation")
    @classmethod
    def check_operation(cls, v: str) -> str:
        """Only accept known sync operations."""
        if v not in SYNC_TOKENS:
            raise ValueError(f"unknown operation '{v}', expected one of: {', '.join(SYNC_TOKENS)}")
        return v

    @field_validator("default_reset_mode")
    @classmethod
    def check_reset_mode(cls, v: str) -> str:
        """Only accept known reset modes."""
        if v not in RESET_TOKENS:
            raise ValueError(f"unknown reset mode '{v}', expected one of: {', '.join(RESET_TOKENS)}")
        return v


class CloneSettings(BaseModel):
    """Settings for the GitHub mass cloner."""

    method: CloneMethod = Field(default=CloneMethod.HTTPS, description="Clone over https or ssh")
    target_dir: str = Field(default=".", description="Directory to clone into")
    include_forks: bool = Field(default=False, description="Include forked repositories")
    include_private: bool = Field(default=False, description="Include private repositories (requires token)")
    jobs: int = Field(default=5, ge=1, description="Number of parallel clone workers")
    update_existing: bool = Field(default=False, description="Pull existing clones instead of skipping them")

    @field_validator("target_dir")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class OutputConfig(BaseModel):
    """Output configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")


class GitBulkConfig(BaseModel):
    """Root configuration model for gitbulk."""

    sync: SyncSettings = Field(default_factory=SyncSettings, description="Sync settings")
    clone: CloneSettings = Field(default_factory=CloneSettings, description="Clone settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
