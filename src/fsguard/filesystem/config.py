"""
Configuration for bounded filesystem access.

Process-wide settings are read once at startup (environment, ``.env`` or a
YAML/JSON file) and are immutable afterwards. Every core call receives them
explicitly or falls back to :func:`get_settings`.
"""

import json
from enum import IntFlag
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class GlobLimits(IntFlag):
    """Result kinds and behaviour flags for pattern resolution."""

    FILES = 1
    FOLDERS = 2
    NO_CANON = 4
    ALL = FILES | FOLDERS


class ReadPolicy(BaseModel):
    """
    Owner-dependent read ceiling.

    Root-owned files may be read up to ``max_bytes_root_owned``; anything
    else is held to ``max_bytes_other_owned``.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    max_bytes_root_owned: int = Field(
        default=50 * MIB,
        ge=0,
        description="Maximum read size for files owned by root (bytes)",
    )
    max_bytes_other_owned: int = Field(
        default=10 * MIB,
        ge=0,
        description="Maximum read size for files owned by anyone else (bytes)",
    )

    @model_validator(mode="after")
    def check_ordering(self) -> "ReadPolicy":
        if self.max_bytes_other_owned > self.max_bytes_root_owned:
            raise ValueError(
                "max_bytes_other_owned must not exceed max_bytes_root_owned"
            )
        return self

    def ceiling_for(self, owner_is_root: bool) -> int:
        """Return the effective ceiling for a file with the given owner."""
        if owner_is_root:
            return self.max_bytes_root_owned
        return min(self.max_bytes_root_owned, self.max_bytes_other_owned)


class FileSystemSettings(BaseSettings):
    """
    Process-wide filesystem safety settings.

    Environment variables (prefix ``FSGUARD_``):
        FSGUARD_READ_MAX - Maximum read size for root-owned files
        FSGUARD_READ_USER_MAX - Maximum read size for other files
        FSGUARD_ALLOW_UNSAFE - Trust files regardless of permissions
        FSGUARD_DISABLE_FORENSIC - Skip atime/mtime restoration
        FSGUARD_BLOCK_SIZE - Chunk size for streamed reads

    Example:
        ```python
        settings = FileSystemSettings.from_file("/etc/fsguard.yaml")
        configure(settings)
        ```
    """

    model_config = SettingsConfigDict(
        env_prefix="FSGUARD_",
        frozen=True,
        extra="ignore",
    )

    read_max: int = Field(
        default=50 * MIB,
        ge=0,
        description="Maximum file read size",
    )
    read_user_max: int = Field(
        default=10 * MIB,
        ge=0,
        description="Maximum non-su read size",
    )
    allow_unsafe: bool = Field(
        default=False,
        description="Allow unsafe executable permissions",
    )
    disable_forensic: bool = Field(
        default=True,
        description="Disable atime/mtime preservation",
    )
    block_size: int = Field(
        default=4096,
        ge=1,
        description="Chunk size for streamed reads (bytes)",
    )

    @model_validator(mode="after")
    def check_read_limits(self) -> "FileSystemSettings":
        if self.read_user_max > self.read_max:
            raise ValueError("read_user_max must not exceed read_max")
        return self

    @property
    def read_policy(self) -> ReadPolicy:
        """The owner-dependent read ceiling derived from these settings."""
        return ReadPolicy(
            max_bytes_root_owned=self.read_max,
            max_bytes_other_owned=self.read_user_max,
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FileSystemSettings":
        """
        Load settings from a YAML or JSON file.

        File format (YAML):
            ```yaml
            read_max: 52428800
            read_user_max: 10485760
            allow_unsafe: false
            disable_forensic: false
            ```

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text()

        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "FileSystemSettings":
        return cls(**data)

    def __repr__(self) -> str:
        return (
            f"FileSystemSettings("
            f"read_max={self.read_max}, "
            f"read_user_max={self.read_user_max}, "
            f"allow_unsafe={self.allow_unsafe}, "
            f"disable_forensic={self.disable_forensic})"
        )


_settings: Optional[FileSystemSettings] = None


def configure(settings: Optional[FileSystemSettings] = None) -> FileSystemSettings:
    """
    Install the process-wide settings.

    Call once at startup, before any concurrent use. Without an argument the
    settings are (re)read from the environment.
    """
    global _settings
    _settings = settings if settings is not None else FileSystemSettings()
    return _settings


def get_settings() -> FileSystemSettings:
    """Return the process-wide settings, reading the environment on first use."""
    if _settings is None:
        return configure()
    return _settings
