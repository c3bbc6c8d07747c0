"""
Safe-permission checks for files the agent may trust (e.g. load as modules).
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from fsguard.filesystem.config import FileSystemSettings, get_settings
from fsguard.filesystem.platform import PlatformFile, is_file_accessible, is_tmp_dir

logger = logging.getLogger(__name__)


class PermissionRule(str, Enum):
    """The check that produced a permission decision."""

    INACCESSIBLE = "inaccessible"
    UNSAFE_ALLOWED = "unsafe_allowed"
    DIRECTORY_UNREADABLE = "directory_unreadable"
    TEMPORARY_DIRECTORY = "temporary_directory"
    UNREADABLE = "unreadable"
    IS_DIRECTORY = "is_directory"
    UNTRUSTED_OWNER = "untrusted_owner"
    NOT_EXECUTABLE = "not_executable"
    WRITABLE_BY_OTHERS = "writable_by_others"
    METADATA_ERROR = "metadata_error"
    SAFE = "safe"


class PermissionDecision(BaseModel):
    """Verdict of a permission check."""

    model_config = {"frozen": True}

    path: str = Field(description="Path that was checked")
    safe: bool = Field(description="Whether the path may be trusted")
    rule: PermissionRule = Field(description="Check that decided the verdict")

    def __bool__(self) -> bool:
        return self.safe

    def __str__(self) -> str:
        verdict = "safe" if self.safe else "unsafe"
        return f"{self.path}: {verdict} ({self.rule.value})"


def _unsafe(path: str, rule: PermissionRule) -> PermissionDecision:
    logger.debug(f"Unsafe permissions for {path}: {rule.value}")
    return PermissionDecision(path=path, safe=False, rule=rule)


def check_permissions(
    directory: Union[str, Path],
    path: Union[str, Path],
    executable: bool = False,
    settings: Optional[FileSystemSettings] = None,
) -> PermissionDecision:
    """
    Decide whether ``path`` inside ``directory`` may be trusted.

    Checks run in order and stop at the first failure. Anything that cannot
    be determined is unsafe. Never raises.

    Args:
        directory: Directory the path was discovered in
        path: Path to check
        executable: Also require an owner-executable, non-group/other-writable file
        settings: Filesystem settings (default: process-wide settings)

    Returns:
        PermissionDecision naming the deciding rule
    """
    settings = settings if settings is not None else get_settings()
    directory = os.fspath(directory)
    path = os.fspath(path)

    if not is_file_accessible(path):
        # Not real, too many links, or could not be accessed.
        return _unsafe(path, PermissionRule.INACCESSIBLE)

    if settings.allow_unsafe:
        return PermissionDecision(path=path, safe=True, rule=PermissionRule.UNSAFE_ALLOWED)

    try:
        in_tmp_dir = is_tmp_dir(directory)
    except (OSError, ValueError):
        return _unsafe(path, PermissionRule.DIRECTORY_UNREADABLE)
    if in_tmp_dir:
        return _unsafe(path, PermissionRule.TEMPORARY_DIRECTORY)

    try:
        handle = PlatformFile(path)
    except (OSError, ValueError):
        return _unsafe(path, PermissionRule.UNREADABLE)

    with handle:
        try:
            if handle.is_directory():
                return _unsafe(path, PermissionRule.IS_DIRECTORY)

            if not (handle.is_owner_current_user() or handle.is_owner_root()):
                return _unsafe(path, PermissionRule.UNTRUSTED_OWNER)

            if executable:
                if not handle.is_executable():
                    return _unsafe(path, PermissionRule.NOT_EXECUTABLE)
                if not handle.is_non_writable():
                    return _unsafe(path, PermissionRule.WRITABLE_BY_OTHERS)
        except OSError:
            return _unsafe(path, PermissionRule.METADATA_ERROR)

    return PermissionDecision(path=path, safe=True, rule=PermissionRule.SAFE)


def safe_permissions(
    directory: Union[str, Path],
    path: Union[str, Path],
    executable: bool = False,
    settings: Optional[FileSystemSettings] = None,
) -> bool:
    """Boolean form of :func:`check_permissions`."""
    return check_permissions(directory, path, executable, settings).safe
