"""
fsguard - filesystem safety layer for host instrumentation agents.

This package provides bounded file reads, SQL-style recursive glob
resolution and safe-permission validation for agents that inspect
untrusted, attacker-influenced filesystem state.
"""

__version__ = "0.1.0"

from fsguard.filesystem import (
    BoundedFileReader,
    ErrorKind,
    FileAccessDeniedError,
    FileIOError,
    FileSizeLimitExceededError,
    FileSystemError,
    FileSystemSettings,
    GlobLimits,
    InvalidPathError,
    IsADirectoryPathError,
    NotADirectoryPathError,
    PathNotFoundError,
    PermissionDecision,
    PermissionRule,
    ReadPolicy,
    ReadResult,
    check_permissions,
    configure,
    get_settings,
    resolve_file_pattern,
    safe_permissions,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "FileSystemSettings",
    "GlobLimits",
    "ReadPolicy",
    "configure",
    "get_settings",
    # Errors
    "ErrorKind",
    "FileAccessDeniedError",
    "FileIOError",
    "FileSizeLimitExceededError",
    "FileSystemError",
    "InvalidPathError",
    "IsADirectoryPathError",
    "NotADirectoryPathError",
    "PathNotFoundError",
    # Core operations
    "BoundedFileReader",
    "ReadResult",
    "resolve_file_pattern",
    "PermissionDecision",
    "PermissionRule",
    "check_permissions",
    "safe_permissions",
]
