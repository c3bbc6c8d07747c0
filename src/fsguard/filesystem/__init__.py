"""
Filesystem safety layer for host instrumentation.

This module reads untrusted filesystem state without becoming an attack
vector: bounded, privilege-aware file reads, SQL-style recursive pattern
resolution, and safe-permission checks for files the agent may trust.
"""

from fsguard.filesystem.config import (
    FileSystemSettings,
    GlobLimits,
    ReadPolicy,
    configure,
    get_settings,
)
from fsguard.filesystem.exceptions import (
    ErrorKind,
    FileAccessDeniedError,
    FileIOError,
    FileSizeLimitExceededError,
    FileSystemError,
    InvalidPathError,
    IsADirectoryPathError,
    NotADirectoryPathError,
    PathNotFoundError,
)
from fsguard.filesystem.fileops import (
    format_permissions,
    read_json,
    remove_file,
    write_text_file,
)
from fsguard.filesystem.globbing import (
    list_directories_in_directory,
    list_files_in_directory,
    resolve_file_pattern,
)
from fsguard.filesystem.permissions import (
    PermissionDecision,
    PermissionRule,
    check_permissions,
    safe_permissions,
)
from fsguard.filesystem.platform import (
    check_path,
    is_directory,
    is_readable,
    is_writable,
    path_exists,
    system_root,
)
from fsguard.filesystem.reader import BoundedFileReader, ChunkSink, ReadResult

__all__ = [
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
    # Patterns
    "resolve_file_pattern",
    "list_files_in_directory",
    "list_directories_in_directory",
    # Reading
    "BoundedFileReader",
    "ChunkSink",
    "ReadResult",
    # Permissions
    "PermissionDecision",
    "PermissionRule",
    "check_permissions",
    "safe_permissions",
    # Helpers
    "format_permissions",
    "read_json",
    "remove_file",
    "write_text_file",
    "check_path",
    "is_directory",
    "is_readable",
    "is_writable",
    "path_exists",
    "system_root",
]
