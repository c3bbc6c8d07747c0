"""
Exceptions for filesystem operations.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a filesystem failure."""

    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_LIMIT_EXCEEDED = "resource_limit_exceeded"
    MALFORMED_PATTERN = "malformed_pattern"
    IO_FAILURE = "io_failure"


class FileSystemError(Exception):
    """Base exception for filesystem operations."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, path: str, reason: str = "Filesystem error"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class PathNotFoundError(FileSystemError):
    """Raised when a path does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, path: str, reason: str = "Path not found"):
        super().__init__(path, reason)


class NotADirectoryPathError(FileSystemError):
    """Raised when a directory was expected."""

    kind = ErrorKind.NOT_A_DIRECTORY

    def __init__(self, path: str, reason: str = "Path is not a directory"):
        super().__init__(path, reason)


class IsADirectoryPathError(FileSystemError):
    """Raised when a file was expected but a directory was found."""

    kind = ErrorKind.IS_A_DIRECTORY

    def __init__(self, path: str, reason: str = "Path is a directory"):
        super().__init__(path, reason)


class FileAccessDeniedError(FileSystemError):
    """Raised when access to a file or directory is denied."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, path: str, reason: str = "Access denied"):
        super().__init__(path, reason)


class FileSizeLimitExceededError(FileSystemError):
    """Raised when a file exceeds the read ceiling."""

    kind = ErrorKind.RESOURCE_LIMIT_EXCEEDED

    def __init__(self, path: str, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(path, f"File exceeds read limits ({size} bytes >= {limit} bytes)")


class InvalidPathError(FileSystemError):
    """Raised when a path or pattern is invalid or malformed."""

    kind = ErrorKind.MALFORMED_PATTERN

    def __init__(self, path: str, reason: str = "Invalid path"):
        super().__init__(path, reason)


class FileIOError(FileSystemError):
    """Raised when the underlying filesystem fails a read or write."""

    kind = ErrorKind.IO_FAILURE

    def __init__(self, path: str, reason: str = "I/O failure"):
        super().__init__(path, reason)
