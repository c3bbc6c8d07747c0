"""
Low-level platform file access and simple I/O wrappers.

Everything here is a thin layer over ``os``/``stat``/``glob``. The safety
decisions live in the reader, glob and permissions modules.
"""

import errno
import glob as _glob
import logging
import os
import re
import stat
from pathlib import Path
from typing import NamedTuple, Optional, Union

from fsguard.filesystem.exceptions import (
    FileAccessDeniedError,
    FileIOError,
    FileSystemError,
    InvalidPathError,
    IsADirectoryPathError,
    NotADirectoryPathError,
    PathNotFoundError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Innermost brace group containing at least one alternative separator.
_BRACE_RE = re.compile(r"\{([^{}]*,[^{}]*)\}")


class FileTimes(NamedTuple):
    """Access and modification timestamps in nanoseconds."""

    atime_ns: int
    mtime_ns: int


def error_from_os_error(path: str, exc: OSError) -> FileSystemError:
    """Map an ``OSError`` onto the matching :class:`FileSystemError`."""
    reason = exc.strerror or str(exc)
    if exc.errno == errno.ENOENT:
        return PathNotFoundError(path, reason)
    if exc.errno == errno.ENOTDIR:
        return NotADirectoryPathError(path, reason)
    if exc.errno == errno.EISDIR:
        return IsADirectoryPathError(path, reason)
    if exc.errno in (errno.EACCES, errno.EPERM, errno.ELOOP):
        return FileAccessDeniedError(path, reason)
    return FileIOError(path, reason)


class PlatformFile:
    """
    An open, read-only file descriptor with metadata queries.

    The descriptor is owned by this object and closed by :meth:`close` or
    on leaving a ``with`` block.

    Usage:
        with PlatformFile("/etc/hosts") as handle:
            if handle.is_owner_root():
                data = handle.read(handle.size())

    Raises:
        OSError: If the path cannot be opened
    """

    def __init__(self, path: PathLike, blocking: bool = False):
        self.path = os.fspath(path)
        flags = os.O_RDONLY | getattr(os, "O_CLOEXEC", 0)
        if not blocking:
            flags |= getattr(os, "O_NONBLOCK", 0)
        self._fd: Optional[int] = os.open(self.path, flags)

    def __enter__(self) -> "PlatformFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"PlatformFile({self.path!r}, {state})"

    @property
    def is_open(self) -> bool:
        return self._fd is not None

    def fileno(self) -> int:
        if self._fd is None:
            raise ValueError(f"I/O operation on closed file: {self.path}")
        return self._fd

    def close(self) -> None:
        if self._fd is not None:
            fd, self._fd = self._fd, None
            os.close(fd)

    def stat(self) -> os.stat_result:
        return os.fstat(self.fileno())

    def size(self) -> int:
        return self.stat().st_size

    def is_special_file(self) -> bool:
        """True for pipes, sockets and devices, which have no reliable size."""
        mode = self.stat().st_mode
        return not stat.S_ISREG(mode) and not stat.S_ISDIR(mode)

    def is_directory(self) -> bool:
        return stat.S_ISDIR(self.stat().st_mode)

    def owner_uid(self) -> int:
        return self.stat().st_uid

    def is_owner_root(self) -> bool:
        return self.owner_uid() == 0

    def is_owner_current_user(self) -> bool:
        return self.owner_uid() == os.geteuid()

    def is_executable(self) -> bool:
        return bool(self.stat().st_mode & stat.S_IXUSR)

    def is_non_writable(self) -> bool:
        """True when neither group nor others may write the file."""
        return not self.stat().st_mode & (stat.S_IWGRP | stat.S_IWOTH)

    def get_file_times(self) -> FileTimes:
        st = self.stat()
        return FileTimes(st.st_atime_ns, st.st_mtime_ns)

    def set_file_times(self, times: FileTimes) -> None:
        ns = (times.atime_ns, times.mtime_ns)
        if os.utime in os.supports_fd:
            os.utime(self.fileno(), ns=ns)
        else:
            os.utime(self.path, ns=ns)

    def read(self, size: int) -> bytes:
        """
        Read up to ``size`` bytes.

        A non-blocking source with no data ready reads as end of stream.
        """
        try:
            return os.read(self.fileno(), size)
        except BlockingIOError:
            return b""


def check_path(path: PathLike) -> str:
    """
    Return ``path`` as a string, rejecting paths no system call can take.

    Raises:
        InvalidPathError: If the path contains a NUL byte
    """
    path = os.fspath(path)
    if "\x00" in path:
        raise InvalidPathError(path.replace("\x00", "\\x00"), "Path contains a NUL byte")
    return path


def system_root() -> str:
    """The filesystem root: ``/``, or the Windows directory on Windows."""
    if os.name == "nt":
        return os.environ.get("SystemRoot", "C:\\Windows")
    return os.sep


def path_exists(path: PathLike) -> bool:
    path = os.fspath(path)
    if not path:
        return False
    return os.path.exists(path)


def is_directory(path: PathLike) -> bool:
    return os.path.isdir(os.fspath(path))


def is_readable(path: PathLike) -> bool:
    return path_exists(path) and os.access(os.fspath(path), os.R_OK)


def is_writable(path: PathLike) -> bool:
    return path_exists(path) and os.access(os.fspath(path), os.W_OK)


def canonicalize(path: PathLike) -> Optional[str]:
    """Resolve symlinks, ``.`` and ``..``; ``None`` if the path does not exist."""
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError, ValueError):
        return None


def is_file_accessible(path: PathLike) -> bool:
    """True if the path can be stat'ed (exists, not a symlink loop)."""
    try:
        os.stat(os.fspath(path))
    except (OSError, ValueError):
        return False
    return True


def is_tmp_dir(path: PathLike) -> bool:
    """
    True for shared scratch directories (sticky or world-writable).

    Raises:
        OSError: If the directory cannot be stat'ed
    """
    mode = os.stat(os.fspath(path)).st_mode
    return bool(mode & (stat.S_ISVTX | stat.S_IWOTH))


def expand_braces(pattern: str) -> list[str]:
    """
    Expand csh-style alternation, ``a{b,c}d`` -> ``['abd', 'acd']``.

    Unbalanced braces are left as literals.
    """
    match = _BRACE_RE.search(pattern)
    if match is None:
        return [pattern]

    prefix = pattern[: match.start()]
    suffix = pattern[match.end():]
    expanded: list[str] = []
    for alternative in match.group(1).split(","):
        for candidate in expand_braces(prefix + alternative + suffix):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def platform_glob(pattern: str) -> list[str]:
    """
    Single-level glob for one pattern.

    ``*`` (and ``**``) never cross a directory boundary. Directories are
    marked with a trailing separator, ``~`` and ``{a,b}`` are expanded.
    """
    if pattern.startswith("~"):
        pattern = os.path.expanduser(pattern)

    results: list[str] = []
    seen: set[str] = set()
    for candidate in expand_braces(pattern):
        for found in sorted(_glob.glob(candidate)):
            if os.path.isdir(found) and not found.endswith(os.sep):
                found += os.sep
            if found not in seen:
                seen.add(found)
                results.append(found)
    return results
