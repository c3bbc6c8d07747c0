"""
SQL-style pattern resolution over the real filesystem.

Patterns use ``%`` or ``*`` for a single path segment and ``**`` for a
recursive segment. Matched directories carry a trailing separator.

Example:
    ```python
    resolve_file_pattern("/etc/%.conf", GlobLimits.FILES)
    resolve_file_pattern("/usr/lib/modules/**", GlobLimits.FOLDERS)
    ```
"""

import logging
import os
from pathlib import Path
from typing import Union

from fsguard.filesystem.config import GlobLimits
from fsguard.filesystem.exceptions import (
    InvalidPathError,
    NotADirectoryPathError,
    PathNotFoundError,
)
from fsguard.filesystem.platform import (
    canonicalize,
    check_path,
    is_directory,
    path_exists,
    platform_glob,
)

logger = logging.getLogger(__name__)

# Maximum number of directory levels a trailing "**" descends.
MAX_RECURSIVE_GLOBS = 64

RECURSIVE_MARKER = "**"


def is_folder_match(match: str) -> bool:
    """True if a resolved match names a directory."""
    return match.endswith(os.sep) or (os.altsep is not None and match.endswith(os.altsep))


def translate_pattern(pattern: str, limits: GlobLimits = GlobLimits.ALL) -> str:
    """
    Rewrite a user pattern into an absolute, canonical glob expression.

    ``%`` becomes ``*``, relative patterns are anchored at the current
    working directory, and the literal prefix before the first ``*`` is
    canonicalized unless ``GlobLimits.NO_CANON`` is set. A prefix that does
    not exist is left alone. Patterns starting with ``~`` are not expanded
    here.
    """
    if not pattern:
        return pattern

    pattern = pattern.replace("%", "*")

    if not os.path.isabs(pattern) and not pattern.startswith("~"):
        try:
            pattern = os.path.join(os.getcwd(), pattern)
        except OSError as e:
            logger.debug(f"Cannot anchor relative pattern {pattern!r}: {e}")

    if pattern.startswith("~") or limits & GlobLimits.NO_CANON:
        return pattern

    base = pattern.split("*", 1)[0]
    if not base:
        return pattern

    canonical = canonicalize(base)
    if canonical is None or canonical == base:
        return pattern

    if is_directory(canonical):
        # "dir*" and "dir/*" differ; a canonical directory has no trailing separator.
        canonical += os.sep

    return canonical + pattern[len(base):]


def _is_recursive(pattern: str) -> bool:
    return pattern.endswith(RECURSIVE_MARKER) or pattern.endswith(
        RECURSIVE_MARKER + os.sep
    )


def expand_pattern(pattern: str, limits: GlobLimits = GlobLimits.ALL) -> list[str]:
    """
    Expand a canonical pattern against the filesystem.

    A trailing ``**`` descends one directory level per pass, for at most
    :data:`MAX_RECURSIVE_GLOBS` passes. Results are deduplicated in
    discovery order and filtered by kind once at the end.
    """
    found: list[str] = []

    for _ in range(MAX_RECURSIVE_GLOBS):
        matches = platform_glob(pattern)
        found.extend(matches)

        if not matches or not _is_recursive(pattern):
            break

        if pattern.endswith(os.sep):
            pattern += RECURSIVE_MARKER + os.sep
        else:
            pattern += os.sep + RECURSIVE_MARKER
    else:
        logger.debug(
            f"Recursive glob stopped after {MAX_RECURSIVE_GLOBS} levels: {pattern}"
        )

    want_folders = bool(limits & GlobLimits.FOLDERS)
    want_files = bool(limits & GlobLimits.FILES)
    return [
        match
        for match in dict.fromkeys(found)
        if (want_folders if is_folder_match(match) else want_files)
    ]


def resolve_file_pattern(pattern: str, limits: GlobLimits = GlobLimits.ALL) -> list[str]:
    """
    Resolve a SQL-style pattern to matching paths.

    No matches is a valid, empty result; malformed patterns also resolve to
    nothing rather than failing.
    """
    if not limits & GlobLimits.ALL:
        logger.debug(f"Pattern {pattern!r} resolved with neither files nor folders requested")

    try:
        check_path(pattern)
    except InvalidPathError as e:
        logger.debug(f"Malformed pattern {e.path!r}: {e.reason}")
        return []

    return expand_pattern(translate_pattern(pattern, limits), limits)


def _list_in_directory(
    path: Union[str, Path], recursive: bool, limits: GlobLimits
) -> list[str]:
    directory = check_path(path)
    if not path_exists(directory):
        raise PathNotFoundError(directory, "Directory not found")
    if not is_directory(directory):
        raise NotADirectoryPathError(directory)

    wildcard = RECURSIVE_MARKER if recursive else "*"
    return resolve_file_pattern(os.path.join(directory, wildcard), limits)


def list_files_in_directory(path: Union[str, Path], recursive: bool = False) -> list[str]:
    """
    List the files below a directory.

    Raises:
        PathNotFoundError: If the directory does not exist
        NotADirectoryPathError: If the path is not a directory
        InvalidPathError: If the path contains a NUL byte
    """
    return _list_in_directory(path, recursive, GlobLimits.FILES)


def list_directories_in_directory(
    path: Union[str, Path], recursive: bool = False
) -> list[str]:
    """
    List the directories below a directory, each with a trailing separator.

    Raises:
        PathNotFoundError: If the directory does not exist
        NotADirectoryPathError: If the path is not a directory
        InvalidPathError: If the path contains a NUL byte
    """
    return _list_in_directory(path, recursive, GlobLimits.FOLDERS)
