"""
Thin file helpers built on the bounded reader.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from fsguard.filesystem.config import FileSystemSettings
from fsguard.filesystem.exceptions import FileAccessDeniedError, FileIOError
from fsguard.filesystem.platform import check_path, error_from_os_error
from fsguard.filesystem.reader import BoundedFileReader

logger = logging.getLogger(__name__)


def write_text_file(
    path: Union[str, Path],
    content: str,
    permissions: int = 0o600,
    force_permissions: bool = True,
    encoding: str = "utf-8",
) -> None:
    """
    Append ``content`` to a file, creating it with ``permissions``.

    An existing file has its mode bits restricted to ``permissions`` unless
    ``force_permissions`` is False.

    Raises:
        FileAccessDeniedError: If the file can't be created or restricted
        FileIOError: If not all content was written
    """
    path = check_path(path)
    flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND | getattr(os, "O_CLOEXEC", 0)
    try:
        fd = os.open(path, flags, permissions)
    except OSError as e:
        raise error_from_os_error(path, e) from e

    try:
        if force_permissions:
            try:
                os.fchmod(fd, permissions)
            except OSError as e:
                raise FileAccessDeniedError(
                    path, f"Failed to change permissions: {e.strerror}"
                ) from e

        data = content.encode(encoding)
        try:
            written = os.write(fd, data)
        except OSError as e:
            raise FileIOError(path, f"Failed to write contents: {e.strerror}") from e
        if written != len(data):
            raise FileIOError(
                path, f"Short write ({written} of {len(data)} bytes)"
            )
    finally:
        os.close(fd)

    logger.debug(f"Wrote {len(data)} bytes to {path}")


def remove_file(path: Union[str, Path]) -> None:
    """
    Remove a file or an empty directory.

    Raises:
        PathNotFoundError: If the path does not exist
        FileAccessDeniedError: If removal is not permitted
        FileIOError: If the directory is not empty or removal fails otherwise
    """
    path = check_path(path)
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            os.rmdir(path)
        else:
            os.unlink(path)
    except OSError as e:
        raise error_from_os_error(path, e) from e

    logger.debug(f"Removed {path}")


def read_json(
    path: Union[str, Path], settings: Optional[FileSystemSettings] = None
) -> Any:
    """
    Read and parse a JSON file within the read ceiling.

    Raises:
        FileIOError: If the content is not valid JSON
    """
    content = BoundedFileReader(settings).read_bytes(path)
    try:
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FileIOError(os.fspath(path), f"Could not parse JSON: {e}") from e


def format_permissions(mode: int) -> str:
    """Four-digit octal permission string, e.g. ``0o100755`` -> ``"0755"``."""
    return "".join(str((mode >> shift) & 7) for shift in (9, 6, 3, 0))
