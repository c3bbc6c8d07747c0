"""
Bounded, privilege-aware file reader.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from pydantic import BaseModel, Field

from fsguard.filesystem.config import FileSystemSettings, ReadPolicy, get_settings
from fsguard.filesystem.exceptions import (
    FileAccessDeniedError,
    FileIOError,
    FileSizeLimitExceededError,
    FileSystemError,
    IsADirectoryPathError,
)
from fsguard.filesystem.platform import (
    FileTimes,
    PlatformFile,
    check_path,
    error_from_os_error,
)
from fsguard.filesystem.privileges import DropPrivileges

logger = logging.getLogger(__name__)

# Receives each block of file content as it is read.
ChunkSink = Callable[[bytes], None]


class ReadResult(BaseModel):
    """Outcome of a successful read."""

    model_config = {"frozen": True}

    path: str = Field(description="Path as given, or canonical path for a dry run")
    bytes_read: int = Field(default=0, description="Bytes delivered to the sink")
    dry_run: bool = Field(default=False, description="Whether content was skipped")


class BoundedFileReader:
    """
    File reader with owner-dependent size ceilings.

    Root-owned files may be read up to ``read_max`` bytes, other files up
    to ``read_user_max``. When running as root, the effective identity is
    dropped to the owner of the file's parent directory for the duration of
    the read.

    Usage:
        reader = BoundedFileReader(FileSystemSettings(read_user_max=1_000_000))

        try:
            content = reader.read_bytes("/home/alice/.bashrc")
        except FileSizeLimitExceededError as e:
            print(f"Too large: {e}")

        # Stream into a sink
        reader.read_file("/dev/stdin", sink=out.write, blocking=True)
    """

    def __init__(
        self,
        settings: Optional[FileSystemSettings] = None,
        policy: Optional[ReadPolicy] = None,
    ):
        """
        Initialize the reader.

        Args:
            settings: Filesystem settings (default: process-wide settings)
            policy: Read ceiling (default: derived from settings)
        """
        self.settings = settings if settings is not None else get_settings()
        self.policy = policy if policy is not None else self.settings.read_policy

    @contextmanager
    def _open(
        self, path: str, blocking: bool
    ) -> Iterator[tuple[DropPrivileges, PlatformFile]]:
        with DropPrivileges() as dropper:
            if not dropper.drop_to_parent(path):
                raise FileAccessDeniedError(path, "Cannot drop privileges for read")

            try:
                handle = PlatformFile(path, blocking=blocking)
            except OSError as e:
                raise error_from_os_error(path, e) from e

            with handle:
                yield dropper, handle

    def read_file(
        self,
        path: Union[str, Path],
        sink: ChunkSink,
        size: int = 0,
        block_size: Optional[int] = None,
        dry_run: bool = False,
        preserve_time: bool = False,
        blocking: bool = False,
    ) -> ReadResult:
        """
        Read a file into ``sink`` subject to the read policy.

        Files with a known size are delivered in one block. Empty and special
        files are streamed in ``block_size`` chunks, checking the running
        total against the ceiling after every chunk.

        Args:
            path: File to read
            sink: Callable receiving content blocks
            size: Expected length for special files (0 = stream)
            block_size: Chunk size for streamed reads (default: settings)
            dry_run: Only open and check limits; return the canonical path
            preserve_time: Restore atime/mtime after the read
            blocking: Open in blocking mode (pipes, ttys)

        Returns:
            ReadResult describing the read

        Raises:
            PathNotFoundError: If the file doesn't exist
            FileAccessDeniedError: If the open or privilege drop is refused
            IsADirectoryPathError: If the path is a directory
            InvalidPathError: If the path contains a NUL byte
            FileSizeLimitExceededError: If the file exceeds the ceiling
            FileIOError: If the underlying read fails
        """
        path = check_path(path)
        block_size = block_size or self.settings.block_size

        with self._open(path, blocking) as (dropper, handle):
            try:
                if handle.is_directory():
                    raise IsADirectoryPathError(path)

                file_size = handle.size()
                if handle.is_special_file():
                    file_size = size if size > 0 else 0

                read_max = self.policy.ceiling_for(handle.is_owner_root())
            except OSError as e:
                raise error_from_os_error(path, e) from e

            if file_size > 0 and file_size >= read_max:
                logger.warning(
                    f"Cannot read {path} size exceeds limit: {file_size} >= {read_max}"
                )
                raise FileSizeLimitExceededError(path, file_size, read_max)

            if dry_run:
                return ReadResult(path=os.path.realpath(path), dry_run=True)

            times = handle.get_file_times() if preserve_time else None
            try:
                if file_size > 0:
                    bytes_read = self._read_exact(handle, file_size, sink)
                else:
                    bytes_read = self._read_stream(handle, read_max, block_size, sink)
            except OSError as e:
                raise FileIOError(path, f"Read failed: {e}") from e
            finally:
                if times is not None and not self.settings.disable_forensic:
                    # The dropped identity may not own the file; the descriptor is
                    # still open, so no path is re-resolved.
                    dropper.restore()
                    self._restore_times(handle, times)

        logger.debug(f"Read {bytes_read} bytes from {path}")
        return ReadResult(path=path, bytes_read=bytes_read)

    def _read_exact(self, handle: PlatformFile, size: int, sink: ChunkSink) -> int:
        content = bytearray()
        while len(content) < size:
            part = handle.read(size - len(content))
            if not part:
                break
            content += part

        if len(content) < size:
            logger.debug(
                f"Short read from {handle.path}: {len(content)} of {size} bytes"
            )
        sink(bytes(content))
        return len(content)

    def _read_stream(
        self, handle: PlatformFile, read_max: int, block_size: int, sink: ChunkSink
    ) -> int:
        total_bytes = 0
        while True:
            part = handle.read(block_size)
            if not part:
                return total_bytes

            total_bytes += len(part)
            if total_bytes >= read_max:
                logger.warning(
                    f"Stream from {handle.path} exceeds limit: "
                    f"{total_bytes} >= {read_max}"
                )
                raise FileSizeLimitExceededError(handle.path, total_bytes, read_max)
            sink(part)

    def _restore_times(self, handle: PlatformFile, times: FileTimes) -> None:
        try:
            handle.set_file_times(times)
        except OSError as e:
            logger.warning(f"Could not restore times on {handle.path}: {e}")

    def read_bytes(
        self,
        path: Union[str, Path],
        size: int = 0,
        preserve_time: bool = False,
        blocking: bool = False,
    ) -> bytes:
        """Read a whole file into memory."""
        chunks: list[bytes] = []
        self.read_file(
            path,
            chunks.append,
            size=size,
            preserve_time=preserve_time,
            blocking=blocking,
        )
        return b"".join(chunks)

    def read_text(
        self,
        path: Union[str, Path],
        encoding: str = "utf-8",
        errors: str = "strict",
        blocking: bool = False,
    ) -> str:
        """
        Read a whole file as text.

        Raises:
            UnicodeDecodeError: If the content can't be decoded
        """
        return self.read_bytes(path, blocking=blocking).decode(encoding, errors)

    def check_file(self, path: Union[str, Path], blocking: bool = False) -> str:
        """
        Perform the open and limit checks without reading.

        Returns:
            The canonical path of the file
        """
        result = self.read_file(path, lambda _: None, dry_run=True, blocking=blocking)
        return result.path

    def check_access(self, path: Union[str, Path]) -> tuple[bool, str]:
        """
        Check if a path can be read without reading it.

        Returns:
            Tuple of (can_access, reason)
        """
        try:
            return True, self.check_file(path)
        except FileSystemError as e:
            return False, str(e)

    def forensic_read(self, path: Union[str, Path], blocking: bool = False) -> bytes:
        """Read a whole file, restoring its atime/mtime afterwards."""
        return self.read_bytes(path, preserve_time=True, blocking=blocking)
