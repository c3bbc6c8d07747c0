"""
Effective-identity dropping for reads of user-controlled paths.

When the agent runs as root, reading a path inside a directory owned by an
unprivileged user is done with that user's effective uid/gid, so symlinks
planted by the user cannot be used to read files they could not read
themselves.

The effective ids are process-wide, so every ``DropPrivileges`` block holds
a module-level lock from entry to exit. A drop made by one thread can never be
observed by another, and the "nothing to drop" decision is taken under the
same lock.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

# Serializes effective-identity changes across threads.
_identity_lock = threading.RLock()


class DropPrivileges:
    """
    Scoped effective-identity drop.

    Usage:
        with DropPrivileges() as dropper:
            if not dropper.drop_to_parent(path):
                raise FileAccessDeniedError(str(path), "Cannot drop privileges")
            ...  # open and read while dropped
        # previous effective identity restored here
    """

    def __init__(self):
        self.dropped = False
        self._saved_uid: Optional[int] = None
        self._saved_gid: Optional[int] = None
        self._saved_groups: Optional[list[int]] = None
        self._locked = False

    def __enter__(self) -> "DropPrivileges":
        _identity_lock.acquire()
        self._locked = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.restore()
        finally:
            self._locked = False
            _identity_lock.release()

    def drop_to_parent(self, path: Union[str, Path]) -> bool:
        """
        Drop to the owner of ``path``'s parent directory.

        Returns True if the read may proceed: nothing needed dropping, or
        the drop succeeded. Returns False if the drop was refused.
        """
        if os.geteuid() != 0:
            return True

        parent = os.path.dirname(os.path.abspath(os.fspath(path)))
        try:
            st = os.stat(parent)
        except FileNotFoundError:
            # Nothing to drop to; the open reports the missing path.
            return True
        except OSError as e:
            logger.warning(f"Cannot stat parent directory {parent}: {e}")
            return False

        if st.st_uid == 0:
            return True

        return self.drop_to(st.st_uid, st.st_gid)

    def drop_to(self, uid: int, gid: int) -> bool:
        if not self._locked:
            raise RuntimeError("DropPrivileges must be entered before dropping")

        if self.dropped:
            if os.geteuid() == uid and os.getegid() == gid:
                return True
            self.restore()

        self._saved_uid = os.geteuid()
        self._saved_gid = os.getegid()
        self._saved_groups = os.getgroups()
        try:
            os.setgroups([gid])
            os.setegid(gid)
            os.seteuid(uid)
        except OSError as e:
            logger.warning(f"Failed to drop privileges to {uid}:{gid}: {e}")
            self.dropped = True
            self.restore()
            return False

        self.dropped = True
        logger.debug(f"Dropped effective identity to {uid}:{gid}")
        return True

    def restore(self) -> None:
        """Return to the identity held before the drop."""
        if not self.dropped:
            return

        # The uid must be restored first; only root may change gid/groups.
        if self._saved_uid is not None and os.geteuid() != self._saved_uid:
            os.seteuid(self._saved_uid)
        if self._saved_gid is not None and os.getegid() != self._saved_gid:
            os.setegid(self._saved_gid)
        if self._saved_groups is not None:
            os.setgroups(self._saved_groups)

        self.dropped = False
        self._saved_uid = self._saved_gid = self._saved_groups = None
