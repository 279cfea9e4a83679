"""Helper methods for procpipe and downstream libraries."""

from __future__ import annotations

import errno
import logging
import os

from .retry import aretry_until, retry_until

logger = logging.getLogger(__name__)


def pid_exists(pid: int) -> bool:
    """Return whether a process (or an unreaped zombie) with ``pid`` exists.

    Examples
    --------
    >>> pid_exists(os.getpid())
    True
    """
    try:
        os.kill(pid, 0)
    except OSError as e:
        if e.errno == errno.ESRCH:
            return False
        if e.errno == errno.EPERM:
            return True
        raise
    return True


__all__ = [
    "aretry_until",
    "pid_exists",
    "retry_until",
]
