"""Retry helpers for procpipe and downstream libraries."""

from __future__ import annotations

import asyncio
import logging
import time
import typing as t

from procpipe.constants import RETRY_INTERVAL_SECONDS, RETRY_TIMEOUT_SECONDS
from procpipe.exc import WaitTimeout

logger = logging.getLogger(__name__)

if t.TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


def retry_until(
    fun: Callable[[], bool],
    seconds: float = RETRY_TIMEOUT_SECONDS,
    *,
    interval: float = RETRY_INTERVAL_SECONDS,
    raises: bool | None = True,
) -> bool:
    """
    Retry a function until a condition meets or the specified time passes.

    Parameters
    ----------
    fun : callable
        A function that will be called repeatedly until it returns ``True`` or
        the specified time passes.
    seconds : float
        Seconds to retry. Defaults to ``8``, which is configurable via
        ``PROCPIPE_RETRY_TIMEOUT_SECONDS`` environment variables.
    interval : float
        Time in seconds to wait between calls. Defaults to ``0.05`` and is
        configurable via ``PROCPIPE_RETRY_INTERVAL_SECONDS`` environment
        variable.
    raises : bool
        Whether or not to raise an exception on timeout. Defaults to ``True``.

    Examples
    --------
    >>> attempts = []
    >>> def fn():
    ...     attempts.append(1)
    ...     return len(attempts) == 3

    >>> retry_until(fn, interval=0)
    True

    In pytest:

    >>> assert not retry_until(lambda: False, 0.1, raises=False)
    """
    ini = time.time()

    while not fun():
        end = time.time()
        if end - ini >= seconds:
            if raises:
                raise WaitTimeout
            return False
        time.sleep(interval)
    return True


async def aretry_until(
    fun: Callable[[], Awaitable[bool] | bool],
    seconds: float = RETRY_TIMEOUT_SECONDS,
    *,
    interval: float = RETRY_INTERVAL_SECONDS,
    raises: bool | None = True,
) -> bool:
    """Async version of :func:`retry_until`, sleeping on the running loop.

    ``fun`` may be a plain function or a coroutine function.
    """
    ini = time.time()

    while True:
        result = fun()
        if asyncio.iscoroutine(result):
            result = await result
        if result:
            return True
        if time.time() - ini >= seconds:
            if raises:
                raise WaitTimeout
            return False
        await asyncio.sleep(interval)
