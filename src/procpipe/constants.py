"""Runtime configuration for procpipe.

Values are read once from the environment when the module is imported.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: bool = True) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


#: Number of bytes requested from an output pipe per read.
#: Can be configured via :envvar:`PROCPIPE_READ_CHUNK_SIZE`.
READ_CHUNK_SIZE = int(os.getenv("PROCPIPE_READ_CHUNK_SIZE", 8192))

#: Buffer limit of the asyncio stream readers attached to stdout and stderr.
#: Can be configured via :envvar:`PROCPIPE_STREAM_LIMIT`.
STREAM_LIMIT = int(os.getenv("PROCPIPE_STREAM_LIMIT", 2**16))

#: Flag passed to an executable when checking that it can be spawned.
#: Can be configured via :envvar:`PROCPIPE_VALIDATE_FLAG`.
VALIDATE_FLAG = os.getenv("PROCPIPE_VALIDATE_FLAG", "--help")

#: Emit OpenTelemetry spans. Disable with ``PROCPIPE_OTEL=0``.
OTEL_ENABLED = _env_flag("PROCPIPE_OTEL")

#: Seconds :func:`procpipe.test.retry_until` waits before giving up.
#: Can be configured via :envvar:`PROCPIPE_RETRY_TIMEOUT_SECONDS`.
RETRY_TIMEOUT_SECONDS = int(os.getenv("PROCPIPE_RETRY_TIMEOUT_SECONDS", 8))

#: Seconds between two attempts of :func:`procpipe.test.retry_until`.
#: Can be configured via :envvar:`PROCPIPE_RETRY_INTERVAL_SECONDS`.
RETRY_INTERVAL_SECONDS = float(os.getenv("PROCPIPE_RETRY_INTERVAL_SECONDS", 0.05))
