"""OpenTelemetry helpers for procpipe.

Spans are created through the ``opentelemetry-api`` package. Without an SDK
configured by the application the API hands out non-recording spans, so
procpipe can be used without OTEL configured. Set ``PROCPIPE_OTEL=0`` to skip
span creation entirely.
"""

from __future__ import annotations

import contextlib
import logging
import typing as t

from opentelemetry import trace

from . import constants
from .__about__ import __version__

logger = logging.getLogger(__name__)

#: Attribute types accepted by :meth:`opentelemetry.trace.Span.set_attribute`
AttributeValue = t.Union[str, bool, int, float]


def get_tracer() -> trace.Tracer:
    """Return the procpipe tracer from the global tracer provider.

    Examples
    --------
    >>> from procpipe.otel import get_tracer
    >>> _ = get_tracer()
    """
    return trace.get_tracer("procpipe", __version__)


@contextlib.contextmanager
def start_span(
    name: str,
    **attributes: AttributeValue | None,
) -> t.Iterator[trace.Span]:
    """Start a span around a process operation.

    Attribute names are prefixed with ``procpipe.``; ``None`` values are
    dropped. Exceptions escaping the block are recorded on the span and
    re-raised.

    Examples
    --------
    >>> from procpipe.otel import start_span
    >>> with start_span("procpipe.test", command="echo hi") as span:
    ...     span.set_attribute("process.pid", 1)
    """
    if not constants.OTEL_ENABLED:
        yield trace.INVALID_SPAN
        return

    cleaned = {
        f"procpipe.{key}": value
        for key, value in attributes.items()
        if value is not None
    }
    with get_tracer().start_as_current_span(name, attributes=cleaned) as span:
        yield span


__all__ = [
    "get_tracer",
    "start_span",
]
