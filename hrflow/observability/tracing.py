"""Structured workflow events.

Every event is one JSON line carrying the trace id of the session or request
that caused it. ``start_span`` times a block (a record commit, a status
change, a candidate lookup) and logs ``span.end`` with its attributes.
"""

from __future__ import annotations

import json
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass
class Span:
    name: str
    trace_id: str
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    start_ns: int = field(default_factory=time.time_ns)
    end_ns: int | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    def end(self) -> None:
        self.end_ns = time.time_ns()

    @property
    def duration_ms(self) -> float | None:
        if self.end_ns is None:
            return None
        return (self.end_ns - self.start_ns) / 1_000_000.0


def new_trace_id() -> str:
    return uuid.uuid4().hex


def log_event(event: str, *, trace_id: str, span: Span | None = None, **fields: Any) -> None:
    payload: dict[str, Any] = {'event': event, 'trace_id': trace_id, **fields}
    if span is not None:
        payload['span'] = {
            'name': span.name,
            'span_id': span.span_id,
            'duration_ms': span.duration_ms,
            'attributes': span.attributes,
        }
    print(json.dumps(payload, ensure_ascii=False, default=str))


@contextmanager
def start_span(name: str, *, trace_id: str | None = None, **attributes: Any) -> Iterator[Span]:
    """Time the enclosed block; the block may add attributes to the span."""
    span = Span(name=name, trace_id=trace_id or new_trace_id(), attributes=dict(attributes))
    try:
        yield span
    except Exception as exc:
        span.attributes['error'] = type(exc).__name__
        raise
    finally:
        span.end()
        log_event('span.end', trace_id=span.trace_id, span=span)
