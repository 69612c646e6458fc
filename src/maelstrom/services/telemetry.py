"""Stage timings for ``--verbose`` runs.

A :func:`timed` service method opens a root :class:`Span`; each
:func:`stage` inside it appends one flat child.  The finished tree is
merged into ``ServiceResult.meta["telemetry"]``.  With telemetry off no
root is opened and :func:`stage` yields None.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from maelstrom.services.result import ServiceResult

logger = structlog.get_logger("maelstrom.telemetry")

_enabled: ContextVar[bool] = ContextVar("maelstrom_telemetry", default=False)
_root: ContextVar[Span | None] = ContextVar("maelstrom_root_span", default=None)


@dataclass
class Span:
    """One timed operation or stage."""

    name: str
    started: float = field(default_factory=time.perf_counter)
    duration_ms: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    stages: list[Span] = field(default_factory=list)

    def close(self) -> None:
        self.duration_ms = round((time.perf_counter() - self.started) * 1000, 2)

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": self.duration_ms}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.stages:
            data["stages"] = [s.to_dict() for s in self.stages]
        return data


def set_telemetry(enabled: bool) -> None:
    """Switch stage timing on or off for the current context."""
    _enabled.set(enabled)


@contextmanager
def stage(name: str) -> Iterator[Span | None]:
    """Time one stage of the running :func:`timed` operation."""
    root = _root.get()
    if root is None:
        yield None
        return
    span = Span(name)
    root.stages.append(span)
    try:
        yield span
    finally:
        span.close()


_P = ParamSpec("_P")
_R = TypeVar("_R", bound=ServiceResult)


def timed(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a root span around a service method returning a ServiceResult."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(func.__qualname__)
        token = _root.set(root)
        try:
            result = func(*args, **kwargs)
        finally:
            root.close()
            _root.reset(token)

        logger.debug(
            "span.complete",
            span_name=root.name,
            duration_ms=root.duration_ms,
            ok=result.ok,
            stages=[s.name for s in root.stages],
        )
        meta = {**(result.meta or {}), "telemetry": root.to_dict()}
        return result.model_copy(update={"meta": meta})

    return wrapper
