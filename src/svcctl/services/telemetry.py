"""Operation traces for verbose runs.

``@traced`` opens a trace around a service method. While it is open, every
command that goes through a ``TracingExecutor`` is recorded on the innermost
step, so a verbose ``svcctl start`` shows which backend commands ran, how
long each took and how they exited. Services add notes such as the strategy
that answered or the detectors consulted. The finished trace is attached to
``ServiceResult.meta["trace"]``.

When tracing is off (the default) each hook costs one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import structlog

from svcctl.domain.errors import ExecutorError
from svcctl.infrastructure.executor import format_command
from svcctl.services.result import ServiceResult

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import ExecOpts, ExecResult, Executor

_enabled: ContextVar[bool] = ContextVar("_trace_enabled", default=False)
_current_step: ContextVar[Step | None] = ContextVar("_current_step", default=None)

_log = structlog.get_logger("svcctl.trace")


@dataclass(frozen=True)
class CommandRecord:
    """One backend command run while a trace was open."""

    command: str
    duration_ms: float
    exit_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {"command": self.command, "duration_ms": self.duration_ms}
        if self.error is not None:
            record["error"] = self.error
        else:
            record["exit_code"] = self.exit_code
        return record


@dataclass
class Step:
    """A timed step of an operation: the commands it ran and its nested steps."""

    name: str
    children: list[Step] = field(default_factory=list)
    commands: list[CommandRecord] = field(default_factory=list)
    notes: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    ended: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.ended is None:
            return 0.0
        return (self.ended - self.started) * 1000

    def finish(self) -> None:
        self.ended = time.perf_counter()

    def note(self, key: str, value: Any) -> None:
        self.notes[key] = value

    def command_count(self) -> int:
        return len(self.commands) + sum(child.command_count() for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.notes:
            data["notes"] = self.notes
        if self.commands:
            data["commands"] = [c.to_dict() for c in self.commands]
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


# ── Recording ─────────────────────────────────────────────────────────


@contextmanager
def trace_step(name: str) -> Generator[Step | None]:
    """Open a nested step under the current one; yields None when not tracing."""
    parent = _current_step.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    step = Step(name=name)
    parent.children.append(step)
    token = _current_step.set(step)
    try:
        yield step
    finally:
        step.finish()
        _current_step.reset(token)


def note(key: str, value: Any) -> None:
    """Attach *key* to the current step, if a trace is open."""
    step = current_step()
    if step is not None:
        step.note(key, value)


def record_command(
    command: str, duration: float, *, exit_code: int | None = None, error: str | None = None
) -> None:
    step = current_step()
    if step is None:
        return
    step.commands.append(
        CommandRecord(
            command=command,
            duration_ms=round(duration * 1000, 2),
            exit_code=exit_code,
            error=error,
        )
    )


class TracingExecutor:
    """Executor wrapper recording each command on the open trace."""

    def __init__(self, inner: Executor) -> None:
        self._inner = inner

    @property
    def inner(self) -> Executor:
        return self._inner

    def run(self, cmd: str, args: list[str], opts: ExecOpts | None = None) -> ExecResult:
        if not _enabled.get():
            return self._inner.run(cmd, args, opts)
        started = time.perf_counter()
        command = format_command(cmd, args)
        try:
            result = self._inner.run(cmd, args, opts)
        except ExecutorError as exc:
            record_command(command, time.perf_counter() - started, error=str(exc))
            raise
        record_command(command, time.perf_counter() - started, exit_code=result.exit_code)
        return result


# ── @traced ───────────────────────────────────────────────────────────


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Trace a service method and attach the trace to its ServiceResult.

    The first positional argument after ``self`` is noted as ``service``
    when it is a service name.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Step(name=func.__qualname__)
        if len(args) > 1 and isinstance(args[1], str):
            root.note("service", args[1])
        token = _current_step.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            root.finish()
            _current_step.reset(token)
            _log.debug(
                "trace.complete",
                operation=root.name,
                duration_ms=round(root.duration_ms, 2),
                commands=root.command_count(),
                ok=ok,
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "trace": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn tracing on for this context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def current_step() -> Step | None:
    if not _enabled.get():
        return None
    return _current_step.get()
