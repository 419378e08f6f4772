"""Shared pytest fixtures and test helpers for svcctl tests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import pytest
from click.testing import CliRunner

from svcctl.config.settings import SvcSettings
from svcctl.domain.errors import ExecutorError
from svcctl.domain.types import Platform
from svcctl.infrastructure.executor import ExecOpts, ExecResult, format_command
from svcctl.infrastructure.runtime import Runtime
from svcctl.services.telemetry import disable_telemetry


class FakeExecutor:
    """Executor answering from a table of canned results.

    Responses are keyed by ``(cmd, tuple(args))``. A command with no
    registered response raises ``ExecutorError`` as if the binary were
    missing. Every call is recorded, including unanswered ones.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, tuple[str, ...]], ExecResult | ExecutorError] = {}
        self.calls: list[tuple[str, tuple[str, ...]]] = []
        self.opts: list[ExecOpts | None] = []

    def on(
        self,
        argv: list[str],
        stdout: str = "",
        *,
        stderr: str = "",
        exit_code: int = 0,
    ) -> FakeExecutor:
        self.responses[(argv[0], tuple(argv[1:]))] = ExecResult(stdout, stderr, exit_code)
        return self

    def fail(self, argv: list[str], message: str = "not found") -> FakeExecutor:
        self.responses[(argv[0], tuple(argv[1:]))] = ExecutorError(
            format_command(argv[0], argv[1:]), message
        )
        return self

    def run(self, cmd: str, args: list[str], opts: ExecOpts | None = None) -> ExecResult:
        key = (cmd, tuple(args))
        self.calls.append(key)
        self.opts.append(opts)
        response = self.responses.get(key)
        if response is None:
            raise ExecutorError(format_command(cmd, args), "executable file not found")
        if isinstance(response, ExecutorError):
            raise response
        return response

    def was_called(self, argv: list[str]) -> bool:
        return (argv[0], tuple(argv[1:])) in self.calls

    def call_count(self, argv: list[str]) -> int:
        return self.calls.count((argv[0], tuple(argv[1:])))


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging_and_telemetry():
    """Undo the root-logger and telemetry changes a CLI invocation makes."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("svcctl").setLevel(logging.NOTSET)
    disable_telemetry()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def make_runtime(executor: FakeExecutor) -> Callable[..., Runtime]:
    """Factory for a Runtime wired to the fake executor on Linux.

    Keyword arguments are ``SvcSettings`` fields; ``platform`` and ``clock``
    can be overridden too. Sleeps are recorded in ``runtime.sleeps``.
    """

    def factory(
        *,
        platform: Platform = Platform.LINUX,
        clock: Callable[[], float] | None = None,
        **settings: Any,
    ) -> Runtime:
        sleeps: list[float] = []
        runtime = Runtime(
            SvcSettings(**settings),
            executor=executor,
            platform=platform,
            sleep=sleeps.append,
            clock=clock or (lambda: 0.0),
            load_plugins=False,
        )
        runtime.sleeps = sleeps  # type: ignore[attr-defined]
        return runtime

    return factory


@pytest.fixture
def runtime(make_runtime: Callable[..., Runtime]) -> Runtime:
    return make_runtime()


@pytest.fixture
def _isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty temp directory so no svcctl.toml is discovered."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SVCCTL_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)


def ticking_clock(step: float = 1.0) -> Callable[[], float]:
    """A clock advancing by *step* on every read."""
    now = [0.0]

    def clock() -> float:
        now[0] += step
        return now[0]

    return clock


@pytest.fixture
def clock_factory() -> Callable[..., Callable[[], float]]:
    return ticking_clock


@pytest.fixture
def fake_host(
    executor: FakeExecutor, monkeypatch: pytest.MonkeyPatch, _isolated_config: None
) -> FakeExecutor:
    """Make CLI invocations build their Runtime on the fake executor.

    Settings still come from the CLI flags and any svcctl.toml in the
    working directory. Returns the executor for registering responses.
    """
    import svcctl.infrastructure.runtime as runtime_module

    real_runtime = runtime_module.Runtime

    def build(settings: SvcSettings) -> Runtime:
        return real_runtime(
            settings,
            executor=executor,
            platform=Platform.LINUX,
            sleep=lambda _seconds: None,
            load_plugins=False,
        )

    monkeypatch.setattr(runtime_module, "Runtime", build)
    return executor
