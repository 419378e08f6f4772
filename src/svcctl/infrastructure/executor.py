"""Command execution port and its subprocess adapter.

Everything above this layer talks to the host through ``Executor.run``.
A nonzero exit is a *successful* call: the exit code is data. Only
launch-level failures (missing binary, timeout, OS errors) raise
``ExecutorError``.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from svcctl.domain.errors import ExecutorError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ExecOpts:
    """Per-call execution options. ``timeout`` is in seconds."""

    timeout: float = DEFAULT_TIMEOUT
    work_dir: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    use_sudo: bool = False
    non_interactive: bool = True


@dataclass(frozen=True)
class ExecResult:
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class Executor(Protocol):
    """Runs one external command and captures its output."""

    def run(self, cmd: str, args: list[str], opts: ExecOpts | None = None) -> ExecResult: ...


def is_command_available(cmd: str) -> bool:
    """Return True if *cmd* resolves on PATH."""
    return shutil.which(cmd) is not None


def format_command(cmd: str, args: list[str]) -> str:
    return " ".join([cmd, *args])


class SystemExecutor:
    """Executor backed by ``subprocess.run``.

    ``default_timeout`` applies when the caller passes no options.
    """

    def __init__(self, *, default_timeout: float = DEFAULT_TIMEOUT) -> None:
        self._default_timeout = default_timeout

    def run(self, cmd: str, args: list[str], opts: ExecOpts | None = None) -> ExecResult:
        opts = opts or ExecOpts(timeout=self._default_timeout)
        argv = [cmd, *args]
        # sudo has no meaning on Windows; run unprivileged there.
        if opts.use_sudo and sys.platform != "win32":
            argv = ["sudo", "-n", *argv]

        env: dict[str, str] | None = None
        if opts.env or opts.non_interactive:
            env = dict(os.environ)
            env.update(opts.env)
            if opts.non_interactive:
                env.setdefault("HOMEBREW_NO_AUTO_UPDATE", "1")
                env.setdefault("DEBIAN_FRONTEND", "noninteractive")

        logger.debug("exec: %s", " ".join(argv))
        try:
            proc = subprocess.run(
                argv,
                cwd=opts.work_dir,
                env=env,
                capture_output=True,
                text=True,
                timeout=opts.timeout if opts.timeout > 0 else None,
                stdin=subprocess.DEVNULL if opts.non_interactive else None,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExecutorError(
                format_command(cmd, args),
                f"timed out after {opts.timeout:g}s",
                timed_out=True,
            ) from exc
        except OSError as exc:
            raise ExecutorError(format_command(cmd, args), str(exc)) from exc

        return ExecResult(stdout=proc.stdout, stderr=proc.stderr, exit_code=proc.returncode)
