"""Lifecycle strategy contract and the shared idempotent mutation flow.

Every concrete strategy is a ``ServiceStrategy``: it can start, stop,
restart and query a service, and report health and status using its own
detection logic. Subclasses describe *which* commands to run; the base
class owns *how* they run:

1. check ``is_running`` and skip the mutation if the desired state holds
   (a failing check never blocks the command);
2. run the command, trying fallback command lines only on launch errors;
3. reclassify a nonzero exit whose stderr says "already running/stopped"
   as success.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar

from svcctl.domain.errors import (
    CommandFailedError,
    ExecutorError,
    StrategyError,
    SvcctlError,
)
from svcctl.domain.patterns import is_already_running_error, is_already_stopped_error
from svcctl.infrastructure.executor import ExecOpts, ExecResult, format_command

if TYPE_CHECKING:
    from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
    from svcctl.domain.types import ManagementStrategy
    from svcctl.infrastructure.executor import Executor

logger = logging.getLogger(__name__)

DEFAULT_RESTART_PAUSE = 2.0

Classifier = Callable[[str, str], bool]


class ServiceStrategy(ABC):
    """Manage one service through one mechanism.

    Parameters:
        executor: Command execution port.
        restart_pause: Seconds to wait between stop and start when restart
            is decomposed.
        opts: Execution options applied to every command.
        sleep: Injected for tests; defaults to ``time.sleep``.
    """

    name: ClassVar[ManagementStrategy]

    def __init__(
        self,
        executor: Executor,
        *,
        restart_pause: float = DEFAULT_RESTART_PAUSE,
        opts: ExecOpts | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._executor = executor
        self._restart_pause = restart_pause
        self._opts = opts or ExecOpts()
        self._sleep = sleep

    @property
    def strategy_name(self) -> ManagementStrategy:
        return self.name

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    def is_running(self, service_name: str) -> bool:
        """Return whether the service runs. Raises ``StrategyError`` if unknown."""

    @abstractmethod
    def health_check(self, service_name: str) -> ServiceHealthInfo:
        """Report health. Failed checks yield an unhealthy answer, not an error."""

    @abstractmethod
    def status_check(self, service_name: str) -> ServiceStatusInfo: ...

    @abstractmethod
    def _start_commands(self, service_name: str) -> list[list[str]]:
        """Candidate command lines for start, tried in order on launch errors."""

    @abstractmethod
    def _stop_commands(self, service_name: str) -> list[list[str]]: ...

    def _restart_commands(self, service_name: str) -> list[list[str]]:
        """Native restart command lines. Empty means decompose into stop + start."""
        return []

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def start(self, service_name: str) -> None:
        if self._running_state(service_name) is True:
            logger.debug("%s already running, skipping start", service_name)
            return
        self._mutate(
            "start", service_name, self._start_commands(service_name), is_already_running_error
        )

    def stop(self, service_name: str) -> None:
        if self._running_state(service_name) is False:
            logger.debug("%s already stopped, skipping stop", service_name)
            return
        self._mutate(
            "stop", service_name, self._stop_commands(service_name), is_already_stopped_error
        )

    def restart(self, service_name: str) -> None:
        commands = self._restart_commands(service_name)
        if commands:
            self._mutate("restart", service_name, commands, None)
            return
        self.stop(service_name)
        self._sleep(self._restart_pause)
        self.start(service_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(self, argv: list[str], opts: ExecOpts | None = None) -> ExecResult:
        return self._executor.run(argv[0], argv[1:], opts or self._opts)

    def _running_state(self, service_name: str) -> bool | None:
        """``is_running`` with errors turned into None (unknown)."""
        try:
            return self.is_running(service_name)
        except SvcctlError as exc:
            logger.debug("could not determine state of %s, proceeding: %s", service_name, exc)
            return None

    def _mutate(
        self,
        op: str,
        service_name: str,
        commands: list[list[str]],
        classifier: Classifier | None,
    ) -> None:
        if not commands:
            raise StrategyError(f"no {op} command configured for service {service_name}")

        result: ExecResult | None = None
        last_exc: ExecutorError | None = None
        for argv in commands:
            try:
                result = self._run(argv)
                break
            except ExecutorError as exc:
                logger.debug("%s: %s", format_command(argv[0], argv[1:]), exc)
                last_exc = exc

        if result is None:
            raise StrategyError(
                f"failed to {op} service {service_name} with {self.strategy_name}: {last_exc}"
            ) from last_exc

        if result.exit_code == 0:
            return
        if classifier is not None and classifier(service_name, result.stderr):
            logger.debug("%s %s reported no-op: %s", service_name, op, result.stderr.strip())
            return
        raise CommandFailedError(
            f"{self.strategy_name} {op} failed for {service_name}: "
            f"exit code {result.exit_code}, stderr: {result.stderr.strip()}",
            exit_code=result.exit_code,
            stderr=result.stderr,
        )


def pgrep(executor: Executor, service_name: str, opts: ExecOpts | None = None) -> list[str]:
    """PIDs whose command line matches *service_name*. Launch errors mean none."""
    try:
        result = executor.run("pgrep", ["-f", service_name], opts or ExecOpts())
    except ExecutorError as exc:
        logger.debug("pgrep unavailable: %s", exc)
        return []
    if result.exit_code != 0:
        return []
    return result.stdout.split()
