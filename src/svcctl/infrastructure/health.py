"""Uniform health checks: command, HTTP, TCP and unix socket.

Checks never raise for an unhealthy target. Every failure (launch error,
network error, status mismatch, refused connection) comes back as a
``HealthResult`` with ``healthy=False`` and an ``error`` message.
"""

from __future__ import annotations

import contextvars
import logging
import socket
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

import httpx

from svcctl.domain.errors import ExecutorError
from svcctl.domain.models import (
    DependencyHealthCheck,
    HealthCheck,
    HealthCheckConfig,
    HealthResult,
)
from svcctl.domain.types import HealthCheckType
from svcctl.infrastructure.executor import ExecOpts

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import Executor

logger = logging.getLogger(__name__)


def parse_command(command: str) -> list[str]:
    """Split a command line on whitespace, grouping double-quoted runs.

    Quotes are stripped and empty tokens dropped. An unterminated quote runs
    to the end of the string. No escape sequences are recognised.

    >>> parse_command('echo "hello world"')
    ['echo', 'hello world']
    """
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False

    for ch in command:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch.isspace() and not in_quotes:
            if current:
                parts.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        parts.append("".join(current))
    return parts


def _elapsed(started: float) -> float:
    return time.perf_counter() - started


class HealthChecker:
    """Runs health checks against services.

    Parameters:
        executor: Command execution port used by command checks.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        max_workers: Upper bound on threads used by ``check_multiple``.
    """

    def __init__(
        self,
        executor: Executor,
        *,
        transport: httpx.BaseTransport | None = None,
        max_workers: int = 8,
    ) -> None:
        self._executor = executor
        self._transport = transport
        self._max_workers = max_workers

    # ------------------------------------------------------------------
    # Single checks
    # ------------------------------------------------------------------

    def check_command(self, command: str, timeout: float) -> HealthResult:
        """Healthy iff the command launches and exits 0 within *timeout*."""
        started = time.perf_counter()
        parts = parse_command(command)
        if not parts:
            return HealthResult(
                healthy=False, response_time=_elapsed(started), error="empty command"
            )

        try:
            result = self._executor.run(parts[0], parts[1:], ExecOpts(timeout=timeout))
        except ExecutorError as exc:
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error=str(exc),
                metadata={"command": command, "output": "", "exit_code": -1},
            )

        healthy = result.exit_code == 0
        return HealthResult(
            healthy=healthy,
            response_time=_elapsed(started),
            error=None if healthy else f"command exited with code {result.exit_code}",
            metadata={
                "command": command,
                "output": result.stdout,
                "exit_code": result.exit_code,
            },
        )

    def check_http(self, endpoint: str, expected_status: int, timeout: float) -> HealthResult:
        """Healthy iff a GET on *endpoint* returns exactly *expected_status*."""
        started = time.perf_counter()
        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as client:
                response = client.get(endpoint)
        except httpx.HTTPError as exc:
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error=f"HTTP request failed: {exc}",
                metadata={"endpoint": endpoint},
            )

        metadata = {"endpoint": endpoint, "status_code": response.status_code}
        if response.status_code != expected_status:
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error=(
                    f"unexpected status code: got {response.status_code}, "
                    f"expected {expected_status}"
                ),
                metadata=metadata,
            )
        return HealthResult(healthy=True, response_time=_elapsed(started), metadata=metadata)

    def check_tcp(self, host: str, port: int, timeout: float) -> HealthResult:
        """Healthy iff a TCP connection to *host*:*port* opens within *timeout*."""
        started = time.perf_counter()
        metadata = {"host": host, "port": port}
        try:
            conn = socket.create_connection((host, port), timeout=timeout)
        except OSError as exc:
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error=f"TCP connection failed: {exc}",
                metadata=metadata,
            )
        conn.close()
        return HealthResult(healthy=True, response_time=_elapsed(started), metadata=metadata)

    def check_socket(self, path: str, timeout: float) -> HealthResult:
        """Healthy iff the unix socket at *path* accepts a connection."""
        started = time.perf_counter()
        metadata = {"socket_path": path}
        if not hasattr(socket, "AF_UNIX"):
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error="unix sockets are not supported here",
                metadata=metadata,
            )
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        try:
            sock.connect(path)
        except OSError as exc:
            return HealthResult(
                healthy=False,
                response_time=_elapsed(started),
                error=f"socket connection failed: {exc}",
                metadata=metadata,
            )
        finally:
            sock.close()
        return HealthResult(healthy=True, response_time=_elapsed(started), metadata=metadata)

    def check_config(self, config: HealthCheckConfig) -> HealthResult:
        """Dispatch on the configured check: command, then HTTP, then TCP."""
        kind = config.kind
        if kind is HealthCheckType.COMMAND:
            return self.check_command(config.command, config.timeout)
        if kind is HealthCheckType.HTTP:
            return self.check_http(config.http_endpoint, config.expected_status, config.timeout)
        if kind is HealthCheckType.TCP:
            return self.check_tcp(config.tcp_host, config.tcp_port, config.timeout)
        return HealthResult(healthy=False, error="no valid health check method configured")

    def check_dependency(self, check: DependencyHealthCheck) -> HealthResult:
        """Run the check attached to a dependency edge.

        TCP checks target ``localhost``; HTTP checks expect status 200.
        """
        match check.type:
            case HealthCheckType.COMMAND:
                return self.check_command(check.command, check.timeout)
            case HealthCheckType.HTTP:
                return self.check_http(check.url, 200, check.timeout)
            case HealthCheckType.TCP:
                return self.check_tcp("localhost", check.port, check.timeout)
            case HealthCheckType.SOCKET:
                return self.check_socket(check.socket_path, check.timeout)
        return HealthResult(healthy=False, error=f"unsupported health check type: {check.type}")

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def check_multiple(self, checks: list[HealthCheck]) -> dict[str, HealthResult]:
        """Run every check concurrently and return results keyed by service name.

        Each worker only produces its own result; the mapping is assembled
        after all futures complete. Workers run in a copy of the caller's
        context so commands they run land on the caller's open trace.
        """
        if not checks:
            return {}

        workers = max(1, min(self._max_workers, len(checks)))
        futures: dict[str, Future[HealthResult]] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="svcctl-health") as pool:
            for check in checks:
                context = contextvars.copy_context()
                futures[check.service_name] = pool.submit(context.run, self._run_check, check)

        results: dict[str, HealthResult] = {}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as exc:
                logger.warning("health check for %s raised: %s", name, exc)
                results[name] = HealthResult(healthy=False, error=str(exc))
        return results

    def _run_check(self, check: HealthCheck) -> HealthResult:
        if check.type is HealthCheckType.COMMAND:
            return self.check_command(check.command, check.timeout)
        if check.type is HealthCheckType.HTTP:
            return self.check_http(check.endpoint, check.expected_status, check.timeout)
        if check.type is HealthCheckType.TCP:
            return self.check_tcp(check.host, check.port, check.timeout)
        return HealthResult(healthy=False, error=f"unsupported health check type: {check.type}")
