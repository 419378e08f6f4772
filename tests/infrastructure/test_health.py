"""Tests for the health checker."""

from __future__ import annotations

import itertools
import socket
import sys
import time

import httpx
import pytest

from svcctl.domain.models import DependencyHealthCheck, HealthCheck, HealthCheckConfig
from svcctl.domain.types import HealthCheckType
from svcctl.infrastructure.executor import ExecOpts, ExecResult
from svcctl.infrastructure.health import HealthChecker, parse_command


@pytest.fixture
def listener():
    """A TCP socket listening on an ephemeral localhost port."""
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.fixture
def closed_port() -> int:
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


class SlowExecutor:
    """Executor answering each command after its own delay."""

    def __init__(self, answers: dict[str, tuple[float, int]]) -> None:
        self._answers = answers

    def run(self, cmd: str, args: list[str], opts: ExecOpts | None = None) -> ExecResult:
        delay, exit_code = self._answers[cmd]
        time.sleep(delay)
        return ExecResult(cmd, "", exit_code)


def _transport(status: int) -> httpx.MockTransport:
    return httpx.MockTransport(lambda request: httpx.Response(status))


class TestParseCommand:
    def test_splits_on_whitespace(self) -> None:
        assert parse_command("pg_isready  -h localhost") == ["pg_isready", "-h", "localhost"]

    def test_groups_quoted_runs(self) -> None:
        assert parse_command('echo "hello world" done') == ["echo", "hello world", "done"]

    def test_unterminated_quote_runs_to_end(self) -> None:
        assert parse_command('echo "a b') == ["echo", "a b"]

    def test_empty(self) -> None:
        assert parse_command("   ") == []

    def test_mongo_eval(self) -> None:
        parts = parse_command("mongosh --eval \"db.adminCommand('ping')\"")
        assert parts == ["mongosh", "--eval", "db.adminCommand('ping')"]


class TestCommandCheck:
    def test_exit_zero_is_healthy(self, executor) -> None:
        executor.on(["redis-cli", "ping"], "PONG\n")
        result = HealthChecker(executor).check_command("redis-cli ping", 3.0)
        assert result.healthy
        assert result.error is None
        assert result.metadata["output"] == "PONG\n"
        assert result.metadata["exit_code"] == 0

    def test_nonzero_exit_is_unhealthy(self, executor) -> None:
        executor.on(["pg_isready"], exit_code=2)
        result = HealthChecker(executor).check_command("pg_isready", 5.0)
        assert not result.healthy
        assert result.error == "command exited with code 2"

    def test_launch_error_is_unhealthy(self, executor) -> None:
        result = HealthChecker(executor).check_command("missing-binary", 5.0)
        assert not result.healthy
        assert result.metadata["exit_code"] == -1
        assert "missing-binary" in (result.error or "")

    def test_empty_command(self, executor) -> None:
        result = HealthChecker(executor).check_command("", 5.0)
        assert not result.healthy
        assert result.error == "empty command"
        assert executor.calls == []

    def test_empty_command_still_timed(self, executor, monkeypatch) -> None:
        ticks = itertools.count(10.0, 0.25)
        monkeypatch.setattr(time, "perf_counter", lambda: next(ticks))
        result = HealthChecker(executor).check_command("  ", 5.0)
        assert result.error == "empty command"
        assert result.response_time == 0.25

    def test_timeout_forwarded(self, executor) -> None:
        executor.on(["colima", "status"])
        HealthChecker(executor).check_command("colima status", 30.0)
        assert executor.opts[-1] is not None
        assert executor.opts[-1].timeout == 30.0


class TestHttpCheck:
    def test_expected_status(self, executor) -> None:
        checker = HealthChecker(executor, transport=_transport(200))
        result = checker.check_http("http://localhost:9090/-/healthy", 200, 5.0)
        assert result.healthy
        assert result.metadata["status_code"] == 200

    def test_status_mismatch(self, executor) -> None:
        checker = HealthChecker(executor, transport=_transport(503))
        result = checker.check_http("http://localhost:8200/v1/sys/health", 200, 5.0)
        assert not result.healthy
        assert result.error == "unexpected status code: got 503, expected 200"

    def test_exact_match_required(self, executor) -> None:
        checker = HealthChecker(executor, transport=_transport(204))
        assert not checker.check_http("http://localhost", 200, 5.0).healthy

    def test_network_error(self, executor) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        checker = HealthChecker(executor, transport=httpx.MockTransport(refuse))
        result = checker.check_http("http://localhost:2375/_ping", 200, 5.0)
        assert not result.healthy
        assert (result.error or "").startswith("HTTP request failed:")


class TestTcpCheck:
    def test_open_port(self, executor, listener: int) -> None:
        result = HealthChecker(executor).check_tcp("127.0.0.1", listener, 2.0)
        assert result.healthy
        assert result.metadata == {"host": "127.0.0.1", "port": listener}

    def test_closed_port(self, executor, closed_port: int) -> None:
        result = HealthChecker(executor).check_tcp("127.0.0.1", closed_port, 2.0)
        assert not result.healthy
        assert (result.error or "").startswith("TCP connection failed:")


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX") or sys.platform == "win32", reason="unix only")
class TestSocketCheck:
    def test_listening_socket(self, executor, tmp_path) -> None:
        path = str(tmp_path / "s.sock")
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        server.bind(path)
        server.listen(1)
        try:
            assert HealthChecker(executor).check_socket(path, 2.0).healthy
        finally:
            server.close()

    def test_missing_socket(self, executor, tmp_path) -> None:
        result = HealthChecker(executor).check_socket(str(tmp_path / "none.sock"), 2.0)
        assert not result.healthy
        assert (result.error or "").startswith("socket connection failed:")


class TestDispatch:
    def test_command_wins_over_http(self, executor) -> None:
        executor.on(["true"])
        checker = HealthChecker(executor, transport=_transport(500))
        config = HealthCheckConfig(command="true", http_endpoint="http://localhost")
        assert checker.check_config(config).healthy

    def test_http_before_tcp(self, executor, closed_port: int) -> None:
        checker = HealthChecker(executor, transport=_transport(200))
        config = HealthCheckConfig(
            http_endpoint="http://localhost", tcp_host="127.0.0.1", tcp_port=closed_port
        )
        assert checker.check_config(config).healthy

    def test_tcp_needs_host_and_port(self, executor) -> None:
        config = HealthCheckConfig(tcp_host="127.0.0.1")
        result = HealthChecker(executor).check_config(config)
        assert not result.healthy
        assert result.error == "no valid health check method configured"

    def test_dependency_command(self, executor) -> None:
        executor.on(["docker", "version"])
        check = DependencyHealthCheck(type=HealthCheckType.COMMAND, command="docker version")
        assert HealthChecker(executor).check_dependency(check).healthy

    def test_dependency_http_expects_200(self, executor) -> None:
        checker = HealthChecker(executor, transport=_transport(200))
        check = DependencyHealthCheck(type=HealthCheckType.HTTP, url="http://localhost:8080")
        assert checker.check_dependency(check).healthy

    def test_dependency_tcp_targets_localhost(self, executor, listener: int) -> None:
        check = DependencyHealthCheck(type=HealthCheckType.TCP, port=listener)
        result = HealthChecker(executor).check_dependency(check)
        assert result.healthy
        assert result.metadata["host"] == "localhost"


class TestCheckMultiple:
    def test_results_keyed_by_service(self, executor) -> None:
        executor.on(["redis-cli", "ping"], "PONG")
        executor.on(["pg_isready"], exit_code=2)
        checks = [
            HealthCheck(
                service_name="redis", type=HealthCheckType.COMMAND, command="redis-cli ping"
            ),
            HealthCheck(
                service_name="postgres", type=HealthCheckType.COMMAND, command="pg_isready"
            ),
        ]
        results = HealthChecker(executor, max_workers=2).check_multiple(checks)
        assert set(results) == {"redis", "postgres"}
        assert results["redis"].healthy
        assert not results["postgres"].healthy

    def test_mixed_latency_results_stay_attributed(self) -> None:
        delays = [0.2, 0.0, 0.1, 0.05, 0.15, 0.0, 0.25]
        executor = SlowExecutor({f"check-{i}": (d, i % 2) for i, d in enumerate(delays)})
        checks = [
            HealthCheck(
                service_name=f"svc-{i}", type=HealthCheckType.COMMAND, command=f"check-{i}"
            )
            for i in range(len(delays))
        ]
        results = HealthChecker(executor, max_workers=4).check_multiple(checks)
        assert len(results) == len(delays)
        for i in range(len(delays)):
            result = results[f"svc-{i}"]
            assert result.metadata["command"] == f"check-{i}"
            assert result.metadata["output"] == f"check-{i}"
            assert result.healthy is (i % 2 == 0)

    def test_empty(self, executor) -> None:
        assert HealthChecker(executor).check_multiple([]) == {}

    def test_socket_type_is_unsupported_in_batch(self, executor) -> None:
        checks = [HealthCheck(service_name="x", type=HealthCheckType.SOCKET)]
        result = HealthChecker(executor).check_multiple(checks)["x"]
        assert not result.healthy
        assert "unsupported" in (result.error or "")
