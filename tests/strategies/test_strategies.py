"""Tests for the concrete lifecycle strategies."""

from __future__ import annotations

import json

import pytest

from svcctl.domain.errors import (
    CapabilityAbsentError,
    CommandFailedError,
    ExecutorError,
    StrategyError,
)
from svcctl.domain.models import CustomCommands
from svcctl.domain.types import ManagementStrategy
from svcctl.infrastructure.executor import ExecResult, format_command
from svcctl.strategies.brew import BrewServicesStrategy, parse_brew_services
from svcctl.strategies.direct import PROCESS_HEALTH_DETAILS, DirectCommandStrategy
from svcctl.strategies.launchd import LaunchdStrategy, parse_launchctl_pid, plist_paths
from svcctl.strategies.process import ProcessOnlyStrategy
from svcctl.strategies.systemd import SystemdStrategy, parse_main_pid
from svcctl.strategies.windows import (
    WindowsServiceStrategy,
    parse_service_json,
    powershell,
    ps_quote,
)

COLIMA = CustomCommands(
    start=["colima", "start"],
    stop=["colima", "stop"],
    restart=["colima", "restart"],
    status=["colima", "status"],
)


def _brew_list(**statuses: str) -> str:
    return json.dumps([{"name": name, "status": status} for name, status in statuses.items()])


class TestBrewServices:
    def test_parse(self) -> None:
        assert parse_brew_services(_brew_list(redis="started", mysql="none")) == {
            "redis": "started",
            "mysql": "none",
        }

    def test_parse_rejects_non_array(self) -> None:
        with pytest.raises(ValueError):
            parse_brew_services('{"name": "x"}')

    def test_start_skipped_when_started(self, executor) -> None:
        executor.on(["brew", "services", "list", "--json"], _brew_list(redis="started"))
        BrewServicesStrategy(executor).start("redis")
        assert not executor.was_called(["brew", "services", "start", "redis"])

    def test_start_runs_when_stopped(self, executor) -> None:
        executor.on(["brew", "services", "list", "--json"], _brew_list(redis="none"))
        executor.on(["brew", "services", "start", "redis"])
        BrewServicesStrategy(executor).start("redis")
        assert executor.was_called(["brew", "services", "start", "redis"])

    def test_stop_skipped_when_stopped(self, executor) -> None:
        executor.on(["brew", "services", "list", "--json"], _brew_list(redis="stopped"))
        BrewServicesStrategy(executor).stop("redis")
        assert not executor.was_called(["brew", "services", "stop", "redis"])

    def test_failed_state_check_does_not_block(self, executor) -> None:
        executor.on(["brew", "services", "start", "redis"])
        BrewServicesStrategy(executor).start("redis")
        assert executor.was_called(["brew", "services", "start", "redis"])

    def test_already_running_stderr_is_success(self, executor) -> None:
        executor.on(
            ["brew", "services", "start", "redis"],
            stderr="Service `redis` already started",
            exit_code=1,
        )
        BrewServicesStrategy(executor).start("redis")

    def test_other_failure_raises(self, executor) -> None:
        executor.on(["brew", "services", "start", "redis"], stderr="Formula not found", exit_code=1)
        with pytest.raises(CommandFailedError) as excinfo:
            BrewServicesStrategy(executor).start("redis")
        assert excinfo.value.exit_code == 1
        assert excinfo.value.code == "COMMAND_FAILED"
        assert "Formula not found" in str(excinfo.value)

    def test_native_restart(self, executor) -> None:
        executor.on(["brew", "services", "restart", "redis"])
        BrewServicesStrategy(executor).restart("redis")
        assert executor.call_count(["brew", "services", "restart", "redis"]) == 1

    def test_health(self, executor) -> None:
        executor.on(["brew", "services", "list", "--json"], _brew_list(redis="started"))
        info = BrewServicesStrategy(executor).health_check("redis")
        assert info.healthy
        assert info.strategy is ManagementStrategy.BREW_SERVICES

    def test_health_on_check_failure(self, executor) -> None:
        info = BrewServicesStrategy(executor).health_check("redis")
        assert not info.healthy
        assert "brew services" in info.details

    def test_status_enabled_mirrors_running(self, executor) -> None:
        executor.on(["brew", "services", "list", "--json"], _brew_list(redis="started"))
        status = BrewServicesStrategy(executor).status_check("redis")
        assert status.running and status.enabled

    def test_status_raises_when_unknown(self, executor) -> None:
        with pytest.raises(StrategyError):
            BrewServicesStrategy(executor).status_check("redis")


class TestDirectCommand:
    def test_start_uses_configured_command(self, executor) -> None:
        executor.on(["colima", "status"], exit_code=1)
        executor.on(["colima", "start"])
        DirectCommandStrategy(executor, COLIMA).start("colima")
        assert executor.was_called(["colima", "start"])

    def test_start_skipped_when_running(self, executor) -> None:
        executor.on(["colima", "status"], "colima is running")
        DirectCommandStrategy(executor, COLIMA).start("colima")
        assert not executor.was_called(["colima", "start"])

    def test_colima_already_running_phrase(self, executor) -> None:
        executor.on(["colima", "status"], exit_code=1)
        executor.on(["colima", "start"], stderr="FATA vm is already running", exit_code=1)
        DirectCommandStrategy(executor, COLIMA).start("colima")

    def test_no_command_configured(self, executor) -> None:
        with pytest.raises(StrategyError, match="no start command configured"):
            DirectCommandStrategy(executor).start("myapp")

    def test_launch_failure(self, executor) -> None:
        executor.on(["colima", "status"], exit_code=1)
        with pytest.raises(StrategyError, match="failed to start service colima"):
            DirectCommandStrategy(executor, COLIMA).start("colima")

    def test_restart_decomposes_without_command(self, executor) -> None:
        commands = CustomCommands(start=["app", "up"], stop=["app", "down"])
        executor.on(["pgrep", "-f", "app"], "123\n")
        executor.on(["app", "down"])
        executor.on(["app", "up"])
        sleeps: list[float] = []
        DirectCommandStrategy(
            executor, commands, restart_pause=0.5, sleep=sleeps.append
        ).restart("app")
        assert executor.was_called(["app", "down"])
        assert not executor.was_called(["app", "up"])
        assert sleeps == [0.5]

    def test_is_running_falls_back_to_pgrep(self, executor) -> None:
        executor.on(["pgrep", "-f", "myapp"], "42\n")
        assert DirectCommandStrategy(executor).is_running("myapp")

    def test_is_running_status_launch_error(self, executor) -> None:
        with pytest.raises(StrategyError, match="failed to check service colima status"):
            DirectCommandStrategy(executor, COLIMA).is_running("colima")

    def test_health_without_status_command(self, executor) -> None:
        info = DirectCommandStrategy(executor).health_check("myapp")
        assert not info.healthy
        assert info.details == PROCESS_HEALTH_DETAILS

    def test_health_colima_running(self, executor) -> None:
        executor.on(["colima", "status"], "colima is running")
        info = DirectCommandStrategy(executor, COLIMA).health_check("colima")
        assert info.healthy
        assert info.details == "Status command exit code: 0 (Colima VM is running)"

    def test_health_failure_includes_stderr(self, executor) -> None:
        executor.on(["colima", "status"], stderr="colima is not running", exit_code=1)
        info = DirectCommandStrategy(executor, COLIMA).health_check("colima")
        assert not info.healthy
        assert info.details == "Status command exit code: 1, stderr: colima is not running"

    def test_health_launch_error(self, executor) -> None:
        info = DirectCommandStrategy(executor, COLIMA).health_check("colima")
        assert not info.healthy
        assert info.details.startswith("Status command failed:")


class TestSystemd:
    def test_parse_main_pid(self) -> None:
        assert parse_main_pid("MainPID=1234\n") == "1234"
        assert parse_main_pid("MainPID=0") == ""
        assert parse_main_pid("garbage") == ""

    def test_status(self, executor) -> None:
        executor.on(["systemctl", "is-active", "nginx"], "active\n")
        executor.on(["systemctl", "is-enabled", "nginx"], "enabled\n")
        executor.on(["systemctl", "show", "nginx", "--property=MainPID"], "MainPID=811\n")
        status = SystemdStrategy(executor).status_check("nginx")
        assert status.running and status.enabled
        assert status.process_id == "811"
        assert status.details == "Systemd service status"

    def test_inactive_exit_code_is_not_an_error(self, executor) -> None:
        executor.on(["systemctl", "is-active", "nginx"], "inactive\n", exit_code=3)
        info = SystemdStrategy(executor).health_check("nginx")
        assert not info.healthy
        assert info.details == "Service state in systemd: inactive"

    def test_restart_is_native(self, executor) -> None:
        executor.on(["systemctl", "restart", "nginx"])
        SystemdStrategy(executor).restart("nginx")
        assert executor.calls == [("systemctl", ("restart", "nginx"))]

    def test_stop_tolerates_inactive(self, executor) -> None:
        executor.on(["systemctl", "is-active", "nginx"], "inactive\n", exit_code=3)
        SystemdStrategy(executor).stop("nginx")
        assert not executor.was_called(["systemctl", "stop", "nginx"])


class TestLaunchd:
    def test_parse_dictionary_form(self) -> None:
        out = '{\n\t"Label" = "redis";\n\t"PID" = 501;\n};'
        assert parse_launchctl_pid(out, "redis") == "501"

    def test_parse_tabular_form(self) -> None:
        out = "PID\tStatus\tLabel\n-\t0\tcom.apple.foo\n733\t0\thomebrew.mxcl.redis\n"
        assert parse_launchctl_pid(out, "homebrew.mxcl.redis") == "733"
        assert parse_launchctl_pid(out, "com.apple.foo") == ""

    def test_plist_paths_system_first(self) -> None:
        paths = plist_paths("redis")
        assert paths[0] == "/Library/LaunchDaemons/redis.plist"
        assert paths[1].endswith("Library/LaunchAgents/redis.plist")

    def test_start_tries_user_agent_after_launch_error(self, executor) -> None:
        user_plist = plist_paths("redis")[1]
        executor.on(["launchctl", "list", "redis"], exit_code=113)
        executor.fail(["launchctl", "load", "-w", "/Library/LaunchDaemons/redis.plist"])
        executor.on(["launchctl", "load", "-w", user_plist])
        LaunchdStrategy(executor).start("redis")
        assert executor.was_called(["launchctl", "load", "-w", user_plist])

    def test_health_loaded_not_running(self, executor) -> None:
        executor.on(["launchctl", "list", "redis"], '{\n\t"Label" = "redis";\n};')
        info = LaunchdStrategy(executor).health_check("redis")
        assert not info.healthy
        assert info.details == "Service is loaded but not running in launchd"

    def test_status_not_found(self, executor) -> None:
        executor.on(["launchctl", "list", "redis"], exit_code=113)
        status = LaunchdStrategy(executor).status_check("redis")
        assert not status.running and not status.enabled

    def test_restart_decomposes(self, executor) -> None:
        sleeps: list[float] = []
        executor.on(["launchctl", "list", "redis"], '"PID" = 12;')
        for path in plist_paths("redis"):
            executor.on(["launchctl", "unload", "-w", path])
            executor.on(["launchctl", "load", "-w", path])
        LaunchdStrategy(executor, sleep=sleeps.append).restart("redis")
        assert sleeps == [2.0]


class TestWindowsService:
    def test_quote(self) -> None:
        assert ps_quote("it's") == "'it''s'"

    def test_parse_numeric_and_string_enums(self) -> None:
        assert parse_service_json('{"Status": 4, "StartType": 2}') == ("Running", "Automatic")
        assert parse_service_json('[{"Status": "Stopped", "StartType": "Manual"}]') == (
            "Stopped",
            "Manual",
        )

    def test_status(self, executor) -> None:
        script = (
            "Get-Service -Name 'Spooler' | Select-Object Status, StartType | ConvertTo-Json"
        )
        executor.on(powershell(script), '{"Status": 4, "StartType": 2}')
        status = WindowsServiceStrategy(executor).status_check("Spooler")
        assert status.running and status.enabled

    def test_missing_service_health(self, executor) -> None:
        script = "Get-Service -Name 'nope' | Select-Object Status, StartType | ConvertTo-Json"
        executor.on(powershell(script), exit_code=1)
        info = WindowsServiceStrategy(executor).health_check("nope")
        assert not info.healthy
        assert info.details == "Service not found"


class TestProcessOnly:
    @pytest.mark.parametrize("op", ["start", "stop", "restart"])
    def test_mutations_refused(self, executor, op: str) -> None:
        with pytest.raises(CapabilityAbsentError) as excinfo:
            getattr(ProcessOnlyStrategy(executor), op)("myapp")
        assert excinfo.value.code == "CAPABILITY_ABSENT"
        assert executor.calls == []

    def test_status_reports_first_pid(self, executor) -> None:
        executor.on(["pgrep", "-f", "myapp"], "10\n11\n")
        status = ProcessOnlyStrategy(executor).status_check("myapp")
        assert status.running
        assert status.process_id == "10"

    def test_health(self, executor) -> None:
        executor.on(["pgrep", "-f", "myapp"], "10\n11\n")
        info = ProcessOnlyStrategy(executor).health_check("myapp")
        assert info.details == "Process found (PIDs: 10 11)"

    def test_no_process(self, executor) -> None:
        executor.on(["pgrep", "-f", "myapp"], exit_code=1)
        assert not ProcessOnlyStrategy(executor).is_running("myapp")


class ServiceHost:
    """Executor simulating one service whose state the commands change."""

    def __init__(self, status: list[str], start: list[str], stop: list[str]) -> None:
        self.running = False
        self.calls: list[list[str]] = []
        self._status, self._start, self._stop = status, start, stop

    def run(self, cmd: str, args: list[str], opts=None) -> ExecResult:
        argv = [cmd, *args]
        self.calls.append(argv)
        if argv == self._status:
            if self.running:
                return ExecResult("active", "", 0)
            return ExecResult("inactive", "", 3)
        if argv == self._start:
            self.running = True
            return ExecResult("", "", 0)
        if argv == self._stop:
            self.running = False
            return ExecResult("", "", 0)
        raise ExecutorError(format_command(cmd, args), "executable file not found")

    def count(self, argv: list[str]) -> int:
        return self.calls.count(argv)


class TestRepeatedMutations:
    def test_systemd_start_twice_runs_start_once(self) -> None:
        host = ServiceHost(
            ["systemctl", "is-active", "nginx"],
            ["systemctl", "start", "nginx"],
            ["systemctl", "stop", "nginx"],
        )
        strategy = SystemdStrategy(host)
        strategy.start("nginx")
        strategy.start("nginx")
        assert host.count(["systemctl", "start", "nginx"]) == 1
        assert host.count(["systemctl", "is-active", "nginx"]) == 2

    def test_direct_start_twice_runs_start_once(self) -> None:
        host = ServiceHost(["colima", "status"], ["colima", "start"], ["colima", "stop"])
        strategy = DirectCommandStrategy(host, COLIMA)
        strategy.start("colima")
        strategy.start("colima")
        assert host.count(["colima", "start"]) == 1

    def test_stop_twice_runs_stop_once(self) -> None:
        host = ServiceHost(["colima", "status"], ["colima", "start"], ["colima", "stop"])
        host.running = True
        strategy = DirectCommandStrategy(host, COLIMA)
        strategy.stop("colima")
        strategy.stop("colima")
        assert host.count(["colima", "stop"]) == 1
