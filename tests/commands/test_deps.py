"""Tests for the deps command group."""

from __future__ import annotations

import json

from click.testing import CliRunner

from svcctl.cli import cli


class TestDeps:
    def test_detect_podman_machine(self, cli_runner: CliRunner, fake_host) -> None:
        fake_host.on(
            ["podman", "machine", "list"], "podman-machine-default*  Currently running"
        )
        result = cli_runner.invoke(cli, ["--json", "deps", "detect", "podman"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        assert data["service"] == "podman"
        assert [e["target_service"] for e in data["items"]] == ["podman-machine"]

    def test_detect_none(self, cli_runner: CliRunner, fake_host) -> None:
        result = cli_runner.invoke(cli, ["deps", "detect", "webapp"])
        assert result.exit_code == 0
        assert "webapp has no dependencies." in result.output

    def test_order_none(self, cli_runner: CliRunner, fake_host) -> None:
        result = cli_runner.invoke(cli, ["deps", "order", "webapp"])
        assert result.exit_code == 0
        assert "webapp has no prerequisites." in result.output

    def test_chain_json(self, cli_runner: CliRunner, fake_host) -> None:
        result = cli_runner.invoke(cli, ["--json", "deps", "chain", "webapp"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["items"] == []

    def test_validate(self, cli_runner: CliRunner, fake_host) -> None:
        result = cli_runner.invoke(cli, ["deps", "validate", "webapp"])
        assert result.exit_code == 0
        assert "valid: yes" in result.output

    def test_config_unknown(self, cli_runner: CliRunner, fake_host) -> None:
        result = cli_runner.invoke(cli, ["--json", "deps", "config", "webapp"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_DEPENDENCY"

    def test_config_default_colima(self, cli_runner: CliRunner, fake_host) -> None:
        fake_host.on(["colima", "status"], exit_code=1)
        result = cli_runner.invoke(cli, ["deps", "config", "colima"])
        assert result.exit_code == 0
        assert "source: default" in result.output
        assert "start: colima start" in result.output
