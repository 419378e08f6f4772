"""Tests for the format_result dispatcher and OutputSettings."""

import json

from svcctl.output.formatters import OutputSettings, format_result
from svcctl.services.result import ServiceError, ServiceResult


def _ok(op: str = "status", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "status", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERROR", message=msg))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResult:
    def test_json_mode_returns_valid_json(self) -> None:
        settings = OutputSettings(json_output=True)
        data = json.loads(format_result(_ok("start", service="redis"), settings=settings))
        assert data["ok"] is True
        assert data["op"] == "start"
        assert data["data"]["service"] == "redis"

    def test_json_mode_error(self) -> None:
        settings = OutputSettings(json_output=True)
        data = json.loads(format_result(_err(msg="boom"), settings=settings))
        assert data["ok"] is False
        assert data["error"]["message"] == "boom"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_ok(), settings=settings))["op"] == "status"

    def test_quiet_mode(self) -> None:
        settings = OutputSettings(quiet=True)
        assert format_result(_ok("find_service", items=["redis"]), settings=settings) == "redis"

    def test_default_is_rich(self) -> None:
        output = format_result(_ok("stop", service="redis", strategy="systemd"))
        assert "OK" in output
        assert "service: redis" in output
