"""DetectionService: platform detector queries, health checks and the mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from svcctl.detectors.base import NO_HEALTH_CONFIG
from svcctl.domain.errors import SvcctlError
from svcctl.domain.models import HealthCheck, HealthResult
from svcctl.services.base import BaseService
from svcctl.services.result import ServiceResult
from svcctl.services.telemetry import note, traced

if TYPE_CHECKING:
    from svcctl.domain.models import HealthCheckConfig


def _health_payload(service_name: str, result: HealthResult) -> dict[str, Any]:
    return {
        "service": service_name,
        "healthy": result.healthy,
        "response_time": round(result.response_time, 4),
        "error": result.error,
        "metadata": result.metadata,
    }


def _batch_entry(service_name: str, config: HealthCheckConfig) -> HealthCheck | None:
    kind = config.kind
    if kind is None:
        return None
    return HealthCheck(
        service_name=service_name,
        type=kind,
        command=config.command,
        endpoint=config.http_endpoint,
        expected_status=config.expected_status,
        host=config.tcp_host,
        port=config.tcp_port,
        timeout=config.timeout,
    )


class DetectionService(BaseService):
    """Answers questions about services on this host."""

    @traced
    def info(self, service_name: str) -> ServiceResult:
        """Full ``ServiceInfo`` snapshot from the platform detector."""
        try:
            info = self._runtime.detector.get_service_info(service_name)
        except SvcctlError as exc:
            return self._failure("info", exc, service=service_name)
        return ServiceResult(ok=True, op="info", data=info.model_dump(mode="json"))

    @traced
    def list_services(self) -> ServiceResult:
        """Snapshot of every service the mapping knows; unreadable ones are skipped."""
        detector = self._runtime.detector
        services = detector.get_all_services()
        skipped = sorted(set(self._runtime.mapping.all_services()) - services.keys())
        note("skipped", len(skipped))
        items = [services[name].model_dump(mode="json") for name in sorted(services)]
        return ServiceResult(
            ok=True,
            op="list_services",
            data={"count": len(items), "items": items, "platform": str(detector.platform)},
            warnings=[f"could not inspect {name}" for name in skipped],
        )

    @traced
    def check_health(self, service_name: str) -> ServiceResult:
        """Run the configured health check (mapping default or override)."""
        result = self._runtime.detector.check_health(service_name)
        return ServiceResult(
            ok=True, op="check_health", data=_health_payload(service_name, result)
        )

    @traced
    def check_many(self, service_names: list[str]) -> ServiceResult:
        """Check several services concurrently.

        Services without a configured check are reported unhealthy without
        being checked.
        """
        mapping = self._runtime.mapping
        checks: list[HealthCheck] = []
        results: dict[str, HealthResult] = {}
        for name in service_names:
            config = mapping.get_default_health_check(name)
            entry = _batch_entry(name, config) if config is not None else None
            if entry is None:
                results[name] = HealthResult(healthy=False, error=NO_HEALTH_CONFIG)
            else:
                checks.append(entry)

        results.update(self._runtime.health.check_multiple(checks))
        items = [_health_payload(name, results[name]) for name in service_names]
        return ServiceResult(
            ok=True,
            op="check_many",
            data={
                "count": len(items),
                "healthy_count": sum(1 for item in items if item["healthy"]),
                "items": items,
            },
        )

    # ------------------------------------------------------------------
    # Autostart
    # ------------------------------------------------------------------

    @traced
    def enable(self, service_name: str) -> ServiceResult:
        return self._set_startup("enable", service_name, True)

    @traced
    def disable(self, service_name: str) -> ServiceResult:
        return self._set_startup("disable", service_name, False)

    def _set_startup(self, op: str, service_name: str, enabled: bool) -> ServiceResult:
        try:
            self._runtime.detector.set_service_startup(service_name, enabled)
        except SvcctlError as exc:
            return self._failure(op, exc, service=service_name)
        return ServiceResult(ok=True, op=op, data={"service": service_name, "enabled": enabled})

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def services_for_package(self, package_name: str) -> ServiceResult:
        services = self._runtime.mapping.get_services_for_package(package_name)
        return ServiceResult(
            ok=True,
            op="services_for_package",
            data={"package": package_name, "count": len(services), "items": services},
        )

    def package_for_service(self, service_name: str) -> ServiceResult:
        package_name = self._runtime.mapping.get_package_for_service(service_name)
        if package_name is None:
            return self._error(
                "package_for_service",
                "NOT_FOUND",
                f"no package known for service {service_name}",
                service=service_name,
            )
        return ServiceResult(
            ok=True,
            op="package_for_service",
            data={"service": service_name, "package": package_name},
        )

    def find_service(self, query: str) -> ServiceResult:
        matches = self._runtime.mapping.find_service_by_name(query)
        return ServiceResult(
            ok=True,
            op="find_service",
            data={"query": query, "count": len(matches), "items": matches},
        )
