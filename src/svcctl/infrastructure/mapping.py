"""Bidirectional package <-> service registry with default health checks.

One package may provide several services (``postgresql`` provides
``postgres`` and ``postgresql``); each service belongs to one package.
Reads hand out copies so callers can never mutate the registry.
"""

from __future__ import annotations

import threading

from svcctl.domain.models import HealthCheckConfig

_DEFAULT_PACKAGES: dict[str, list[str]] = {
    # Container runtimes
    "colima": ["colima"],
    "docker": ["docker", "docker-desktop"],
    "podman": ["podman"],
    "lima": ["lima"],
    # Databases
    "postgresql": ["postgres", "postgresql"],
    "mysql": ["mysqld", "mysql"],
    "redis": ["redis-server", "redis"],
    "mongodb": ["mongod", "mongodb"],
    "sqlite": ["sqlite3"],
    "cassandra": ["cassandra"],
    "elasticsearch": ["elasticsearch"],
    # Web servers
    "nginx": ["nginx"],
    "apache2": ["apache2", "httpd"],
    "caddy": ["caddy"],
    "traefik": ["traefik"],
    # Message queues
    "rabbitmq": ["rabbitmq-server"],
    "kafka": ["kafka"],
    "nats": ["nats-server"],
    # Monitoring
    "prometheus": ["prometheus"],
    "grafana": ["grafana-server"],
    "jaeger": ["jaeger"],
    "zipkin": ["zipkin"],
    # Language runtimes
    "node": ["node"],
    "python": ["python", "python3"],
    "java": ["java"],
    "golang": ["go"],
    # Version control
    "git": ["git"],
    "mercurial": ["hg"],
    # Search
    "solr": ["solr"],
    "opensearch": ["opensearch"],
    # Caches
    "memcached": ["memcached"],
    "hazelcast": ["hazelcast"],
    # API gateways
    "kong": ["kong"],
    "envoy": ["envoy"],
    # Service mesh
    "istio": ["istio-proxy", "pilot-discovery"],
    "consul": ["consul"],
    "vault": ["vault"],
    # Build tools
    "jenkins": ["jenkins"],
    "gitlab-runner": ["gitlab-runner"],
    # File systems
    "minio": ["minio"],
    "samba": ["smbd", "nmbd"],
}

_PG_READY = HealthCheckConfig(command="pg_isready -h localhost -p 5432", timeout=5.0)
_MYSQL_PING = HealthCheckConfig(command="mysqladmin ping -h localhost", timeout=5.0)
_REDIS_PING = HealthCheckConfig(command="redis-cli ping", timeout=3.0)
_MONGO_PING = HealthCheckConfig(command="mongosh --eval \"db.adminCommand('ping')\"", timeout=5.0)


def _http(endpoint: str, timeout: float = 5.0) -> HealthCheckConfig:
    return HealthCheckConfig(http_endpoint=endpoint, expected_status=200, timeout=timeout)


_DEFAULT_HEALTH_CHECKS: dict[str, HealthCheckConfig] = {
    "colima": HealthCheckConfig(command="colima status", timeout=10.0),
    "docker": _http("http://localhost:2375/_ping"),
    "postgres": _PG_READY,
    "postgresql": _PG_READY,
    "mysql": _MYSQL_PING,
    "mysqld": _MYSQL_PING,
    "redis": _REDIS_PING,
    "redis-server": _REDIS_PING,
    "nginx": _http("http://localhost:80"),
    "elasticsearch": _http("http://localhost:9200/_health", timeout=10.0),
    "prometheus": _http("http://localhost:9090/-/healthy"),
    "grafana-server": _http("http://localhost:3000/api/health"),
    "mongodb": _MONGO_PING,
    "mongod": _MONGO_PING,
    "rabbitmq-server": _http("http://localhost:15672/api/overview"),
    "consul": _http("http://localhost:8500/v1/status/leader"),
    "vault": _http("http://localhost:8200/v1/sys/health"),
}


class PackageServiceMapping:
    """Thread-safe registry mapping packages to the services they provide."""

    def __init__(
        self,
        package_to_services: dict[str, list[str]] | None = None,
        health_checks: dict[str, HealthCheckConfig] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._package_to_services: dict[str, list[str]] = {}
        self._service_to_package: dict[str, str] = {}
        self._health_checks: dict[str, HealthCheckConfig] = dict(health_checks or {})
        for package, services in (package_to_services or {}).items():
            self.add_mapping(package, services)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_services_for_package(self, package_name: str) -> list[str]:
        """Services provided by *package_name*; empty if unknown."""
        with self._lock:
            return list(self._package_to_services.get(package_name, []))

    def get_package_for_service(self, service_name: str) -> str | None:
        with self._lock:
            return self._service_to_package.get(service_name)

    def get_default_health_check(self, service_name: str) -> HealthCheckConfig | None:
        with self._lock:
            config = self._health_checks.get(service_name)
        return config.model_copy() if config is not None else None

    def find_service_by_name(self, query: str) -> list[str]:
        """Case-insensitive lookup: exact matches if any, else substring matches."""
        needle = query.lower()
        with self._lock:
            services = sorted(self._service_to_package)
        exact = [s for s in services if s.lower() == needle]
        if exact:
            return exact
        return [s for s in services if needle in s.lower()]

    def all_services(self) -> list[str]:
        with self._lock:
            return sorted(self._service_to_package)

    def all_packages(self) -> list[str]:
        with self._lock:
            return sorted(self._package_to_services)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_mapping(self, package_name: str, service_names: list[str]) -> None:
        """Register *package_name* as providing *service_names*, replacing any prior entry."""
        with self._lock:
            self._drop_reverse_entries(package_name)
            for service in service_names:
                self._release_service(service, package_name)
            self._package_to_services[package_name] = list(service_names)
            for service in service_names:
                self._service_to_package[service] = package_name

    def remove_mapping(self, package_name: str) -> None:
        with self._lock:
            self._drop_reverse_entries(package_name)
            self._package_to_services.pop(package_name, None)

    def set_default_health_check(self, service_name: str, config: HealthCheckConfig) -> None:
        with self._lock:
            self._health_checks[service_name] = config

    def _release_service(self, service: str, new_owner: str) -> None:
        """Remove *service* from the forward list of a different previous owner."""
        owner = self._service_to_package.get(service)
        if owner is None or owner == new_owner:
            return
        remaining = [s for s in self._package_to_services.get(owner, []) if s != service]
        if remaining:
            self._package_to_services[owner] = remaining
        else:
            self._package_to_services.pop(owner, None)

    def _drop_reverse_entries(self, package_name: str) -> None:
        for service in self._package_to_services.get(package_name, []):
            # Only drop entries still owned by this package.
            if self._service_to_package.get(service) == package_name:
                del self._service_to_package[service]


def default_mapping() -> PackageServiceMapping:
    """Return a fresh mapping seeded with the well-known services."""
    return PackageServiceMapping(_DEFAULT_PACKAGES, _DEFAULT_HEALTH_CHECKS)
