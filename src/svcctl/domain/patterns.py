"""Stderr classification for semantic no-ops.

Many native facilities exit nonzero when asked to start something already
running (or stop something already stopped). These helpers decide, per
service family, whether such a failure actually means the desired state
already holds. Matching is case-insensitive substring search.
"""

from __future__ import annotations

_ALREADY_RUNNING: dict[str, tuple[str, ...]] = {
    "colima": ("vm is already running", "already running", "vm already exists"),
    "docker": ("docker is already running", "daemon is already running"),
}
_ALREADY_RUNNING_GENERIC = (
    "already running",
    "already started",
    "service is running",
    "already active",
)

_ALREADY_STOPPED: dict[str, tuple[str, ...]] = {
    "colima": ("vm is not running", "already stopped", "no vm found"),
    "docker": ("docker is not running", "daemon not running"),
}
_ALREADY_STOPPED_GENERIC = (
    "already stopped",
    "not running",
    "service is not running",
    "already inactive",
)


def _matches(stderr: str, phrases: tuple[str, ...]) -> bool:
    lowered = stderr.lower()
    return any(p in lowered for p in phrases)


def is_already_running_error(service_name: str, stderr: str) -> bool:
    """Return True if *stderr* says the service is already running."""
    phrases = _ALREADY_RUNNING.get(service_name, _ALREADY_RUNNING_GENERIC)
    return _matches(stderr, phrases)


def is_already_stopped_error(service_name: str, stderr: str) -> bool:
    """Return True if *stderr* says the service is already stopped."""
    phrases = _ALREADY_STOPPED.get(service_name, _ALREADY_STOPPED_GENERIC)
    return _matches(stderr, phrases)


def describe_status_output(service_name: str, stdout: str) -> str:
    """Service-specific suffix for a successful status command's details."""
    if service_name == "colima":
        if "colima is not running" in stdout:
            return " (Colima VM is not running)"
        if "colima is running" in stdout:
            return " (Colima VM is running)"
        return " (Colima status checked)"
    if service_name == "docker":
        if "Server:" in stdout:
            return " (Docker daemon is responding)"
        return " (Docker status checked)"
    return " (Service status checked)"
