"""Exception taxonomy for the core.

The service layer maps each class to a ``ServiceError.code``:

* capability-absent -> ``CAPABILITY_ABSENT`` (never retried)
* transient command failure -> ``COMMAND_FAILED``
* detection failure -> ``DETECTION_FAILED``
* structural problems -> ``CIRCULAR_DEPENDENCY`` / ``INVALID_DEPENDENCY``
* waits that run out -> ``HEALTH_TIMEOUT``
"""

from __future__ import annotations


class SvcctlError(Exception):
    """Base class for all svcctl errors."""

    code = "ERROR"


class ExecutorError(SvcctlError):
    """A command could not be launched or did not finish in time."""

    code = "EXEC_FAILED"

    def __init__(self, command: str, message: str, *, timed_out: bool = False) -> None:
        super().__init__(f"{command}: {message}")
        self.command = command
        self.timed_out = timed_out


class StrategyError(SvcctlError):
    """A lifecycle strategy could not complete an operation."""

    code = "COMMAND_FAILED"


class CommandFailedError(StrategyError):
    """A management command ran but exited nonzero."""

    def __init__(self, message: str, *, exit_code: int, stderr: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class CapabilityAbsentError(StrategyError):
    """The chosen backend is structurally unable to perform the operation."""

    code = "CAPABILITY_ABSENT"


class ServiceDetectionError(SvcctlError):
    """Detection of a service failed on a platform with no fallback left."""

    code = "DETECTION_FAILED"

    def __init__(
        self,
        service_name: str,
        platform: str,
        cause: BaseException,
        suggestion: str = "",
    ) -> None:
        msg = f"failed to detect service {service_name} on {platform}: {cause}"
        if suggestion:
            msg += f". Suggestion: {suggestion}"
        super().__init__(msg)
        self.service_name = service_name
        self.platform = platform
        self.cause = cause
        self.suggestion = suggestion


class DependencyError(SvcctlError):
    """Base class for dependency graph errors."""

    code = "INVALID_DEPENDENCY"


class CircularDependencyError(DependencyError):
    """A service was re-entered while its own chain was being expanded."""

    code = "CIRCULAR_DEPENDENCY"

    def __init__(self, service: str) -> None:
        super().__init__(f"circular dependency detected: {service}")
        self.service = service


class DependencyConfigError(DependencyError):
    """A dependency edge is structurally invalid (e.g. empty required target)."""


class HealthTimeoutError(SvcctlError):
    """A service or dependency did not become healthy before the deadline."""

    code = "HEALTH_TIMEOUT"
