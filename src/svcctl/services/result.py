"""ServiceResult and ServiceError: what every service method returns.

INVARIANT: Service-layer methods never raise domain exceptions. A failed
start, an unreachable backend or a dependency cycle comes back as a result
with ``ok=False`` and a ``ServiceError`` whose ``code`` names the failure
class (``COMMAND_FAILED``, ``CAPABILITY_ABSENT``, ``HEALTH_TIMEOUT``, ...).
The CLI maps that onto exit status and output.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from svcctl.domain.errors import (
    CommandFailedError,
    ExecutorError,
    ServiceDetectionError,
    SvcctlError,
)


class ServiceError(BaseModel):
    """Why an operation failed.

    ``detail`` holds the call context (service, strategy) plus whatever the
    failure itself knows, such as the exit code and stderr of the command
    that failed.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: SvcctlError, **detail: Any) -> ServiceError:
        facts: dict[str, Any] = {}
        if isinstance(exc, CommandFailedError):
            facts = {"exit_code": exc.exit_code}
            if exc.stderr:
                facts["stderr"] = exc.stderr.strip()
        elif isinstance(exc, ExecutorError):
            facts = {"command": exc.command, "timed_out": exc.timed_out}
        elif isinstance(exc, ServiceDetectionError):
            facts = {"platform": exc.platform}
            if exc.suggestion:
                facts["suggestion"] = exc.suggestion
        return cls(code=exc.code, message=str(exc), detail={**detail, **facts})


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"start"``, ``"health"``, ``"order"``, ...).
        data: Operation payload on success, always naming the service.
        warnings: Non-fatal issues, e.g. services a listing could not inspect.
        error: Set when ``ok`` is False.
        meta: The operation trace when running verbose.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
