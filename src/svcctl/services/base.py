"""BaseService: abstract foundation for all svcctl services.

Every service receives a :class:`Runtime` at construction time. The runtime
provides the executor, mapping, health checker, strategies, detector and
dependency layer; services turn their answers and exceptions into
``ServiceResult`` values.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from svcctl.domain.errors import SvcctlError
    from svcctl.infrastructure.runtime import Runtime

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class LifecycleService(BaseService):
            def start(self, service_name: str) -> ServiceResult:
                try:
                    ...
                except SvcctlError as exc:
                    return self._failure("start", exc, service=service_name)
    """

    def __init__(self, runtime: Runtime) -> None:
        self._runtime = runtime

    @staticmethod
    def _failure(op: str, exc: SvcctlError, **detail: Any) -> ServiceResult:
        """Map a domain exception onto a failed result carrying its code."""
        logger.debug("%s failed: %s", op, exc)
        return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))

    @staticmethod
    def _error(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail),
        )
