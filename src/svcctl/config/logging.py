"""Log routing for svcctl.

Logs go to stderr so stdout stays reserved for command results, which
scripts parse under ``--json``. ``svcctl`` loggers are WARNING by default
and DEBUG under ``--verbose``, where they report each strategy decision
(the backend chosen, a start skipped because the service already runs,
a fallback after a failed variant). Both structlog loggers and the
stdlib loggers most modules use end up in the same formatter:

- Human (default): short-timestamp console lines, colored on a TTY.
- JSON (``--log-json``): one object per line with an ISO timestamp.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Libraries that log every HTTP health request at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore")


def _shared_processors(log_json: bool) -> list[structlog.types.Processor]:
    timestamp = "iso" if log_json else "%H:%M:%S"
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=timestamp, utc=log_json),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route svcctl and library logs to stderr.

    Safe to call more than once; the root handler is replaced each time.

    Args:
        verbose: Show svcctl DEBUG records. Otherwise WARNING and above.
        log_json: Emit JSON lines instead of console lines.
    """
    shared = _shared_processors(log_json)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("svcctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
