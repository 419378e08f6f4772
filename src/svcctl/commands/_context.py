"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Runtime initialization and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from svcctl.config.settings import SvcSettings
    from svcctl.infrastructure.runtime import Runtime
    from svcctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The runtime is built on first use so ``--help`` and ``--version``
    never query the host.
    """

    def __init__(self, settings: SvcSettings) -> None:
        self.settings = settings
        self._runtime: Runtime | None = None

        from svcctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from svcctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def runtime(self) -> Runtime:
        """The runtime instance (created lazily on first access)."""
        if self._runtime is None:
            from svcctl.infrastructure.runtime import Runtime

            self._runtime = Runtime(self.settings)
        return self._runtime

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
