"""Commands: start, stop, restart and status through lifecycle strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcctl.commands._base import SvcCommand
from svcctl.services.lifecycle import DEFAULT_WAIT_TIMEOUT, LifecycleService

if TYPE_CHECKING:
    from svcctl.commands._context import AppContext

_strategy_option = click.option(
    "-s",
    "--strategy",
    default=None,
    help="Management strategy (auto, brew_services, direct_command, launchd, "
    "systemd, windows_service, process_only).",
)


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl status postgresql
  svcctl status colima --strategy direct_command
  svcctl --json status redis""",
)
@click.argument("service_name")
@_strategy_option
@click.pass_obj
def status(app: AppContext, service_name: str, strategy: str | None) -> None:
    """Show whether a service is running."""
    app.emit(LifecycleService(app.runtime).status(service_name, strategy=strategy))


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl start postgresql
  svcctl start docker --with-deps
  svcctl start redis --wait --wait-timeout 30
  svcctl start myapp --strategy process_only""",
)
@click.argument("service_name")
@_strategy_option
@click.option("--with-deps", is_flag=True, help="Start blocking dependencies first.")
@click.option("--wait", is_flag=True, help="Wait until the service reports healthy.")
@click.option(
    "--wait-timeout",
    default=DEFAULT_WAIT_TIMEOUT,
    type=float,
    show_default=True,
    help="Seconds to wait with --wait.",
)
@click.pass_obj
def start(
    app: AppContext,
    service_name: str,
    strategy: str | None,
    with_deps: bool,
    wait: bool,
    wait_timeout: float,
) -> None:
    """Start a service."""
    app.emit(
        LifecycleService(app.runtime).start(
            service_name,
            strategy=strategy,
            with_dependencies=with_deps,
            wait=wait,
            wait_timeout=wait_timeout,
        )
    )


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl stop postgresql
  svcctl stop colima""",
)
@click.argument("service_name")
@_strategy_option
@click.pass_obj
def stop(app: AppContext, service_name: str, strategy: str | None) -> None:
    """Stop a service."""
    app.emit(LifecycleService(app.runtime).stop(service_name, strategy=strategy))


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl restart postgresql
  svcctl restart nginx --strategy systemd""",
)
@click.argument("service_name")
@_strategy_option
@click.pass_obj
def restart(app: AppContext, service_name: str, strategy: str | None) -> None:
    """Restart a service (stop, pause, start where the manager has no restart)."""
    app.emit(LifecycleService(app.runtime).restart(service_name, strategy=strategy))
