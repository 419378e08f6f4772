"""Commands: health, info, list, enable and disable via the platform detector."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcctl.commands._base import SvcCommand
from svcctl.services.detection import DetectionService
from svcctl.services.lifecycle import LifecycleService

if TYPE_CHECKING:
    from svcctl.commands._context import AppContext


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl health postgresql
  svcctl health postgresql redis nginx
  svcctl health docker --strategy direct_command""",
)
@click.argument("service_names", nargs=-1, required=True)
@click.option(
    "-s",
    "--strategy",
    default=None,
    help="Ask this lifecycle strategy instead of the configured health check.",
)
@click.pass_obj
def health(app: AppContext, service_names: tuple[str, ...], strategy: str | None) -> None:
    """Run health checks for one or more services."""
    if strategy is not None:
        if len(service_names) != 1:
            raise click.UsageError("--strategy takes exactly one service")
        app.emit(LifecycleService(app.runtime).health(service_names[0], strategy=strategy))
        return
    svc = DetectionService(app.runtime)
    if len(service_names) == 1:
        app.emit(svc.check_health(service_names[0]))
    else:
        app.emit(svc.check_many(list(service_names)))


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl info postgresql
  svcctl -v info redis
  svcctl --json info nginx""",
)
@click.argument("service_name")
@click.pass_obj
def info(app: AppContext, service_name: str) -> None:
    """Show everything known about a service."""
    app.emit(DetectionService(app.runtime).info(service_name))


@click.command(
    "list",
    cls=SvcCommand,
    examples="""\
  svcctl list
  svcctl -q list
  svcctl --json list""",
)
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List every known service on this host."""
    app.emit(DetectionService(app.runtime).list_services())


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl enable postgresql
  svcctl enable nginx""",
)
@click.argument("service_name")
@click.pass_obj
def enable(app: AppContext, service_name: str) -> None:
    """Start a service automatically at boot or login."""
    app.emit(DetectionService(app.runtime).enable(service_name))


@click.command(
    cls=SvcCommand,
    examples="""\
  svcctl disable postgresql""",
)
@click.argument("service_name")
@click.pass_obj
def disable(app: AppContext, service_name: str) -> None:
    """Stop starting a service automatically."""
    app.emit(DetectionService(app.runtime).disable(service_name))
