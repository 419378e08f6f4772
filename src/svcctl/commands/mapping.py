"""Command group: package-to-service mapping lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcctl.commands._base import SvcGroup
from svcctl.services.detection import DetectionService

if TYPE_CHECKING:
    from svcctl.commands._context import AppContext

_MAPPING_EXAMPLES = """\
  svcctl mapping services postgresql
  svcctl mapping package redis
  svcctl mapping find postgres"""


@click.group(cls=SvcGroup, examples=_MAPPING_EXAMPLES)
@click.pass_obj
def mapping(app: AppContext) -> None:
    """Look up which services a package provides."""


@mapping.command(
    examples="""\
  svcctl mapping services postgresql
  svcctl -q mapping services docker"""
)
@click.argument("package_name")
@click.pass_obj
def services(app: AppContext, package_name: str) -> None:
    """List the services a package provides."""
    app.emit(DetectionService(app.runtime).services_for_package(package_name))


@mapping.command(
    examples="""\
  svcctl mapping package redis"""
)
@click.argument("service_name")
@click.pass_obj
def package(app: AppContext, service_name: str) -> None:
    """Show the package that provides a service."""
    app.emit(DetectionService(app.runtime).package_for_service(service_name))


@mapping.command(
    examples="""\
  svcctl mapping find postgres
  svcctl mapping find sql"""
)
@click.argument("query")
@click.pass_obj
def find(app: AppContext, query: str) -> None:
    """Find services whose name contains QUERY."""
    app.emit(DetectionService(app.runtime).find_service(query))
