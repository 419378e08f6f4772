"""Command group: service dependency detection and ordering."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from svcctl.commands._base import SvcGroup
from svcctl.services.dependency import DependencyService

if TYPE_CHECKING:
    from svcctl.commands._context import AppContext

_DEPS_EXAMPLES = """\
  svcctl deps detect docker
  svcctl deps chain docker
  svcctl deps order docker
  svcctl deps validate docker
  svcctl deps config colima"""


@click.group(cls=SvcGroup, examples=_DEPS_EXAMPLES)
@click.pass_obj
def deps(app: AppContext) -> None:
    """Inspect how services depend on each other."""


@deps.command(
    examples="""\
  svcctl deps detect docker
  svcctl --json deps detect podman"""
)
@click.argument("service_name")
@click.pass_obj
def detect(app: AppContext, service_name: str) -> None:
    """Show direct dependencies found by every detector."""
    app.emit(DependencyService(app.runtime).detect(service_name))


@deps.command(
    examples="""\
  svcctl deps chain docker
  svcctl -v deps chain docker"""
)
@click.argument("service_name")
@click.pass_obj
def chain(app: AppContext, service_name: str) -> None:
    """Show every dependency reachable from a service."""
    app.emit(DependencyService(app.runtime).chain(service_name))


@deps.command(
    examples="""\
  svcctl deps order docker
  svcctl -q deps order docker"""
)
@click.argument("service_name")
@click.pass_obj
def order(app: AppContext, service_name: str) -> None:
    """Show the order prerequisites must be started in."""
    app.emit(DependencyService(app.runtime).order(service_name))


@deps.command(
    examples="""\
  svcctl deps validate docker"""
)
@click.argument("service_name")
@click.pass_obj
def validate(app: AppContext, service_name: str) -> None:
    """Check the dependency chain is acyclic and complete."""
    app.emit(DependencyService(app.runtime).validate(service_name))


@deps.command(
    examples="""\
  svcctl deps config colima
  svcctl --json deps config docker"""
)
@click.argument("service_name")
@click.pass_obj
def config(app: AppContext, service_name: str) -> None:
    """Show how a dependency target is managed."""
    app.emit(DependencyService(app.runtime).config(service_name))
