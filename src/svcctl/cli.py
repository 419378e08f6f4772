"""Root CLI group for svcctl: global flags and command registration."""

from __future__ import annotations

import click

from svcctl import __version__
from svcctl.commands import register_commands
from svcctl.commands._base import SvcGroup
from svcctl.commands._context import AppContext
from svcctl.config.settings import SvcSettings


@click.group(
    cls=SvcGroup,
    invoke_without_command=True,
    examples="""\
  svcctl start postgresql --with-deps --wait
  svcctl --json status redis
  svcctl -v restart nginx --strategy systemd
  svcctl -c ./svcctl.toml health postgresql redis
  svcctl deps order docker""",
)
@click.version_option(version=__version__, prog_name="svcctl")
@click.option(
    "--json", "json_output", is_flag=True, help="Print each result as a JSON ServiceResult."
)
@click.option(
    "-q", "--quiet", is_flag=True, help="Print only service names, or a one-line outcome."
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show debug logs and the trace of backend commands each operation ran.",
)
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    help="Read this svcctl.toml instead of discovering one (overrides SVCCTL_CONFIG).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """svcctl: start, stop and inspect local services and their dependencies.

    Each service is driven through a lifecycle strategy such as systemd,
    brew services, launchd or custom commands, chosen in svcctl.toml or
    detected from the host.
    """
    ctx.ensure_object(dict)
    settings = SvcSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
