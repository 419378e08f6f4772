"""Subcommand modules for svcctl.

Provides register_commands() which uses deferred imports to keep
``svcctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root CLI group.

    2 groups (have subcommands) + 9 standalone commands.
    """
    # --- Groups ---
    from svcctl.commands.deps import deps
    from svcctl.commands.mapping import mapping

    cli.add_command(deps)
    cli.add_command(mapping)

    # --- Standalone commands ---
    from svcctl.commands.inspect import disable, enable, health, info, list_cmd
    from svcctl.commands.lifecycle import restart, start, status, stop

    cli.add_command(status)
    cli.add_command(start)
    cli.add_command(stop)
    cli.add_command(restart)
    cli.add_command(health)
    cli.add_command(info)
    cli.add_command(list_cmd)
    cli.add_command(enable)
    cli.add_command(disable)
