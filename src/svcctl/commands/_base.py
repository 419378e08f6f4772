"""Click base classes that give svcctl commands an ``--examples`` flag.

``svcctl start --examples`` prints typical invocations (waiting on health,
starting dependencies, forcing a strategy) and exits before any backend
command runs.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag that prints *examples* and exits."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class SvcCommand(click.Command):
    """A svcctl command; ``examples=`` adds ``--examples`` to its options."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class SvcGroup(click.Group):
    """A svcctl command group such as ``deps`` or ``mapping``.

    Subcommands declared on it are ``SvcCommand``s, so each can carry its
    own examples.
    """

    command_class = SvcCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
