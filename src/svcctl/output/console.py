"""Rich Console factory and theme for svcctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

SVC_THEME = Theme(
    {
        "svc.ok": "bold green",
        "svc.error": "bold red",
        "svc.warning": "bold yellow",
        "svc.op": "bold cyan",
        "svc.key": "dim",
        "svc.name": "bold blue",
        "svc.up": "green",
        "svc.down": "red",
        "svc.unknown": "yellow",
        "svc.dep.required": "bold",
        "svc.dep.proxy": "magenta",
        "svc.dep.optional": "dim",
    }
)

_DEPENDENCY_STYLES: dict[str, str] = {
    "required": "svc.dep.required",
    "proxy": "svc.dep.proxy",
    "optional": "svc.dep.optional",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=SVC_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_dependency(dependency_type: str) -> str:
    return _DEPENDENCY_STYLES.get(dependency_type, "")


def state_text(value: bool, *, yes: str = "yes", no: str = "no") -> tuple[str, str]:
    """``(label, style)`` for a boolean state cell."""
    return (yes, "svc.up") if value else (no, "svc.down")
