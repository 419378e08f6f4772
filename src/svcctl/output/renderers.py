"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from svcctl.output.console import create_console, get_output, state_text, style_for_dependency

if TYPE_CHECKING:
    from rich.console import Console

    from svcctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: one name per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(name for name in (_extract_name(item) for item in items) if name)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    """Extract a service name from an item (plain name, edge or snapshot)."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in ("name", "service", "target_service"):
            val = item.get(key)
            if val:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="svc.ok")
    op = Text(f"  {result.op}", style="svc.op")
    console.print(label, op, sep="", end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="svc.key")
    if key in ("service", "package", "name"):
        v = Text(str(value), style="svc.name")
    elif isinstance(value, bool):
        label, style = state_text(value)
        v = Text(label, style=style)
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="", end="")
    console.print()


def _bool_cell(value: Any) -> Text:
    label, style = state_text(bool(value))
    return Text(label, style=style)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block, including the operation trace (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "trace":
            _render_trace(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _timing_style(duration: float) -> str:
    if duration > 1000:
        return "bold red"
    if duration > 100:
        return "yellow"
    return "dim"


def _render_trace(console: Console, step: dict[str, Any], indent: int = 4) -> None:
    """Render a trace: each step with its notes, the commands it ran, then nested steps."""
    prefix = " " * indent
    name = step.get("name", "?")
    duration = step.get("duration_ms", 0.0)

    style = _timing_style(duration)
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {escape(name)}"
    if step.get("notes"):
        extras = [f"{key}={value}" for key, value in step["notes"].items()]
        line += f"  ({escape(', '.join(extras))})"
    console.print(line)

    for cmd in step.get("commands", []):
        took = cmd.get("duration_ms", 0.0)
        outcome = cmd["error"] if "error" in cmd else f"exit {cmd.get('exit_code')}"
        cmd_style = _timing_style(took)
        console.print(
            f"{prefix}  [{cmd_style}]{took:>8.2f}ms[/{cmd_style}]  "
            f"$ {escape(cmd.get('command', ''))}  [dim]{escape(str(outcome))}[/dim]"
        )

    for child in step.get("children", []):
        _render_trace(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="svc.error")
    op = Text(f"  {result.op}", style="svc.op")
    code = Text(f" [{err.code}]" if err else "", style="dim")
    console.print(label, op, code, Text(" - "), msg, sep="")

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Lifecycle renderers ───────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render start/stop/restart/enable/disable results."""
    _status_line(console, result)
    for key in ("service", "strategy", "enabled"):
        if key in result.data:
            _field(console, key, result.data[key])
    started = result.data.get("dependencies_started")
    if started:
        _field(console, "dependencies_started", ", ".join(started))
    if verbose:
        _render_meta(console, result)


def _render_status(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("service", "running", "enabled", "process_id", "strategy", "details"):
        value = d.get(key)
        if value is None or value == "":
            continue
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_health(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a strategy health answer or a configured health check result."""
    d = result.data
    healthy = bool(d.get("healthy"))
    label, style = state_text(healthy, yes="healthy", no="unhealthy")
    console.print(
        Text(str(d.get("service", "")), style="svc.name"),
        Text("  "),
        Text(label, style=style),
        sep="",
    )
    for key in ("strategy", "details", "error"):
        if d.get(key):
            _field(console, key, d[key])
    if "response_time" in d and (verbose or not healthy):
        _field(console, "response_time", f"{float(d['response_time']) * 1000:.1f}ms")
    if verbose:
        if d.get("metadata"):
            _field(console, "metadata", d["metadata"])
        _render_meta(console, result)


# ── Detection renderers ───────────────────────────────────────────────


def _render_info(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a ServiceInfo snapshot as a panel."""
    d = result.data
    lines: list[str] = []
    for key in ("running", "healthy", "enabled"):
        label, style = state_text(bool(d.get(key)))
        lines.append(f"[svc.key]{key}:[/svc.key] [{style}]{label}[/{style}]")
    for key in ("version", "process_id", "manager_type"):
        if d.get(key):
            lines.append(f"[svc.key]{key}:[/svc.key] {d[key]}")
    package = d.get("package")
    if package:
        lines.append(
            f"[svc.key]package:[/svc.key] {package['name']} ({package['manager']})"
        )
    if d.get("ports"):
        lines.append(f"[svc.key]ports:[/svc.key] {', '.join(str(p) for p in d['ports'])}")
    if verbose:
        for mk, mv in (d.get("metadata") or {}).items():
            lines.append(f"[svc.key]{mk}:[/svc.key] {mv}")
    console.print(Panel("\n".join(lines), title=f"[svc.name]{d.get('name', '')}[/svc.name]"))
    if verbose:
        _render_meta(console, result)


def _render_service_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render list_services as a table of snapshots."""
    items = result.data.get("items", [])
    if not items:
        console.print("No services found.")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Service", style="svc.name", no_wrap=True)
    table.add_column("Running")
    table.add_column("Healthy")
    table.add_column("Enabled")
    table.add_column("Manager")
    table.add_column("Version")
    if verbose:
        table.add_column("PID", style="dim")

    for item in items:
        row: list[Any] = [
            str(item.get("name", "")),
            _bool_cell(item.get("running")),
            _bool_cell(item.get("healthy")),
            _bool_cell(item.get("enabled")),
            str(item.get("manager_type", "")),
            str(item.get("version", "")),
        ]
        if verbose:
            row.append(str(item.get("process_id", "")))
        table.add_row(*row)

    console.print(table)
    count = result.data.get("count", len(items))
    console.print(f"\n{count} services on {result.data.get('platform', '')}")


def _render_health_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render check_many as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Service", style="svc.name", no_wrap=True)
    table.add_column("Healthy")
    table.add_column("Time", justify="right")
    table.add_column("Error")
    for item in items:
        table.add_row(
            str(item.get("service", "")),
            _bool_cell(item.get("healthy")),
            f"{float(item.get('response_time', 0.0)) * 1000:.1f}ms",
            str(item.get("error") or ""),
        )
    console.print(table)
    console.print(f"\n{result.data.get('healthy_count', 0)}/{len(items)} healthy")


def _render_names(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a plain list of service names."""
    items = result.data.get("items", [])
    if not items:
        console.print("No matching services.")
        return
    for name in items:
        console.print(f"  [svc.name]{name}[/svc.name]")


# ── Dependency renderers ──────────────────────────────────────────────


def _render_edges(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render dependency edges (detect/chain) as a table."""
    items = result.data.get("items", [])
    service = result.data.get("service", "")
    if not items:
        console.print(f"[svc.name]{service}[/svc.name] has no dependencies.")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Source", style="svc.name", no_wrap=True)
    table.add_column("Target", style="svc.name", no_wrap=True)
    table.add_column("Type")
    table.add_column("Order", justify="right")
    table.add_column("Detector", style="dim")
    if verbose:
        table.add_column("Proxy")

    for item in items:
        dep_type = str(item.get("dependency_type", ""))
        row: list[Any] = [
            str(item.get("source_service", "")),
            str(item.get("target_service", "")),
            Text(dep_type, style=style_for_dependency(dep_type)),
            str(item.get("startup_order", 0)),
            str((item.get("metadata") or {}).get("detector", "")),
        ]
        if verbose:
            proxy = item.get("proxy_config") or {}
            row.append(
                f"{proxy['proxy_endpoint']} -> {proxy['target_endpoint']}" if proxy else ""
            )
        table.add_row(*row)

    console.print(table)


def _render_order(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render startup order as a chain ending in the requested service."""
    items = result.data.get("items", [])
    service = result.data.get("service", "")
    if not items:
        console.print(f"[svc.name]{service}[/svc.name] has no prerequisites.")
        return
    chain = [f"[svc.name]{name}[/svc.name]" for name in [*items, service]]
    console.print(" → ".join(chain))


def _render_config(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a DependencyConfig."""
    _status_line(console, result)
    d = result.data
    for key in ("service_name", "source", "strategy", "auto_detect"):
        if key in d:
            _field(console, key, d[key])
    commands = d.get("custom_commands") or {}
    for op in ("start", "stop", "restart", "status"):
        if commands.get(op):
            _field(console, op, " ".join(commands[op]))
    check = d.get("health_check")
    if check:
        _field(console, "health_check", check.get("command") or check.get("url") or check["type"])
    for mk, mv in (d.get("metadata") or {}).items():
        _field(console, mk, mv)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Lifecycle
    "start": _render_mutation,
    "stop": _render_mutation,
    "restart": _render_mutation,
    "status": _render_status,
    "health": _render_health,
    # Detection
    "info": _render_info,
    "list_services": _render_service_table,
    "check_health": _render_health,
    "check_many": _render_health_table,
    "enable": _render_mutation,
    "disable": _render_mutation,
    # Mapping
    "services_for_package": _render_names,
    "find_service": _render_names,
    # Dependencies
    "detect": _render_edges,
    "chain": _render_edges,
    "order": _render_order,
    "config": _render_config,
}
