from __future__ import annotations

from datetime import datetime
from pathlib import Path
import json
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .app_context import AppContext
from .config.models import ConfigError
from .events.store import EventStore
from .tools.args import parse_cli_args
from .tools.base import ToolResult
from .tools.errors import UnknownTool


app = typer.Typer(add_completion=False, help="pycats: stateful tool-execution engine for coding agents.")
console = Console()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser()
    if not cwd.is_absolute():
        cwd = (Path.cwd() / cwd).resolve()
    else:
        cwd = cwd.resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory: {cwd}")
    return cwd


def _app_context(ctx: typer.Context) -> AppContext:
    opts = ctx.obj or {}
    cwd = _resolve_cwd(opts.get("cwd"))
    try:
        return AppContext.from_env(
            cwd=cwd,
            config_path=opts.get("config"),
            trace=bool(opts.get("trace")),
            events=bool(opts.get("events")),
            session_id=opts.get("session"),
        )
    except ConfigError as e:
        raise typer.BadParameter(str(e))


def _print_result(name: str, res: ToolResult, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(res.to_dict(), ensure_ascii=False, default=str))
        return
    title = f"{name} (error: {res.error_kind})" if res.is_error else name
    console.print(Panel(Text(res.message), title=title, border_style="red" if res.is_error else "green"))


@app.callback()
def main(
    ctx: typer.Context,
    cwd: Path = typer.Option(None, "--cwd", help="Working directory (project root). Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Explicit JSON/YAML config file, merged over global and project config."),
    trace: bool = typer.Option(False, "--trace", help="Print each tool invocation and its result panel to stderr."),
    events: bool = typer.Option(False, "--events", help="Append tool events to a JSONL log under the user data dir."),
    session: str = typer.Option(None, "--session", help="Session id for the event log. Defaults to a fresh random id."),
):
    ctx.obj = {"cwd": cwd, "config": config, "trace": trace, "events": events, "session": session}


@app.command()
def tools(ctx: typer.Context):
    """List registered tools."""
    actx = _app_context(ctx)
    table = Table(title="pycats tools")
    table.add_column("name", style="bold cyan", no_wrap=True)
    table.add_column("description")
    for name, description in actx.tools.list_tools():
        table.add_row(name, description)
    console.print(table)


@app.command()
def schema(
    ctx: typer.Context,
    name: str = typer.Argument(None, help="Tool name. Omit to print every schema."),
    openai: bool = typer.Option(False, "--openai", help="Emit OpenAI function-calling tool definitions."),
):
    """Print a tool's parameter schema as JSON."""
    actx = _app_context(ctx)
    registry = actx.tools
    try:
        if openai:
            out = registry.to_openai_tools()
            if name:
                registry.get(name)
                out = [t for t in out if t["function"]["name"] == name]
        elif name:
            out = registry.get_schema(name)
        else:
            out = [registry.get_schema(n) for n in registry.names()]
    except UnknownTool as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(out, ensure_ascii=False, indent=2))


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(
    ctx: typer.Context,
    tool: str = typer.Argument(..., help="Tool name."),
    args: Optional[List[str]] = typer.Argument(None, help="Positional values and --key=value named values."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as a JSON object."),
):
    """Invoke one tool and print its result."""
    actx = _app_context(ctx)
    tokens = list(args or []) + list(ctx.args)
    res = actx.tools.execute(tool, parse_cli_args(tokens))
    _print_result(tool, res, as_json)
    if res.is_error:
        raise typer.Exit(code=1)


@app.command()
def batch(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help='JSONL file; one {"tool": ..., "args": ...} object per line.'),
    as_json: bool = typer.Option(False, "--json", help="Print each result as a JSON object."),
    stop_on_error: bool = typer.Option(False, "--stop-on-error", help="Stop at the first failed invocation."),
):
    """Run a sequence of invocations in one session so state carries over."""
    actx = _app_context(ctx)
    try:
        text = file.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"cannot read {file}: {e}")

    failures = 0
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"{file}:{lineno}: invalid JSON: {e}")
        if not isinstance(obj, dict) or not isinstance(obj.get("tool"), str):
            raise typer.BadParameter(f'{file}:{lineno}: expected an object with a "tool" string')

        name = obj["tool"]
        res = actx.tools.execute(name, obj.get("args"))
        _print_result(name, res, as_json)
        if res.is_error:
            failures += 1
            if stop_on_error:
                break

    if not as_json:
        console.print(f"[bold]{len(actx.tools.state.history)} invocation(s), {failures} failed[/bold]")
    if failures:
        raise typer.Exit(code=1)


@app.command("events")
def show_events(
    session: str = typer.Option(..., "--session", help="Session id whose event log to show."),
    event_type: str = typer.Option(None, "--type", help="Only show events of this type, e.g. tool.result."),
    tail: int = typer.Option(50, "--tail", help="Show the last N events."),
):
    """Show the recorded tool events of a session."""
    es = EventStore.open(session)
    evs = list(es.iter_events(event_type))
    evs = evs[-tail:] if tail and tail > 0 else evs
    console.print(Panel.fit(f"session: {session}\nfile: {es.path}\nevents: {len(evs)}", title="Events"))
    for e in evs:
        ts = datetime.fromtimestamp(e.ts).strftime("%Y-%m-%d %H:%M:%S")
        console.print(Panel.fit(json.dumps(e.data, ensure_ascii=False, indent=2, default=str)[:4000], title=f"{ts}  {e.type}"))


if __name__ == "__main__":
    app()
