from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Callable, NoReturn, Optional

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from muxpick import actuator
from muxpick.authorities import (
    ActionFailed,
    Authority,
    ExternalAuthorityMissing,
    ListingFailed,
    SessionRecord,
    ensure_installed,
    get_authority,
)
from muxpick.config import load_config
from muxpick.letters import build_letter_map
from muxpick.prompt import ask_line
from muxpick.resolver import Attach, Cancel, Create, KillAll, ResolvedAction, resolve, validate
from muxpick.sessions import filter_by_directory, list_sessions

__version__ = "0.1.0"

app = typer.Typer(add_completion=False)
console = Console(stderr=True)
_authority: Authority = get_authority("tmux")
_show_all = False
_handoff_delay = 0.2


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    all: Annotated[bool, typer.Option("--all", help="Show sessions from every directory, not just the current one")] = False,
    authority: Annotated[Optional[str], typer.Option("--authority", help="Session authority: tmux, shpool or zmx")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", help="Path to config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log subprocess calls to stderr")] = False,
) -> None:
    """Pick, create or clear terminal multiplexer sessions."""
    global _authority, _show_all, _handoff_delay
    _setup_logging(verbose)
    cfg = load_config(config)
    try:
        _authority = get_authority(authority or cfg["authority"])
    except ValueError as e:
        _fail(str(e))
    _show_all = all or bool(cfg["show_all"])
    _handoff_delay = float(cfg["handoff_delay"])

    if ctx.invoked_subcommand is None:
        interactive()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    logger = logging.getLogger("muxpick")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=console, show_path=False))


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _check_installed() -> None:
    try:
        ensure_installed(_authority)
    except ExternalAuthorityMissing as e:
        console.print(f"[red]✖[/red] {e}\n")
    else:
        return

    binary = _authority.binary
    if (
        sys.platform == "darwin"
        and _authority.brew_formula
        and shutil.which("brew")
        and sys.stdin.isatty()
        and typer.confirm(f"Install {binary} with Homebrew now?", default=False, err=True)
    ):
        result = subprocess.run(["brew", "install", _authority.brew_formula])
        if result.returncode == 0 and shutil.which(binary):
            return

    typer.echo(f"To install {binary}:\n", err=True)
    for line in _authority.install_hint(sys.platform):
        typer.echo(line, err=True)
    raise typer.Exit(code=1)


def _load_sessions() -> list[SessionRecord]:
    try:
        sessions = list_sessions(_authority)
    except ListingFailed as e:
        _fail(str(e))
    if not _show_all:
        sessions = filter_by_directory(sessions, os.getcwd())
    return sessions


def _describe(s: SessionRecord) -> str:
    parts = []
    if s.attached is True:
        parts.append("[green]●[/green]")
    elif s.attached is False:
        parts.append("[dim]○[/dim]")
    if s.windows is not None:
        parts.append(f"[dim]({s.windows} window{'s' if s.windows != 1 else ''})[/dim]")
    return " ".join(parts)


def _print_sessions(sessions: list[SessionRecord], show_header: bool = False) -> None:
    letters = build_letter_map(sessions)
    table = Table(show_header=show_header, box=None, pad_edge=False)
    table.add_column("KEY", style="cyan")
    table.add_column("NAME")
    table.add_column("STATUS")
    if show_header:
        table.add_column("PATH", style="dim")

    for letter, s in zip(letters, sessions):
        row = [f"  {letter})" if not show_header else letter, escape(s.name), _describe(s)]
        if show_header:
            row.append(escape(s.path or ""))
        table.add_row(*row)

    console.print(table)


def _hand_off(verb: str, action: Callable[[Authority, str], NoReturn], name: str) -> NoReturn:
    with console.status(f"{verb} session: {escape(name)}"):
        time.sleep(_handoff_delay)
    console.print(f"{verb} session: {escape(name)}")
    try:
        action(_authority, name)
    except ActionFailed as e:
        _fail(str(e))


def _kill(sessions: list[SessionRecord] | tuple[SessionRecord, ...]) -> None:
    with console.status("Killing all sessions..." if len(sessions) > 1 else "Killing session..."):
        report = actuator.kill_all(_authority, sessions)

    count = len(report.killed)
    if count:
        console.print(f"[green]✓[/green] Killed {count} session{'s' if count != 1 else ''}")
    if not report.ok:
        for name, reason in report.failed:
            console.print(f"[red]✖[/red] {escape(name)}: {escape(reason)}")
        _fail(f"Could not kill {len(report.failed)} of {len(sessions)} session(s)")


def _act(action: ResolvedAction) -> None:
    if isinstance(action, Cancel):
        console.print("[dim]Operation cancelled[/dim]")
        raise typer.Exit(code=0)
    if isinstance(action, KillAll):
        _kill(action.sessions)
        console.print("[green]✓[/green] All sessions cleared")
        return
    if isinstance(action, Attach):
        console.print("[green]✓[/green] Attaching to session")
        _hand_off("Attaching to", actuator.attach, action.name)
    if isinstance(action, Create):
        console.print("[green]✓[/green] Creating new session")
        _hand_off("Creating", actuator.create, action.name)


# ---------------------------------------------------------------------------
# muxpick (interactive)
# ---------------------------------------------------------------------------


def interactive() -> None:
    """List sessions, read one line of input and act on it."""
    console.clear()
    _check_installed()
    console.print(f"[cyan]{_authority.name} session manager[/cyan]\n")

    sessions = _load_sessions()
    letter_map = build_letter_map(sessions)

    if not sessions:
        console.print(f"[dim]No active {_authority.name} sessions[/dim]\n")
        message = "Enter session name (or press Enter for UUID):"
        placeholder = "my-session"
    else:
        console.print("[dim]Active sessions:[/dim]\n")
        _print_sessions(sessions)
        console.print()
        message = 'Select session (letter), create new (name), type "reset" to kill all, or press Enter for UUID:'
        placeholder = "a or new-session-name or reset"

    raw = ask_line(message, placeholder, lambda value: validate(value, letter_map), console=console)
    _act(resolve(raw, sessions, letter_map))


# ---------------------------------------------------------------------------
# Non-interactive commands
# ---------------------------------------------------------------------------


@app.command("list")
def list_command(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List sessions with their letter shortcuts."""
    _check_installed()
    sessions = _load_sessions()

    if json_output:
        letters = build_letter_map(sessions)
        typer.echo(json.dumps([{"key": key, **asdict(s)} for key, s in zip(letters, sessions)], indent=2))
        return

    if not sessions:
        typer.echo("No sessions found.", err=True)
        return

    _print_sessions(sessions, show_header=True)


@app.command()
def attach(
    name: Annotated[str, typer.Argument(help="Session name")],
) -> None:
    """Attach to an existing session."""
    _check_installed()
    _hand_off("Attaching to", actuator.attach, name)


@app.command()
def create(
    name: Annotated[str, typer.Argument(help="Session name")],
) -> None:
    """Create a session and attach to it."""
    _check_installed()
    _hand_off("Creating", actuator.create, name)


@app.command()
def kill(
    name: Annotated[str, typer.Argument(help="Session name")],
) -> None:
    """Kill a session."""
    _check_installed()
    _kill([SessionRecord(name=name)])


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show this message."""
    typer.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


@app.command()
def version() -> None:
    """Print the muxpick version."""
    typer.echo(f"muxpick {__version__}")


def run(argv: list[str] | None = None) -> NoReturn:
    """Console entry point. Usage errors exit with status 1."""
    command = typer.main.get_command(app)
    try:
        code = command.main(args=argv, prog_name="muxpick", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.exceptions.Abort:
        typer.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)
