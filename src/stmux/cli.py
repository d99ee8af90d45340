from __future__ import annotations

import logging
import os
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from .config import LauncherConfig
from .discovery import Discovery, discover
from .dispatch import dispatch
from .errors import HelpRequested, StmuxError, UserCancelled
from .log import setup_logging, stderr_console
from .menu import DialogMenu, find_menu_tool
from .paths import default_socket_dir, short_hostname
from .request import Request, normalize
from .resolve import Resolution, resolve
from .tmux import Tmux

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="stmux — start or attach a tmux client (and maybe a server)")

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"], "ignore_unknown_options": True}


def _trace(config: LauncherConfig, discovery: Discovery, request: Request, resolution: Resolution) -> None:
    table = Table(title="stmux", show_header=False)
    table.add_column("variable", style="cyan")
    table.add_column("value")
    rows = {
        "socket dir": config.socket_dir,
        "host": config.host,
        "default server": discovery.default.name if discovery.default else "",
        "requested server": f"{request.server} ({type(request.server).__name__})",
        "requested session": f"{request.session} ({type(request.session).__name__})",
        "server socket": resolution.socket_path,
        "session name": resolution.session_name,
        "create server": resolution.create_server,
        "create session": resolution.create_session,
        "session cwd": config.cwd,
    }
    for key, value in rows.items():
        table.add_row(key, escape(f"'{value}'"))
    stderr_console.print(table)


@app.command(context_settings=CONTEXT_SETTINGS)
def main_command(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, metavar="[SERVER] [SESSION]", show_default=False),
    socket_dir: Path = typer.Option(
        default_socket_dir(), "--socket-dir", envvar="STMUX_SOCKET_DIR", help="Directory holding tmux server sockets"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Trace resolution and print the tmux command instead of running it (also DEBUG_STMUX)"
    ),
    probe_timeout: float = typer.Option(
        5.0, "--probe-timeout", envvar="STMUX_PROBE_TIMEOUT", help="Seconds to wait for a tmux probe"
    ),
    menu_tool: Path | None = typer.Option(None, "--menu", envvar="STMUX_MENU", help="Path to dialog or whiptail"),
    tmux_binary: str = typer.Option("tmux", "--tmux", envvar="STMUX_TMUX", help="tmux executable"),
) -> None:
    """Attach to (or create) a tmux session on one of several per-host tmux servers.

    SERVER is n (new), d (default) or q (query), or a server number 0-99.
    SESSION is n, d, q or a session name. A single argument of one or two
    n/d/q characters is SESSION or SERVER+SESSION; any other single argument
    is a session name. No arguments means "qd".

    The default server is the live one with the lowest number. New sessions
    start in the current directory and are named after it unless the server
    already has a session of that name.
    """

    # Any non-empty DEBUG_STMUX turns debugging on.
    debug = debug or bool(os.environ.get("DEBUG_STMUX"))
    setup_logging(debug)
    config = LauncherConfig(
        socket_dir=socket_dir.expanduser(),
        host=short_hostname(),
        cwd=Path.cwd(),
        debug=debug,
        probe_timeout_s=probe_timeout,
        menu_path=menu_tool,
        tmux_binary=tmux_binary,
    )
    tmux = Tmux(binary=config.tmux_binary, timeout_s=config.probe_timeout_s)

    try:
        request = normalize(args or [])
        discovery = discover(config.socket_dir, config.host, tmux)
        menu_path = find_menu_tool(config.menu_path)
        menu = DialogMenu(menu_path) if menu_path else None
        resolution = resolve(request, discovery, config, tmux, menu)
        if config.debug:
            _trace(config, discovery, request, resolution)
        code = dispatch(resolution, config.cwd, tmux, dry_run=config.debug)
    except HelpRequested:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)
    except UserCancelled:
        return
    except StmuxError as e:
        stderr_console.print(f"[red]stmux: ERROR:[/red] {escape(e.message)}")
        raise typer.Exit(e.exit_code)

    if code:
        raise typer.Exit(code)


def main() -> None:
    app()
