from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Mapping

import typer

from .errors import TmuxNotFoundError
from .resolve import Resolution
from .tmux import Tmux

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def build_command(resolution: Resolution, cwd: Path, tmux: Tmux) -> list[str]:
    if resolution.attach:
        return tmux.attach_command(resolution.socket_path, resolution.session_name)
    return tmux.new_session_command(resolution.socket_path, cwd, resolution.session_name)


def session_env(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for the tmux client; new sessions get zsh as SHELL when it is installed."""

    env = dict(os.environ if base is None else base)
    if zsh := shutil.which("zsh", path=env.get("PATH")):
        env["SHELL"] = zsh
    return env


def dispatch(
    resolution: Resolution,
    cwd: Path,
    tmux: Tmux,
    *,
    dry_run: bool = False,
    run: Runner = subprocess.run,
) -> int:
    """Hand over to tmux and return its exit status."""

    cmd = build_command(resolution, cwd, tmux)
    if dry_run:
        typer.echo(f"NOT RUNNING: {shlex.join(cmd)}")
        return 0

    logger.debug("running: %s", shlex.join(cmd))
    try:
        return run(cmd, env=session_env()).returncode
    except FileNotFoundError as e:
        raise TmuxNotFoundError(f"tmux binary not found: {tmux.binary}") from e
