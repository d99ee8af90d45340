from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable

from .errors import ProbeTimeoutError, TmuxNotFoundError

logger = logging.getLogger(__name__)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def parse_list_sessions_payload(payload: str) -> list[str]:
    """Parse `list-sessions -F '#S'` output into session names, in tmux order."""

    names: list[str] = []
    for raw_line in payload.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        names.append(line)
    return names


class Tmux:
    """Probe and drive tmux servers addressed by socket path.

    Every probe is a single `tmux -S <socket> ...` invocation bounded by
    `timeout_s`. A non-zero exit means "absent"; nothing is retried.
    """

    def __init__(self, *, binary: str = "tmux", timeout_s: float = 5.0, run: Runner = subprocess.run) -> None:
        self.binary = binary
        self.timeout_s = timeout_s
        self._run = run

    def _probe(self, socket_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
        cmd = [self.binary, "-S", str(socket_path), *args]
        logger.debug("probe: %s", " ".join(cmd))
        try:
            return self._run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except FileNotFoundError as e:
            raise TmuxNotFoundError(f"tmux binary not found: {self.binary}") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeTimeoutError(
                f"tmux did not answer on {socket_path} within {self.timeout_s}s"
            ) from e

    def is_live(self, socket_path: Path) -> bool:
        # has-session fails on a running server with no sessions; list-sessions does not.
        return self._probe(socket_path, "list-sessions", "-F", "#S").returncode == 0

    def list_sessions(self, socket_path: Path) -> list[str]:
        proc = self._probe(socket_path, "list-sessions", "-F", "#S")
        if proc.returncode != 0:
            return []
        return parse_list_sessions_payload(proc.stdout)

    def has_session(self, socket_path: Path, name: str) -> bool:
        # "=" forces an exact match; plain targets also match name prefixes.
        return self._probe(socket_path, "has-session", "-t", f"={name}").returncode == 0

    def attach_command(self, socket_path: Path, session_name: str = "") -> list[str]:
        cmd = [self.binary, "-S", str(socket_path), "attach"]
        if session_name:
            cmd += ["-t", session_name]
        return cmd

    def new_session_command(self, socket_path: Path, cwd: Path, session_name: str = "") -> list[str]:
        cmd = [self.binary, "-S", str(socket_path), "new-session"]
        if session_name:
            cmd += ["-s", session_name]
        cmd += ["-c", str(cwd)]
        return cmd
