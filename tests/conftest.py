from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest


class FakeTmuxRunner:
    """Stands in for `subprocess.run` and answers tmux probes from a dict.

    `servers` maps socket path -> session names; a socket missing from it has
    no live server behind it.
    """

    def __init__(self, servers: dict[Path, list[str]] | None = None) -> None:
        self.servers: dict[str, list[str]] = {str(k): list(v) for k, v in (servers or {}).items()}
        self.calls: list[list[str]] = []

    def __call__(self, cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(cmd)
        _binary, _flag, sock, verb, *rest = cmd
        sessions = self.servers.get(sock)

        if sessions is None:
            return subprocess.CompletedProcess(cmd, 1, "", "no server running\n")
        if verb == "has-session":
            if not rest:
                return subprocess.CompletedProcess(cmd, 0 if sessions else 1, "", "no current target\n")
            target = rest[1].removeprefix("=")
            return subprocess.CompletedProcess(cmd, 0 if target in sessions else 1, "", "")
        if verb == "list-sessions":
            return subprocess.CompletedProcess(cmd, 0, "".join(s + "\n" for s in sessions), "")
        raise AssertionError(f"unexpected tmux command: {cmd}")

    def probed(self, sock: Path) -> int:
        return sum(1 for c in self.calls if c[2] == str(sock))


class FakeMenu:
    def __init__(self, answer: str | None) -> None:
        self.answer = answer
        self.asked: list[tuple[str, list[tuple[str, str]]]] = []

    def choose(self, prompt: str, choices: list[tuple[str, str]]) -> str | None:
        self.asked.append((prompt, list(choices)))
        return self.answer


@pytest.fixture
def socket_dir(tmp_path: Path) -> Path:
    d = tmp_path / "sockets"
    d.mkdir()
    return d


@pytest.fixture
def config(socket_dir: Path, tmp_path: Path):
    from stmux.config import LauncherConfig

    return LauncherConfig(socket_dir=socket_dir, host="box", cwd=tmp_path / "myproj")


def make_tmux(servers: dict[Path, list[str]] | None = None):
    from stmux.tmux import Tmux

    runner = FakeTmuxRunner(servers)
    return Tmux(timeout_s=1.0, run=runner), runner


def touch_socket(socket_dir: Path, name: str) -> Path:
    path = socket_dir / name
    path.touch()
    return path
