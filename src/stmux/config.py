from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .paths import socket_path


@dataclass(frozen=True)
class LauncherConfig:
    socket_dir: Path
    host: str
    cwd: Path
    debug: bool = False
    probe_timeout_s: float = 5.0
    menu_path: Path | None = None
    tmux_binary: str = "tmux"

    @property
    def default_session_name(self) -> str:
        # Raw basename; the session resolver sanitizes it.
        return self.cwd.name

    def socket_for(self, index: int) -> Path:
        return socket_path(self.socket_dir, index, self.host)
