from __future__ import annotations

import re
import socket
from pathlib import Path

MAX_SERVERS = 100


def default_socket_dir() -> Path:
    return Path.home() / "tmp" / "tmux" / "sockets"


def short_hostname() -> str:
    # "build01.example.org" -> "build01"
    return socket.gethostname().split(".", 1)[0]


def socket_name(index: int, host: str) -> str:
    return f"{index:02d}_{host}"


def socket_path(socket_dir: Path, index: int, host: str) -> Path:
    return socket_dir / socket_name(index, host)


def parse_socket_index(name: str, host: str) -> int | None:
    """Return the server index encoded in a socket file name, or None if it isn't ours."""

    m = re.fullmatch(r"([0-9]{1,2})_" + re.escape(host), name)
    if m is None:
        return None
    return int(m.group(1))
