from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .paths import parse_socket_index
from .tmux import Tmux

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServerSlot:
    index: int
    socket_path: Path
    live: bool = True

    @property
    def name(self) -> str:
        return self.socket_path.name


@dataclass
class Discovery:
    live: list[ServerSlot] = field(default_factory=list)
    pruned: list[Path] = field(default_factory=list)

    @property
    def default(self) -> ServerSlot | None:
        """The lowest-numbered live server."""

        return self.live[0] if self.live else None


def candidate_sockets(socket_dir: Path, host: str) -> list[tuple[int, Path]]:
    if not socket_dir.is_dir():
        return []
    found: list[tuple[int, Path]] = []
    for entry in socket_dir.iterdir():
        idx = parse_socket_index(entry.name, host)
        if idx is not None:
            found.append((idx, entry))
    found.sort(key=lambda item: (item[0], item[1].name))
    return found


def remove_stale_socket(path: Path) -> None:
    # Another run may have pruned it first.
    path.unlink(missing_ok=True)
    logger.warning("Removed socket file with no running server: %s", path)


def discover(socket_dir: Path, host: str, tmux: Tmux) -> Discovery:
    """Probe every socket of this host, pruning the ones nobody answers on."""

    result = Discovery()
    for idx, path in candidate_sockets(socket_dir, host):
        if tmux.is_live(path):
            result.live.append(ServerSlot(index=idx, socket_path=path))
        else:
            remove_stale_socket(path)
            result.pruned.append(path)

    logger.debug(
        "discovered live=%s pruned=%s",
        [s.name for s in result.live],
        [p.name for p in result.pruned],
    )
    return result
