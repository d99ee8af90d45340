from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .config import LauncherConfig
from .discovery import Discovery
from .errors import (
    NoInteractiveToolError,
    NoSocketDirectoryError,
    ServerSlotsExhaustedError,
    UserCancelled,
)
from .menu import NEW_CHOICE, DialogMenu
from .paths import MAX_SERVERS
from .request import DEFAULT, NEW, QUERY, Char, Name, Number, Request, Selector, is_char
from .tmux import Tmux

logger = logging.getLogger(__name__)

_DATE_PREFIX_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}_(.+)$", re.DOTALL)
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")


@dataclass(frozen=True, slots=True)
class ServerChoice:
    socket_path: Path
    create_server: bool


@dataclass(frozen=True, slots=True)
class SessionChoice:
    name: str  # "" = anonymous, tmux picks
    create_session: bool


@dataclass(frozen=True, slots=True)
class Resolution:
    socket_path: Path
    create_server: bool
    session_name: str
    create_session: bool

    @property
    def attach(self) -> bool:
        return not (self.create_server or self.create_session)


def sanitize(name: str) -> str:
    """Clean a session name: drop a `YYYY-MM-DD_` prefix, squash non-alphanumerics to `_`.

    >>> sanitize("2024-05-01_build")
    'build'
    >>> sanitize("a..b--c")
    'a_b_c'
    """

    if m := _DATE_PREFIX_RE.match(name):
        name = m.group(1)
    return _NON_ALNUM_RE.sub("_", name)


def allocate_socket(config: LauncherConfig, tmux: Tmux) -> Path:
    """Pick the socket path for a new server.

    Prefers the lowest index with no socket file at all, then the lowest index
    whose socket file has no server behind it.
    """

    for idx in range(MAX_SERVERS):
        path = config.socket_for(idx)
        if not path.exists():
            return path

    for idx in range(MAX_SERVERS):
        path = config.socket_for(idx)
        if tmux.is_live(path):
            logger.debug("socket file with a tmux process: %s", path)
            continue
        logger.debug("reusing socket file with no tmux process: %s", path)
        return path

    raise ServerSlotsExhaustedError(f"all {MAX_SERVERS} server slots in {config.socket_dir} are in use")


def resolve_server(
    selector: Selector,
    discovery: Discovery,
    config: LauncherConfig,
    tmux: Tmux,
    menu: DialogMenu | None = None,
) -> ServerChoice:
    if not config.socket_dir.is_dir():
        raise NoSocketDirectoryError(f"server socket path is missing: {config.socket_dir}")

    if discovery.default is None and (is_char(selector, DEFAULT) or is_char(selector, QUERY)):
        logger.debug("no running servers; server %r becomes %r", str(selector), NEW)
        selector = Char(NEW)

    if isinstance(selector, Number):
        path = config.socket_for(selector.index)
        live = path.exists() and tmux.is_live(path)
        return ServerChoice(socket_path=path, create_server=not live)

    if isinstance(selector, Name):
        raise ValueError(f"server cannot be selected by name: {selector.value!r}")

    if selector.code == DEFAULT:
        assert discovery.default is not None
        return ServerChoice(socket_path=discovery.default.socket_path, create_server=False)

    if selector.code == QUERY:
        if menu is None:
            raise NoInteractiveToolError("could not find dialog or whiptail; 'q' is not supported")
        choices = [(NEW_CHOICE, "start a new server")]
        choices += [(slot.name, slot.name) for slot in discovery.live]
        chosen = menu.choose("Select a tmux server", choices)
        if chosen is None:
            logger.debug("interactive server selection cancelled")
            raise UserCancelled()
        if chosen != NEW_CHOICE:
            for slot in discovery.live:
                if slot.name == chosen:
                    return ServerChoice(socket_path=slot.socket_path, create_server=False)
            raise ValueError(f"menu returned an unknown server: {chosen!r}")

    return ServerChoice(socket_path=allocate_socket(config, tmux), create_server=True)


def adjust_session_selector(selector: Selector, server: ServerChoice) -> Selector:
    """A server that doesn't exist yet has no sessions to query or default to."""

    if server.create_server and (is_char(selector, QUERY) or is_char(selector, DEFAULT)):
        logger.debug("starting a new server; session %r becomes %r", str(selector), NEW)
        return Char(NEW)
    return selector


def _pick_session(server: ServerChoice, tmux: Tmux, menu: DialogMenu | None) -> SessionChoice:
    if menu is None:
        raise NoInteractiveToolError("could not find dialog or whiptail; 'q' is not supported")
    choices = [(NEW_CHOICE, "start a new session")]
    choices += [(name, name) for name in tmux.list_sessions(server.socket_path)]
    chosen = menu.choose("Select a tmux session", choices)
    if chosen is None:
        logger.debug("interactive session selection cancelled")
        raise UserCancelled()
    if chosen == NEW_CHOICE:
        return SessionChoice(name="", create_session=True)
    # Names listed by tmux are used verbatim; sanitizing could miss the session.
    return SessionChoice(name=chosen, create_session=False)


def resolve_session(
    selector: Selector,
    server: ServerChoice,
    default_name: str,
    tmux: Tmux,
    menu: DialogMenu | None = None,
) -> SessionChoice:
    sock = server.socket_path

    if isinstance(selector, Name):
        name = sanitize(selector.value)
        if name != selector.value:
            logger.debug("session name fixed: %r -> %r", selector.value, name)
        create = server.create_server or not tmux.has_session(sock, name)
        return SessionChoice(name=name, create_session=create)

    if isinstance(selector, Number):
        raise ValueError(f"session cannot be selected by number: {selector}")

    if selector.code == QUERY and not server.create_server:
        choice = _pick_session(server, tmux, menu)
    elif selector.code == DEFAULT:
        choice = SessionChoice(name="", create_session=False)
    else:
        choice = SessionChoice(name="", create_session=True)

    if choice.name:
        return choice

    fallback = sanitize(default_name) if default_name else ""
    if not fallback:
        return choice

    if choice.create_session:
        if server.create_server or not tmux.has_session(sock, fallback):
            return SessionChoice(name=fallback, create_session=True)
        logger.debug("session %r already exists; creating an anonymous session instead", fallback)
        return choice

    if tmux.has_session(sock, fallback):
        return SessionChoice(name=fallback, create_session=False)
    return choice


def resolve(
    request: Request,
    discovery: Discovery,
    config: LauncherConfig,
    tmux: Tmux,
    menu: DialogMenu | None = None,
) -> Resolution:
    server = resolve_server(request.server, discovery, config, tmux, menu)
    session_selector = adjust_session_selector(request.session, server)
    session = resolve_session(session_selector, server, config.default_session_name, tmux, menu)
    return Resolution(
        socket_path=server.socket_path,
        create_server=server.create_server,
        session_name=session.name,
        create_session=session.create_session,
    )
