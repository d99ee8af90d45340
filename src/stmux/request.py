from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence, Union

from .errors import HelpRequested, UsageError

logger = logging.getLogger(__name__)

NEW = "n"
DEFAULT = "d"
QUERY = "q"

_CHAR_RE = re.compile(r"[ndq]")
_COMBINED_RE = re.compile(r"[ndq][ndq]")
_NUMBER_RE = re.compile(r"[0-9]{1,2}")
_HELP_RE = re.compile(r"-[hH]")


@dataclass(frozen=True, slots=True)
class Char:
    """One of the single-character requests: n (new), d (default), q (query)."""

    code: str

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Number:
    index: int

    def __str__(self) -> str:
        return f"{self.index:02d}"


@dataclass(frozen=True, slots=True)
class Name:
    value: str

    def __str__(self) -> str:
        return self.value


Selector = Union[Char, Number, Name]


@dataclass(frozen=True, slots=True)
class Request:
    server: Selector
    session: Selector


def is_char(sel: Selector, code: str) -> bool:
    return isinstance(sel, Char) and sel.code == code


def _server_selector(arg: str) -> Selector:
    if _CHAR_RE.fullmatch(arg):
        return Char(arg)
    if _NUMBER_RE.fullmatch(arg):
        return Number(int(arg))
    raise UsageError("server must be an integer or a single character (n, d, q)")


def _session_selector(arg: str) -> Selector:
    if _CHAR_RE.fullmatch(arg):
        return Char(arg)
    return Name(arg)


def normalize(args: Sequence[str]) -> Request:
    """Turn 0, 1 or 2 positional arguments into a server/session request.

    Raises UsageError for an explicit server that is neither n/d/q nor a 1-2
    digit number, and HelpRequested for -h/--help.
    """

    if len(args) > 2:
        logger.debug("arguments beyond the first two are ignored: %s", list(args[2:]))

    if not args or not args[0]:
        return Request(server=Char(QUERY), session=Char(DEFAULT))

    if len(args) >= 2:
        return Request(server=_server_selector(args[0]), session=_session_selector(args[1]))

    arg = args[0]
    if _CHAR_RE.fullmatch(arg):
        return Request(server=Char(DEFAULT), session=Char(arg))
    if _COMBINED_RE.fullmatch(arg):
        return Request(server=Char(arg[0]), session=Char(arg[1]))
    if _HELP_RE.match(arg) or arg == "--help":
        raise HelpRequested()
    return Request(server=Char(DEFAULT), session=Name(arg))
