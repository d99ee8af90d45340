from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Sequence

from rich.console import Console

logger = logging.getLogger(__name__)

NEW_CHOICE = "NEW"

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def find_menu_tool(override: Path | None = None) -> Path | None:
    """Locate dialog (preferred) or whiptail."""

    if override is not None:
        return override if override.exists() else None

    candidates: list[Path] = []
    if found := shutil.which("dialog"):
        candidates.append(Path(found))
    candidates.append(Path.home() / "bin" / "dialog")
    if found := shutil.which("whiptail"):
        candidates.append(Path(found))

    for path in candidates:
        if path.exists():
            return path
    return None


class DialogMenu:
    """Single-choice menu backed by dialog or whiptail.

    Both tools print the selected tag on stderr. dialog accepts bare tags with
    `--noitem`; whiptail still expects tag/item pairs, so labels are passed to it.
    """

    def __init__(
        self,
        path: Path,
        *,
        run: Runner = subprocess.run,
        console: Console | None = None,
        height: int = 20,
        width: int = 70,
        list_height: int = 15,
    ) -> None:
        self.path = path
        self._run = run
        self._console = console or Console()
        self.height = height
        self.width = width
        self.list_height = list_height

    @property
    def flavor(self) -> str:
        return "whiptail" if self.path.name.startswith("whiptail") else "dialog"

    def build_command(self, prompt: str, choices: Sequence[tuple[str, str]]) -> list[str]:
        cmd = [str(self.path), "--noitem", "--menu", prompt, str(self.height), str(self.width), str(self.list_height)]
        for value, label in choices:
            if self.flavor == "dialog":
                cmd.append(value)
            else:
                cmd += [value, label]
        return cmd

    def choose(self, prompt: str, choices: Sequence[tuple[str, str]]) -> str | None:
        """Return the chosen value, or None if the menu was cancelled."""

        cmd = self.build_command(prompt, choices)
        logger.debug("menu: %s", cmd)
        with tempfile.TemporaryFile(mode="w+", encoding="utf-8") as err:
            proc = self._run(cmd, stderr=err, text=True)
            err.seek(0)
            selected = err.read().strip()
        self._console.clear()

        if proc.returncode != 0 or not selected:
            return None
        return selected
