from __future__ import annotations


class StmuxError(Exception):
    """Base class for errors that end the run with a message."""

    exit_code = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(StmuxError):
    exit_code = 2


class NoSocketDirectoryError(StmuxError):
    pass


class NoInteractiveToolError(StmuxError):
    pass


class ServerSlotsExhaustedError(StmuxError):
    pass


class ProbeTimeoutError(StmuxError, TimeoutError):
    """Raised when a tmux probe did not answer within the configured timeout."""


class TmuxNotFoundError(StmuxError):
    exit_code = 127


class UserCancelled(Exception):
    """The interactive menu was dismissed; the run ends without doing anything."""


class HelpRequested(Exception):
    pass
