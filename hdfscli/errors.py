"""
Exceptions raised by the shell and its remote client.

Every command handler catches ``HDFSShellError`` and prints it as a single
line, so the REPL keeps running whatever goes wrong inside a command.
"""


class HDFSShellError(Exception):
    """Base exception class for shell errors."""

    pass


class NotFoundError(HDFSShellError):
    """A source file or navigation target does not exist."""

    pass


class AlreadyExistsError(HDFSShellError):
    """A transfer or mkdir destination is already present."""

    pass


class InvalidInputError(HDFSShellError):
    """Malformed command input or an unusable navigation target."""

    pass


class RemoteError(HDFSShellError):
    """The remote service rejected a request."""

    pass


class RemoteUnavailableError(RemoteError):
    """The remote service could not be reached."""

    pass
