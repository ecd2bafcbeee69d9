"""REPL Command Handlers"""

import logging
from typing import List

from rich.console import Console
from rich.markup import escape

from .errors import AlreadyExistsError, HDFSShellError, NotFoundError
from .lease import LeaseOutcome
from .parser import CommandParser
from .paths import (
    bare_name,
    list_local,
    local_child,
    remote_child,
    resolve_local_cd,
    resolve_remote_cd,
)
from .render import print_listing
from .transfer import TransferEngine

logger = logging.getLogger(__name__)

console = Console()

HELP_TEXT = """
What would you like to do? Options:
 mkdir "catalog name"                      create a directory in HDFS
 put "local file name"                     upload a local file to HDFS
 get "HDFS file name"                      download a file from HDFS
 append "local file name" "HDFS file name" append a local file to a file in HDFS
 delete "HDFS file name"                   delete a file or directory in HDFS
 ls                                        list the current HDFS directory
 cd "catalog name"                         change HDFS directory (".." goes up, no argument prints it)
 lls                                       list the current local directory
 lcd "local catalog name"                  change local directory (".." goes up, no argument prints it)
 help                                      show this help again
 exit                                      quit"""

USAGE = {
    "mkdir": 'mkdir "catalog name"',
    "put": 'put "local file name"',
    "get": 'get "HDFS file name"',
    "append": 'append "local file name" "HDFS file name"',
    "delete": 'delete "HDFS file name"',
    "ls": "ls",
    "cd": 'cd ["catalog name"]',
    "lls": "lls",
    "lcd": 'lcd ["local catalog name"]',
    "help": "help",
    "exit": "exit",
}


class CommandHandler:
    """Handler for REPL commands

    Holds the session state: the remote and local working directories. Both
    only change through a successful cd/lcd, so they always name a directory
    that existed when it was entered.
    """

    def __init__(self, client, remote_cwd: str, local_cwd: str, engine=None, output=None):
        self.client = client
        self.remote_cwd = remote_cwd
        self.local_cwd = local_cwd
        self.engine = engine or TransferEngine(client)
        self.console = output or console
        self.commands = {
            "mkdir": self.cmd_mkdir,
            "put": self.cmd_put,
            "get": self.cmd_get,
            "append": self.cmd_append,
            "delete": self.cmd_delete,
            "ls": self.cmd_ls,
            "cd": self.cmd_cd,
            "lls": self.cmd_lls,
            "lcd": self.cmd_lcd,
            "help": self.cmd_help,
            "exit": self.cmd_exit,
        }

    def execute(self, line: str) -> bool:
        """Execute a command. Returns False if should exit."""
        command = CommandParser.tokenize(line)
        if not command.name:
            return True

        handler = self.commands.get(command.name)
        if handler is None:
            self.console.print(
                f"[red]Did not recognise command: {escape(command.name)}[/red]", highlight=False
            )
            self.console.print("Type 'help' for available commands", highlight=False)
            return True

        try:
            return handler(command.args)
        except (HDFSShellError, OSError) as e:
            logger.debug("%s failed", command.name, exc_info=True)
            self.console.print(f"[red]{command.name}: {escape(str(e))}[/red]", highlight=False)
            return True
        except Exception as e:
            logger.debug("unexpected error in %s", command.name, exc_info=True)
            self.console.print(f"[red]Error: {escape(str(e))}[/red]", highlight=False)
            return True

    def _check_args(self, name: str, args: List[str], *counts: int) -> bool:
        if len(args) in counts:
            return True
        self.console.print("[red]Wrong input![/red]", highlight=False)
        self.console.print(f"Usage: {escape(USAGE[name])}", highlight=False)
        return False

    def _info(self, message: str) -> None:
        self.console.print(escape(message), highlight=False)

    def cmd_help(self, args: List[str]) -> bool:
        self.console.print(escape(HELP_TEXT), highlight=False)
        return True

    def cmd_exit(self, args: List[str]) -> bool:
        return False

    def cmd_mkdir(self, args: List[str]) -> bool:
        """Create a directory under the remote cwd"""
        if not self._check_args("mkdir", args, 1):
            return True
        path = remote_child(self.remote_cwd, bare_name(args[0]))
        if self.client.exists(path):
            raise AlreadyExistsError(f"Dir {path} already exists")
        self.client.mkdirs(path)
        self._info(f"Created directory {path}")
        return True

    def cmd_put(self, args: List[str]) -> bool:
        """Upload a file from the local cwd into the remote cwd"""
        if not self._check_args("put", args, 1):
            return True
        result = self.engine.put(local_child(self.local_cwd, bare_name(args[0])), self.remote_cwd)
        self._info(f"Uploaded {result.request.source} -> {result.request.dest} ({result.size} bytes)")
        return True

    def cmd_get(self, args: List[str]) -> bool:
        """Download a file from the remote cwd into the local cwd"""
        if not self._check_args("get", args, 1):
            return True
        result = self.engine.get(remote_child(self.remote_cwd, bare_name(args[0])), self.local_cwd)
        self._info(f"Downloaded {result.request.source} -> {result.request.dest} ({result.size} bytes)")
        return True

    def cmd_append(self, args: List[str]) -> bool:
        """Append a local file onto a remote one"""
        if not self._check_args("append", args, 2):
            return True
        source = local_child(self.local_cwd, bare_name(args[0]))
        dest = remote_child(self.remote_cwd, bare_name(args[1]))
        result = self.engine.append(source, dest)
        self._info(f"Appended {result.request.source} -> {result.request.dest} ({result.size} bytes)")
        if result.lease is LeaseOutcome.TIMED_OUT:
            self.console.print(
                f"[yellow]Warning: {escape(result.request.dest)} is still open, "
                "readers may not see the appended data yet[/yellow]",
                highlight=False,
            )
        return True

    def cmd_delete(self, args: List[str]) -> bool:
        """Recursively delete a remote file or directory"""
        if not self._check_args("delete", args, 1):
            return True
        path = remote_child(self.remote_cwd, bare_name(args[0]))
        if not self.client.exists(path):
            raise NotFoundError(f"File {path} does not exist")
        self.client.delete(path, recursive=True)
        self._info(f"Deleted {path}")
        return True

    def cmd_ls(self, args: List[str]) -> bool:
        if not self._check_args("ls", args, 0):
            return True
        if not self.client.is_directory(self.remote_cwd):
            self._info(f"Path {self.remote_cwd} is not a directory")
            return True
        print_listing(self.console, self.client.list_entries(self.remote_cwd))
        return True

    def cmd_cd(self, args: List[str]) -> bool:
        """Change remote directory, or print it when no target is given"""
        if not self._check_args("cd", args, 0, 1):
            return True
        if not args or not args[0]:
            self._info(self.remote_cwd)
            return True
        self.remote_cwd = resolve_remote_cd(self.client, self.remote_cwd, args[0])
        return True

    def cmd_lls(self, args: List[str]) -> bool:
        if not self._check_args("lls", args, 0):
            return True
        print_listing(self.console, list_local(self.local_cwd))
        return True

    def cmd_lcd(self, args: List[str]) -> bool:
        """Change local directory, or print it when no target is given"""
        if not self._check_args("lcd", args, 0, 1):
            return True
        if not args or not args[0]:
            self._info(self.local_cwd)
            return True
        self.local_cwd = resolve_local_cd(self.local_cwd, args[0])
        return True
