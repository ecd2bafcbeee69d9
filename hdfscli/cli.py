"""Main CLI Entry Point"""

import logging
import os
import sys
import tempfile

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markup import escape

from .client import EntryKind, WebHDFSClient
from .commands import HELP_TEXT, CommandHandler
from .config import Config
from .errors import HDFSShellError
from .lease import LeaseWaiter
from .paths import list_local
from .transfer import TransferEngine
from .version import get_version_string

logger = logging.getLogger(__name__)

console = Console()

# Which quoted argument of a command names a remote or a local entry
REMOTE_ARGS = {"get": (0,), "delete": (0,), "cd": (0,), "append": (1,)}
LOCAL_ARGS = {"put": (0,), "lcd": (0,), "append": (0,)}
DIRECTORY_ARGS = ("cd", "lcd")


class HDFSCompleter(Completer):
    """Complete command names and quoted remote/local entry names"""

    def __init__(self, handler):
        self.handler = handler
        self.command_names = list(handler.commands.keys())

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor

        # Still typing the command word
        if '"' not in text:
            word = text.lstrip()
            if " " in word:
                return
            for cmd in self.command_names:
                if cmd.startswith(word):
                    yield Completion(cmd, start_position=-len(word))
            return

        # An even number of quotes means the cursor is between arguments
        quotes = text.count('"')
        if quotes % 2 == 0:
            return
        name = text[: text.find('"')].strip()
        arg_index = quotes // 2
        partial = text[text.rfind('"') + 1 :]

        try:
            if arg_index in REMOTE_ARGS.get(name, ()):
                entries = self.handler.client.list_entries(self.handler.remote_cwd)
            elif arg_index in LOCAL_ARGS.get(name, ()):
                entries = list_local(self.handler.local_cwd)
            else:
                return
        except (HDFSShellError, OSError):
            # If we can't list the directory, just skip completion
            return

        for entry in sorted(entries, key=lambda e: e.name):
            is_dir = entry.kind is EntryKind.DIRECTORY
            if name in DIRECTORY_ARGS and not is_dir:
                continue
            if entry.name.startswith(partial):
                yield Completion(
                    entry.name + '"',
                    start_position=-len(partial),
                    display=entry.name + "/" if is_dir else entry.name,
                )


def _open_history(history_file: str) -> FileHistory:
    """Use the configured history file, falling back to a temporary one"""
    history_path = os.path.expanduser(history_file)
    try:
        os.makedirs(os.path.dirname(history_path) or ".", exist_ok=True)
        with open(history_path, "a"):
            pass
        return FileHistory(history_path)
    except OSError:
        temp_history = tempfile.NamedTemporaryFile(
            mode="w", delete=False, suffix="_hdfs_shell_history"
        )
        temp_history.close()
        console.print(
            f"[yellow]Warning: Cannot use {escape(history_path)}, using temporary history file[/yellow]",
            highlight=False,
        )
        return FileHistory(temp_history.name)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def start_repl(host: str, port: int, username: str, config: Config):
    """Start interactive REPL session"""
    local_dir = os.path.abspath(os.path.expanduser(config.local_dir))
    if not os.path.isdir(local_dir):
        console.print(f"Local directory {escape(local_dir)} does not exist", highlight=False)
        sys.exit(1)

    with WebHDFSClient(
        host,
        port,
        username,
        scheme=config.scheme,
        timeout=config.timeout,
        default_replication=config.replication,
    ) as client:
        try:
            home = client.get_home_directory()
        except HDFSShellError as e:
            console.print(f"Failed to connect to {client.api_base}\n{escape(str(e))}", highlight=False)
            sys.exit(1)

        console.print(f"[dim]Client: {get_version_string()}[/dim]", highlight=False)
        console.print(f"Connected to {client.api_base} as {escape(username)}", highlight=False)
        logger.info("remote home %s, local directory %s", home, local_dir)

        waiter = LeaseWaiter(client, timeout=config.lease_timeout, interval=config.poll_interval)
        handler = CommandHandler(client, home, local_dir, engine=TransferEngine(client, waiter))
        console.print(escape(HELP_TEXT), highlight=False)
        print()

        session = PromptSession(
            history=_open_history(config.history_file),
            auto_suggest=AutoSuggestFromHistory(),
            completer=HDFSCompleter(handler),
            complete_while_typing=False,
        )

        # REPL loop
        while True:
            try:
                line = session.prompt(f"hdfs:{handler.remote_cwd}> ")
                if not handler.execute(line):
                    break
            except KeyboardInterrupt:
                console.print("\nUse 'exit' to leave", highlight=False)
                continue
            except EOFError:
                console.print("\nGoodbye!", highlight=False)
                break
            except Exception as e:
                console.print(f"Unexpected error: {escape(str(e))}", highlight=False)


@click.command()
@click.version_option(version=get_version_string(), prog_name="hdfs-shell")
@click.argument("host")
@click.argument("port", type=click.IntRange(1, 65535))
@click.argument("username")
@click.option("--scheme", type=click.Choice(["http", "https"]), default=None,
              help="WebHDFS scheme [env HDFS_SHELL_SCHEME, default: http]")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Request timeout in seconds [env HDFS_SHELL_TIMEOUT, default: 30]")
@click.option("--replication", type=click.IntRange(min=1), default=None,
              help="Replication restored by append [env HDFS_SHELL_REPLICATION, default: namenode's]")
@click.option("--lease-timeout", type=click.FloatRange(min=0), default=None,
              help="Seconds to wait for an appended file to close [env HDFS_SHELL_LEASE_TIMEOUT, default: 60]")
@click.option("--poll-interval", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Seconds between close checks [env HDFS_SHELL_POLL_INTERVAL, default: 1]")
@click.option("--local-dir", default=None,
              help="Initial local directory [env HDFS_SHELL_LOCAL_DIR, default: home]")
@click.option("--history-file", default=None,
              help="Command history file [env HDFS_SHELL_HISTORY, default: ~/.hdfs_shell_history]")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Log level [env HDFS_SHELL_LOG_LEVEL, default: WARNING]")
def main(host, port, username, **options):
    """Interactive shell for HDFS at HOST:PORT (the namenode's WebHDFS port) as USERNAME"""
    try:
        config = Config.from_args(**options)
    except ValueError as e:
        raise click.UsageError(str(e))
    _configure_logging(config.log_level)
    start_repl(host, port, username, config)


if __name__ == "__main__":
    main()
