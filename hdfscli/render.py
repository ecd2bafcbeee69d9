"""Listing output for ls and lls"""

from typing import Iterable, List

from rich.console import Console
from rich.markup import escape

from .client import Entry, EntryKind

# Groups are printed in this order, names sorted inside each group
KIND_ORDER = [EntryKind.DIRECTORY, EntryKind.SYMLINK, EntryKind.FILE, EntryKind.OTHER]


def group_entries(entries: Iterable[Entry]) -> List[Entry]:
    return sorted(entries, key=lambda e: (KIND_ORDER.index(e.kind), e.name))


def format_entry(entry: Entry) -> str:
    name = escape(entry.name)
    if entry.kind is EntryKind.DIRECTORY:
        return f"    \U0001F4C1 [bold cyan]{name}/[/bold cyan]"
    elif entry.kind is EntryKind.SYMLINK:
        return f"    \U0001F4C2 [cyan]{name}@[/cyan]"
    elif entry.kind is EntryKind.FILE:
        return f"    \U0001F4C4 {name}"
    return f"    [yellow]?[/yellow] {name} (neither file nor directory)"


def print_listing(console: Console, entries: Iterable[Entry]) -> None:
    entries = group_entries(entries)
    if not entries:
        console.print("    (empty)", highlight=False)
        return
    for entry in entries:
        console.print(format_entry(entry), highlight=False)
