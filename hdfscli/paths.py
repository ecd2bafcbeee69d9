"""Navigation target resolution for the remote and local sides"""

import os
import posixpath
import re
from typing import List

from .client import Entry, EntryKind
from .errors import InvalidInputError, NotFoundError

# "C:", "d:\\data" ... absolute on Windows whatever the current directory is
_DRIVE_ABSOLUTE = re.compile(r"^[a-zA-Z]:")


def remote_child(cwd: str, name: str) -> str:
    """Join name onto a remote directory, normalizing . and .."""
    path = posixpath.normpath(posixpath.join(cwd, name))
    # normpath keeps a leading "//"
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path


def local_child(cwd: str, name: str) -> str:
    return os.path.join(cwd, name)


def bare_name(name: str) -> str:
    """Check that name is a single entry name, not a path

    mkdir, put, get, append and delete only ever act on an entry of the
    current directory; "", "." and ".." would name the directory itself or
    its parent.

    Raises:
        InvalidInputError: name is empty, a dot entry or contains a separator
    """
    if name in ("", ".", "..") or "/" in name or os.sep in name:
        raise InvalidInputError(f"'{name}' is not a file name")
    return name


def resolve_remote_cd(client, current: str, target: str) -> str:
    """Resolve a cd target against the current remote directory

    Relative targets are joined onto current, absolute ones replace it. The
    result must be an existing directory.

    Raises:
        NotFoundError: the target does not exist
        InvalidInputError: the target exists but is not a directory
    """
    if not target:
        return current

    candidate = remote_child(current, target)
    if client.is_directory(candidate):
        return candidate
    if client.exists(candidate):
        raise InvalidInputError(f"{candidate}: Not a directory")
    raise NotFoundError(f"{candidate}: No such directory")


def resolve_local_cd(current: str, target: str) -> str:
    """Resolve an lcd target against the current local directory

    Absolute targets (including drive-letter forms) are taken as they are.
    A relative target is tried under current first, then relative to the
    process working directory.

    Raises:
        NotFoundError: no candidate is an existing directory
    """
    if not target:
        return current

    if _DRIVE_ABSOLUTE.match(target) or os.path.isabs(target):
        candidates = [target]
    else:
        candidates = [os.path.join(current, target), target]

    for candidate in candidates:
        if os.path.isdir(candidate):
            return os.path.abspath(candidate)
    raise NotFoundError(f"{target}: No such local directory")


def list_local(path: str) -> List[Entry]:
    """List a local directory, following symbolic links"""
    entries = []
    with os.scandir(path) as it:
        for item in it:
            if item.is_dir():
                kind = EntryKind.DIRECTORY
            elif item.is_file():
                kind = EntryKind.FILE
            else:
                kind = EntryKind.OTHER
            entries.append(Entry(item.name, kind))
    return entries
