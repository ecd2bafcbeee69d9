"""In-memory stand-ins for the remote service and the clock"""

import posixpath

from hdfscli.client import Entry, EntryKind
from hdfscli.errors import AlreadyExistsError, NotFoundError, RemoteError


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeHDFS:
    """Implements the WebHDFSClient methods the shell relies on"""

    api_base = "http://fake:9870/webhdfs/v1"

    def __init__(self, home="/home/alice", default_replication=1):
        self.home = home
        self.dirs = {"/"}
        self.files = {}
        self.symlinks = set()
        self.replication = {}
        self.default_replication = default_replication
        self.lease_requests = []
        self.close_checks = 0
        # is_file_closed() answers False this many times before answering True
        self.open_for = 0
        self.closed = False
        self.mkdirs(home)

    def _parent_dir(self, path):
        parent = posixpath.dirname(path)
        if parent not in self.dirs:
            raise NotFoundError(f"Parent directory {parent} does not exist")

    def get_home_directory(self):
        return self.home

    def exists(self, path):
        return path in self.dirs or path in self.files or path in self.symlinks

    def is_directory(self, path):
        return path in self.dirs

    def list_entries(self, path):
        if path not in self.dirs:
            raise NotFoundError(f"File {path} does not exist")
        entries = []
        for names, kind in (
            (self.dirs, EntryKind.DIRECTORY),
            (self.symlinks, EntryKind.SYMLINK),
            (self.files, EntryKind.FILE),
        ):
            for name in names:
                if name != "/" and posixpath.dirname(name) == path:
                    entries.append(Entry(posixpath.basename(name), kind))
        return entries

    def mkdirs(self, path):
        while path not in self.dirs:
            if path in self.files:
                raise RemoteError(f"{path} is a file")
            self.dirs.add(path)
            path = posixpath.dirname(path)
        return True

    def create(self, path, chunks):
        if self.exists(path):
            raise AlreadyExistsError(f"{path} already exists")
        self._parent_dir(path)
        self.files[path] = b"".join(chunks)
        self.replication[path] = self.default_replication

    def append(self, path, chunks):
        if path not in self.files:
            raise NotFoundError(f"File {path} does not exist")
        self.files[path] += b"".join(chunks)

    def open(self, path, chunk_size=8192):
        if path not in self.files:
            raise NotFoundError(f"File {path} does not exist")
        data = self.files[path]
        return iter([data[i:i + chunk_size] for i in range(0, len(data), chunk_size)])

    def delete(self, path, recursive=False):
        doomed = [p for p in self.dirs | set(self.files) | self.symlinks
                  if p == path or p.startswith(path.rstrip("/") + "/")]
        if len(doomed) > 1 and not recursive:
            raise RemoteError(f"{path} is non empty")
        for p in doomed:
            self.dirs.discard(p)
            self.files.pop(p, None)
            self.symlinks.discard(p)
        return bool(doomed)

    def set_replication(self, path, replication):
        self.replication[path] = replication
        return True

    def get_default_replication(self, path):
        return self.default_replication

    def is_file_closed(self, path):
        self.close_checks += 1
        return self.close_checks > self.open_for

    def recover_lease(self, path):
        self.lease_requests.append(path)
        return False

    def close(self):
        self.closed = True
