"""Streamed file transfers between the local disk and HDFS"""

import functools
import logging
import os
import posixpath
from enum import Enum
from typing import BinaryIO, Iterator, NamedTuple, Optional

from .client import BUFFER_SIZE
from .errors import AlreadyExistsError, NotFoundError
from .lease import LeaseOutcome, LeaseWaiter
from .paths import local_child, remote_child

logger = logging.getLogger(__name__)


class TransferMode(Enum):
    PUT = "put"
    GET = "get"
    APPEND = "append"


class TransferRequest(NamedTuple):
    source: str
    dest: str
    mode: TransferMode


class TransferResult(NamedTuple):
    request: TransferRequest
    size: int
    lease: Optional[LeaseOutcome] = None


class _ChunkReader:
    """Iterate over a binary file in fixed-size chunks, counting bytes"""

    def __init__(self, f: BinaryIO, chunk_size: int = BUFFER_SIZE):
        self.f = f
        self.chunk_size = chunk_size
        self.size = 0

    def __iter__(self) -> Iterator[bytes]:
        for chunk in iter(functools.partial(self.f.read, self.chunk_size), b""):
            self.size += len(chunk)
            yield chunk


class TransferEngine:
    """put/get/append without overwriting and without loading whole files"""

    def __init__(self, client, lease_waiter: Optional[LeaseWaiter] = None):
        self.client = client
        self.lease_waiter = lease_waiter or LeaseWaiter(client)

    def put(self, local_source: str, remote_dir: str) -> TransferResult:
        """Upload local_source into remote_dir under its own name

        Raises:
            NotFoundError: local_source is not an existing file
            AlreadyExistsError: the remote destination is already present
        """
        if not os.path.isfile(local_source):
            raise NotFoundError(f"File {local_source} does not exist")
        dest = remote_child(remote_dir, os.path.basename(local_source))
        if self.client.exists(dest):
            raise AlreadyExistsError(f"File {dest} already exists")

        request = TransferRequest(local_source, dest, TransferMode.PUT)
        with open(local_source, "rb") as f:
            reader = _ChunkReader(f)
            self.client.create(dest, reader)
        logger.info("put %s -> %s (%d bytes)", local_source, dest, reader.size)
        return TransferResult(request, reader.size)

    def get(self, remote_source: str, local_dir: str) -> TransferResult:
        """Download remote_source into local_dir under its own name

        Raises:
            NotFoundError: remote_source does not exist
            AlreadyExistsError: the local destination is already present
        """
        if not self.client.exists(remote_source):
            raise NotFoundError(f"File {remote_source} does not exist")
        dest = local_child(local_dir, posixpath.basename(remote_source))
        if os.path.lexists(dest):
            raise AlreadyExistsError(f"File {dest} already exists")

        request = TransferRequest(remote_source, dest, TransferMode.GET)
        size = 0
        # Nothing is created locally unless the remote side could be opened
        chunks = self.client.open(remote_source, BUFFER_SIZE)
        try:
            out = open(dest, "xb")
        except FileExistsError:
            close = getattr(chunks, "close", None)
            if close is not None:
                close()
            raise AlreadyExistsError(f"File {dest} already exists")
        with out:
            for chunk in chunks:
                out.write(chunk)
                size += len(chunk)
        logger.info("get %s -> %s (%d bytes)", remote_source, dest, size)
        return TransferResult(request, size)

    def append(self, local_source: str, remote_dest: str) -> TransferResult:
        """Append local_source's bytes to remote_dest and wait for it to close

        Raises:
            NotFoundError: either side does not exist
        """
        if not os.path.isfile(local_source):
            raise NotFoundError(f"File {local_source} does not exist")
        if not self.client.exists(remote_dest):
            raise NotFoundError(f"File {remote_dest} does not exist")

        # Earlier writers may have left a non-default replication behind
        replication = self.client.get_default_replication(remote_dest)
        self.client.set_replication(remote_dest, replication)

        request = TransferRequest(local_source, remote_dest, TransferMode.APPEND)
        with open(local_source, "rb") as f:
            reader = _ChunkReader(f)
            self.client.append(remote_dest, reader)
        logger.info("append %s -> %s (%d bytes)", local_source, remote_dest, reader.size)

        outcome = self.lease_waiter.wait(remote_dest)
        return TransferResult(request, reader.size, outcome)
