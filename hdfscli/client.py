"""WebHDFS API Client"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional
from urllib.parse import quote

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from .errors import (
    AlreadyExistsError,
    NotFoundError,
    RemoteError,
    RemoteUnavailableError,
)

logger = logging.getLogger(__name__)

# Chunk size used for streamed reads and writes
BUFFER_SIZE = 8192

# dfs.replication default when the namenode cannot report its own
DFS_REPLICATION_DEFAULT = 3


class EntryKind(Enum):
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    FILE = "file"
    OTHER = "other"


class Entry(NamedTuple):
    name: str
    kind: EntryKind


_ENTRY_KINDS = {
    "DIRECTORY": EntryKind.DIRECTORY,
    "SYMLINK": EntryKind.SYMLINK,
    "FILE": EntryKind.FILE,
}

# RemoteException class names mapped onto the shell's error taxonomy
_REMOTE_EXCEPTIONS = {
    "FileNotFoundException": NotFoundError,
    "FileAlreadyExistsException": AlreadyExistsError,
}


class WebHDFSClient:
    """Client for the HDFS namenode's WebHDFS REST API"""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        scheme: str = "http",
        timeout: float = 30,
        default_replication: Optional[int] = None,
    ):
        """
        Initialize WebHDFS client.

        Args:
            host: Namenode host name
            port: Namenode HTTP port (9870 on Hadoop 3, 50070 on Hadoop 2)
            username: User name sent with every request (simple auth)
            scheme: "http" or "https"
            timeout: Request timeout in seconds (default: 30)
            default_replication: Replication restored by append; when None the
                namenode's server defaults are used
        """
        self.host = host
        self.port = port
        self.username = username
        self.api_base = f"{scheme}://{host}:{port}/webhdfs/v1"
        self.session = requests.Session()
        self.timeout = timeout
        self.default_replication = default_replication

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP session"""
        self.session.close()

    def _url(self, path: str) -> str:
        return self.api_base + quote(path)

    def _handle_request_error(self, e: Exception) -> None:
        """Convert request exceptions to shell errors"""
        if isinstance(e, ConnectionError):
            raise RemoteUnavailableError(
                f"Connection refused - namenode not reachable at {self.host}:{self.port}"
            ) from e
        elif isinstance(e, Timeout):
            raise RemoteUnavailableError(f"Request timeout after {self.timeout}s") from e
        elif isinstance(e, requests.exceptions.HTTPError):
            if e.response is None:
                raise RemoteError("HTTP error") from e
            status_code = e.response.status_code

            # WebHDFS reports failures as a serialized Java exception
            try:
                remote = e.response.json().get("RemoteException") or {}
            except ValueError:
                remote = {}
            if remote:
                error_cls = _REMOTE_EXCEPTIONS.get(remote.get("exception"), RemoteError)
                raise error_cls(remote.get("message") or remote.get("exception")) from e

            if status_code == 404:
                raise NotFoundError("No such file or directory") from e
            elif status_code == 403:
                raise RemoteError("Permission denied") from e
            elif status_code == 500:
                raise RemoteError("Internal server error") from e
            elif status_code in (502, 503):
                raise RemoteUnavailableError("Bad Gateway - backend service unavailable") from e
            else:
                raise RemoteError(f"HTTP error {status_code}") from e
        else:
            raise RemoteError(str(e)) from e

    def _request(self, method: str, path: str, op: str, params=None, **kwargs):
        """Send one WebHDFS operation and return the successful response"""
        query = {"op": op, "user.name": self.username}
        if params:
            query.update(params)
        logger.debug("%s %s op=%s", method, path, op)
        try:
            response = self.session.request(
                method, self._url(path), params=query, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response
        except RequestException as e:
            self._handle_request_error(e)

    def _write(self, method: str, path: str, op: str, chunks: Iterable[bytes], params=None):
        """Two-step write: the namenode answers with the datanode to send data to"""
        response = self._request(method, path, op, params=params, allow_redirects=False)
        location = response.headers.get("Location")
        if not location:
            # Servers asked for noredirect answer with a JSON body instead
            try:
                location = response.json().get("Location")
            except ValueError:
                location = None
        if not location:
            raise RemoteError(f"{op}: namenode returned no datanode location for {path}")

        try:
            data_response = self.session.request(
                method,
                location,
                data=chunks,
                headers={"Content-Type": "application/octet-stream"},
                timeout=self.timeout,
            )
            data_response.raise_for_status()
        except RequestException as e:
            self._handle_request_error(e)

    def _boolean(self, response) -> bool:
        return bool(response.json().get("boolean", False))

    def get_home_directory(self) -> str:
        """Return the home directory of the connected user"""
        response = self._request("GET", "/", "GETHOMEDIRECTORY")
        return response.json()["Path"]

    def status(self, path: str) -> Dict[str, Any]:
        """Get file/directory information"""
        response = self._request("GET", path, "GETFILESTATUS")
        return response.json()["FileStatus"]

    def exists(self, path: str) -> bool:
        try:
            self.status(path)
            return True
        except NotFoundError:
            return False

    def is_directory(self, path: str) -> bool:
        try:
            return self.status(path).get("type") == "DIRECTORY"
        except NotFoundError:
            return False

    def list_entries(self, path: str) -> List[Entry]:
        """List directory contents"""
        response = self._request("GET", path, "LISTSTATUS")
        statuses = response.json().get("FileStatuses", {}).get("FileStatus") or []
        return [
            Entry(s.get("pathSuffix", ""), _ENTRY_KINDS.get(s.get("type"), EntryKind.OTHER))
            for s in statuses
        ]

    def mkdirs(self, path: str) -> bool:
        """Create a directory and any missing parents"""
        return self._boolean(self._request("PUT", path, "MKDIRS"))

    def delete(self, path: str, recursive: bool = False) -> bool:
        """Remove a file or directory"""
        params = {"recursive": "true" if recursive else "false"}
        return self._boolean(self._request("DELETE", path, "DELETE", params=params))

    def create(self, path: str, chunks: Iterable[bytes]) -> None:
        """Create a new file from a stream of chunks, never overwriting"""
        self._write("PUT", path, "CREATE", chunks, params={"overwrite": "false"})

    def append(self, path: str, chunks: Iterable[bytes]) -> None:
        """Append a stream of chunks to an existing file"""
        self._write("POST", path, "APPEND", chunks)

    def open(self, path: str, chunk_size: int = BUFFER_SIZE) -> Iterator[bytes]:
        """Open a file for reading

        Returns:
            Iterator yielding the file content in chunks of at most chunk_size
        """
        response = self._request("GET", path, "OPEN", stream=True)
        return self._iter_response(response, chunk_size)

    def _iter_response(self, response, chunk_size: int) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except RequestException as e:
            self._handle_request_error(e)
        finally:
            response.close()

    def set_replication(self, path: str, replication: int) -> bool:
        params = {"replication": str(replication)}
        return self._boolean(self._request("PUT", path, "SETREPLICATION", params=params))

    def get_default_replication(self, path: str) -> int:
        """Replication factor new blocks of path would get"""
        if self.default_replication is not None:
            return self.default_replication
        try:
            response = self._request("GET", path, "GETSERVERDEFAULTS")
            return int(response.json()["FsServerDefaults"]["replication"])
        except RemoteUnavailableError:
            raise
        except (RemoteError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                "server defaults unavailable (%s), using replication %d; "
                "pass --replication to override",
                e,
                DFS_REPLICATION_DEFAULT,
            )
            return DFS_REPLICATION_DEFAULT

    def is_file_closed(self, path: str) -> bool:
        """Whether the file's last block is complete and no writer holds it"""
        response = self._request("GET", path, "GET_BLOCK_LOCATIONS")
        blocks = response.json().get("LocatedBlocks")
        if not blocks:
            return True
        return not blocks.get("isUnderConstruction", False)

    def recover_lease(self, path: str) -> bool:
        """Ask for the write lease on path to be released

        WebHDFS has no lease recovery operation: the namenode's lease monitor
        reclaims abandoned leases on its own. This only reports whether the
        file is already closed, like DistributedFileSystem.recoverLease does.
        """
        closed = self.is_file_closed(path)
        if not closed:
            logger.debug("lease on %s still held, waiting for the namenode to release it", path)
        return closed
