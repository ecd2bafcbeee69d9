"""Wait for an appended file to be closed by the namenode"""

import logging
import time
from enum import Enum

from .errors import HDFSShellError

logger = logging.getLogger(__name__)

DEFAULT_LEASE_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 1.0


class LeaseState(Enum):
    REQUESTING = "requesting"
    POLLING = "polling"
    DONE = "done"


class LeaseOutcome(Enum):
    CLOSED = "closed"
    TIMED_OUT = "timed out"


class LeaseWaiter:
    """Poll the remote service until a file reports itself closed.

    The wait is bounded: once ``timeout`` seconds have elapsed the waiter
    stops and reports ``LeaseOutcome.TIMED_OUT``. Callers carry on the same way
    in both cases; the outcome only tells them whether to warn.
    """

    def __init__(
        self,
        client,
        timeout: float = DEFAULT_LEASE_TIMEOUT,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock=time.monotonic,
        sleep=time.sleep,
    ):
        self.client = client
        self.timeout = timeout
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self.state = LeaseState.DONE

    def wait(self, path: str) -> LeaseOutcome:
        self.state = LeaseState.REQUESTING
        try:
            self.client.recover_lease(path)
        except HDFSShellError as e:
            logger.warning("lease recovery request for %s failed: %s", path, e)

        self.state = LeaseState.POLLING
        start = self.clock()
        while True:
            if self.client.is_file_closed(path):
                self.state = LeaseState.DONE
                return LeaseOutcome.CLOSED

            elapsed = self.clock() - start
            if elapsed >= self.timeout:
                self.state = LeaseState.DONE
                logger.warning("%s still open after %.0fs, giving up", path, elapsed)
                return LeaseOutcome.TIMED_OUT

            self.sleep(min(self.interval, self.timeout - elapsed))
