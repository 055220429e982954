"""Bound on concurrently executing appends.

The append path is a read-modify-write of the whole resource with no lock
on the resource itself. Running at most one append at a time is what keeps
two writers from both passing the gate and one silently overwriting the
other. The bound is global, which is only correct because the service
guards exactly one resource.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from textappend.exceptions import AppendSlotBusy

logger = logging.getLogger(__name__)


class AppendSlot:
    """Admits at most ``max_inflight`` appends at once."""

    def __init__(self, max_inflight: int = 1, wait_seconds: float = 30.0) -> None:
        """Create the slot.

        Args:
            max_inflight: Concurrent appends allowed. Values above 1 let
                read-modify-write sequences interleave and lose updates.
            wait_seconds: How long a caller waits for a free slot.
        """
        if max_inflight < 1:
            raise ValueError("max_inflight must be at least 1")
        if max_inflight > 1:
            logger.warning(
                "Append concurrency set to %d: concurrent appends can interleave "
                "and silently lose updates, and the write-rate gate can be bypassed",
                max_inflight,
            )
        self.max_inflight = max_inflight
        self.wait_seconds = wait_seconds
        self._semaphore = threading.BoundedSemaphore(max_inflight)

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold a slot for the duration of the block.

        Raises:
            AppendSlotBusy: No slot freed up within ``wait_seconds``.
        """
        if not self._semaphore.acquire(timeout=self.wait_seconds):
            raise AppendSlotBusy(self.wait_seconds)
        try:
            yield
        finally:
            self._semaphore.release()
