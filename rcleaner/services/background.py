# Background scan task.
#
# ScanTask runs one scan on a daemon thread and hands back exactly one
# outcome through a one-slot queue.  The driving loop calls poll() on each
# tick; poll never blocks.  An exception inside the scan is delivered as an
# Err outcome rather than lost with the thread.
#
# ScanRunner allows one outstanding task at a time.  discard() forgets the
# running task: the thread still finishes, but nobody reads its outcome.

from __future__ import annotations

import queue
import threading
from collections.abc import Callable

from result import Err, Ok, Result

from rcleaner.models.cleanup import CleanupItem
from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError

type ScanOutcome = Result[list[CleanupItem], CleanerError]
type ScanFunction = Callable[[], ScanOutcome]


class ScanTask:
    __slots__ = ("_outcome", "_queue", "_thread")

    def __init__(self, scan: ScanFunction) -> None:
        self._queue: queue.Queue[ScanOutcome] = queue.Queue(maxsize=1)
        self._outcome: ScanOutcome | None = None

        def run() -> None:
            try:
                outcome = scan()
            except Exception as exc:  # noqa: BLE001
                outcome = Err(CleanerError(ErrorCode.IO, f"Scan failed: {exc}"))
            self._queue.put(outcome)

        self._thread = threading.Thread(target=run, name="rcleaner-scan", daemon=True)
        self._thread.start()

    def poll(self) -> ScanOutcome | None:
        """The outcome once the scan has finished, otherwise None."""
        if self._outcome is None:
            try:
                self._outcome = self._queue.get_nowait()
            except queue.Empty:
                return None
        return self._outcome

    def wait(self, timeout: float | None = None) -> ScanOutcome | None:
        self._thread.join(timeout)
        return self.poll()

    @property
    def done(self) -> bool:
        return self.poll() is not None


class ScanRunner:
    """Owns at most one in-flight ScanTask."""

    def __init__(self, scan: ScanFunction) -> None:
        self._scan = scan
        self._task: ScanTask | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done

    def start(self) -> Result[ScanTask, str]:
        if self.running:
            return Err("A scan is already running")
        self._task = ScanTask(self._scan)
        return Ok(self._task)

    def poll(self) -> ScanOutcome | None:
        if self._task is None:
            return None
        outcome = self._task.poll()
        if outcome is not None:
            self._task = None
        return outcome

    def discard(self) -> None:
        self._task = None
