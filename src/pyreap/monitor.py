"""Polling loop that terminates processes matching a pattern."""

import logging
import os
import re
import threading
import time
from collections.abc import Callable

import psutil

from pyreap.collector import collect_processes
from pyreap.models import ColumnLayout, ProcessRecord

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0


class InvalidPatternError(ValueError):
    """Raised when the process pattern is not a valid regular expression."""


def terminate_process(pid: str) -> bool:
    """
    Send the default termination signal to ``pid``.

    Returns:
        True if the signal was delivered, False otherwise. Never raises.
    """
    try:
        psutil.Process(int(pid)).terminate()
    except (psutil.NoSuchProcess, psutil.AccessDenied, ValueError, OSError):
        # ZombieProcess is a NoSuchProcess
        logger.debug("Could not terminate process %s", pid, exc_info=True)
        return False
    return True


class ProcessReaper:
    """
    Periodically terminates every process whose command line matches a pattern.

    The reaper never terminates itself, nor any process it is the direct
    parent of (such as the ``ps`` it runs to list processes). Ids are
    compared as text, exactly as ``ps`` prints them.
    """

    def __init__(
        self,
        pattern: str | re.Pattern[str],
        layout: ColumnLayout | None = None,
        interval: float = DEFAULT_INTERVAL,
        own_pid: str | None = None,
        collect: Callable[[ColumnLayout], list[ProcessRecord]] = collect_processes,
        terminate: Callable[[str], bool] = terminate_process,
    ) -> None:
        """
        Initialize the ProcessReaper.

        Args:
            pattern: Regular expression searched for in each command line.
            layout: ps column layout. Detected from the platform if omitted.
            interval: Seconds between two polls. Default 5.0s.
            own_pid: Id excluded from termination. Defaults to this process.
            collect: Returns the current process snapshot for a layout.
            terminate: Terminates a process id, returning whether it worked.

        Raises:
            InvalidPatternError: If ``pattern`` does not compile.
        """
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as exc:
                raise InvalidPatternError(f"invalid regexp pattern: {exc}") from exc
        self._pattern = pattern
        self._layout = layout if layout is not None else ColumnLayout.detect()
        self._interval = interval
        self._own_pid = own_pid if own_pid is not None else str(os.getpid())
        self._collect = collect
        self._terminate = terminate
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def pattern(self) -> re.Pattern[str]:
        return self._pattern

    @property
    def layout(self) -> ColumnLayout:
        return self._layout

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def own_pid(self) -> str:
        return self._own_pid

    @property
    def is_running(self) -> bool:
        """Check if the reaper thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def is_excluded(self, record: ProcessRecord) -> bool:
        """True for this process and its direct children."""
        return record.process_id == self._own_pid or record.parent_id == self._own_pid

    def matches(self, record: ProcessRecord) -> bool:
        return self._pattern.search(record.command) is not None

    def run_once(self) -> list[ProcessRecord]:
        """
        Run a single poll: snapshot, filter, terminate.

        Matches are handled in listing order. A failed termination is not
        retried.

        Returns:
            The records that were terminated.
        """
        killed: list[ProcessRecord] = []
        for record in self._collect(self._layout):
            if self.is_excluded(record):
                continue
            if not self.matches(record):
                continue
            if self._terminate(record.process_id):
                logger.info("killed %s", record.command)
                killed.append(record)
        return killed

    def run(self, stop_event: threading.Event | None = None) -> None:
        """
        Poll every ``interval`` seconds until ``stop_event`` is set.

        The first poll happens one interval after the call. A poll that
        overruns the interval delays the next one instead of skipping it.
        Without a stop event this never returns.
        """
        if stop_event is None:
            stop_event = threading.Event()

        next_tick = time.monotonic() + self._interval
        while not stop_event.wait(timeout=max(0.0, next_tick - time.monotonic())):
            try:
                self.run_once()
            except Exception:
                # Keep polling whatever an injected collaborator raises
                logger.debug("Poll failed", exc_info=True)

            next_tick += self._interval
            next_tick = max(next_tick, time.monotonic())

    def start(self) -> None:
        """Start polling in a background daemon thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            args=(self._stop_event,),
            daemon=True,
            name="ProcessReaper",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the background thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
