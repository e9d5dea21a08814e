"""File stability monitoring for newly created files on a share.

This module provides the StabilityMonitor class which determines when a
file reported as created has been fully written. It samples the file
size at a fixed interval and treats two equal consecutive samples as
"write complete". A file truncated back to zero is treated as an
aborted write, and any failure to open the file ends tracking silently.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from smb_trigger.core.events import EmittedEvent, EventKind, classify
from smb_trigger.core.pending import PendingSet
from smb_trigger.core.share import IFileHandle, IShareClient
from smb_trigger.utils.paths import join_remote_path, readable_error

logger = logging.getLogger(__name__)

EmitCallback = Callable[[EmittedEvent], None]


class MonitorState(Enum):
    """States of a stability monitor. Everything but GROWING is terminal."""

    GROWING = "growing"
    STABLE = "stable"
    ABORTED = "aborted"
    ERROR = "error"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class StabilityMonitor:
    """Track one created file until its size stops changing.

    Each monitor polls on its own daemon thread once started, so slow
    size queries against the share never hold up other monitors or the
    notification callback. Terminal transitions release the filename
    from the pending set.

    Attributes:
        filename: Name reported by the change notification.
        directory: Watched directory the name is relative to.
        action: Raw action code of the notification being confirmed.
        interval: Seconds between two size samples.
        max_polls: Optional number of samples after which tracking
            gives up with TIMED_OUT.
    """

    def __init__(
        self,
        client: IShareClient,
        pending: PendingSet,
        directory: str,
        filename: str,
        action: int,
        wait_duration_ms: float,
        emit: EmitCallback,
        max_polls: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the stability monitor.

        Args:
            client: Share client used to open the file.
            pending: Pending set the filename was registered in.
            directory: Watched directory on the share.
            filename: File to track, relative to directory.
            action: Raw action code that triggered tracking.
            wait_duration_ms: Poll interval in milliseconds.
            emit: Receives the event once the file is stable.
            max_polls: Give up after this many samples (None = never).
            logger: Logger to use instead of the module logger.
        """
        self.client = client
        self.pending = pending
        self.directory = directory
        self.filename = filename
        self.action = action
        self.interval = wait_duration_ms / 1000.0
        self.emit = emit
        self.max_polls = max_polls
        self.logger = logger if logger is not None else logging.getLogger(__name__)

        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state = MonitorState.GROWING
        self._previous_size: Optional[int] = None
        self._poll_count = 0

    @property
    def full_path(self) -> str:
        return join_remote_path(self.directory, self.filename)

    @property
    def state(self) -> MonitorState:
        with self._lock:
            return self._state

    @property
    def previous_size(self) -> Optional[int]:
        with self._lock:
            return self._previous_size

    @property
    def poll_count(self) -> int:
        with self._lock:
            return self._poll_count

    @property
    def is_terminal(self) -> bool:
        return self.state is not MonitorState.GROWING

    def start(self) -> None:
        """Start polling on a background thread."""
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run,
                name=f"stability-monitor:{self.filename}",
                daemon=True,
            )
        self._thread.start()

    def cancel(self) -> None:
        """Stop tracking without emitting.

        Once this returns the monitor will never emit. Cancelling a
        monitor that already reached a terminal state does nothing.
        """
        with self._lock:
            if self._state is MonitorState.GROWING:
                self.logger.debug(f"Stability check cancelled for {self.full_path}")
                self._finish(MonitorState.CANCELLED)
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the polling thread to exit."""
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    def tick(self) -> MonitorState:
        """Take one size sample and advance the state machine.

        Returns:
            The state after this sample.
        """
        if self.is_terminal:
            return self.state

        full_path = self.full_path
        handle: Optional[IFileHandle] = None
        try:
            handle = self.client.open(full_path)
            size = handle.file_size
            self.logger.debug(f"Opened {full_path} ({size})")
        except Exception as e:
            self.logger.debug(f"Error opening {full_path}: {readable_error(e)}")
            with self._lock:
                if self._state is MonitorState.GROWING:
                    self._finish(MonitorState.ERROR)
                return self._state
        finally:
            if handle is not None:
                self._close_handle(handle)

        return self._evaluate(size)

    def _evaluate(self, size: int) -> MonitorState:
        with self._lock:
            if self._state is not MonitorState.GROWING:
                return self._state

            self._poll_count += 1
            previous = self._previous_size

            if previous is None or size > previous:
                self._previous_size = size
            elif size == previous:
                self.logger.debug(f"File {self.full_path} is stable ({size})")
                self._finish(MonitorState.STABLE, size)
                return self._state
            elif previous > 0 and size == 0:
                self.logger.debug(f"File {self.full_path} aborted")
                self._finish(MonitorState.ABORTED)
                return self._state
            else:
                # Shrunk but not emptied: keep comparing against the larger size
                self.logger.debug(
                    f"File {self.full_path} shrank to {size}, keeping {previous}"
                )

            if self.max_polls is not None and self._poll_count >= self.max_polls:
                self.logger.warning(
                    f"Gave up on {self.full_path} after {self._poll_count} size checks"
                )
                self._finish(MonitorState.TIMED_OUT)
            return self._state

    def _finish(self, state: MonitorState, size: Optional[int] = None) -> None:
        """Enter a terminal state. Caller holds the lock."""
        self._state = state
        self._stop_event.set()
        self.pending.remove(self.filename)

        if state is not MonitorState.STABLE:
            return

        kind = classify(self.action) or EventKind.CREATED
        event = EmittedEvent(
            event=kind,
            filename=self.filename,
            path=self.directory,
            file_size=size,
        )
        try:
            self.emit(event)
        except Exception as e:
            self.logger.error(
                f"Event sink failed for {self.full_path}: {e}", exc_info=True
            )

    def _close_handle(self, handle: IFileHandle) -> None:
        try:
            if handle.is_open:
                handle.close()
        except Exception as e:
            self.logger.warning(f"Could not close {self.full_path}: {e}")

    def _run(self) -> None:
        try:
            while not self._stop_event.wait(self.interval):
                if self.tick() is not MonitorState.GROWING:
                    break
        except Exception as e:
            self.logger.error(
                f"Stability check for {self.full_path} crashed: {e}", exc_info=True
            )
            with self._lock:
                if self._state is MonitorState.GROWING:
                    self._finish(MonitorState.ERROR)
