"""Change notification dispatcher with in-flight de-duplication.

This module provides the ChangeDispatcher class which consumes batches of
raw change records delivered by the share client. It classifies each
record, filters by the watched event kind and either emits an event
right away or hands newly created files to a StabilityMonitor. Errors
are caught and logged per record so one bad entry never costs the rest
of the batch, and the notification callback never raises.
"""

import logging
import threading
import time
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterable, List, Optional, Union

from smb_trigger.config.constants import MONITOR_JOIN_TIMEOUT
from smb_trigger.core.events import (
    EmittedEvent,
    EventKind,
    RawChangeRecord,
    classify,
)
from smb_trigger.core.monitor import EmitCallback, StabilityMonitor
from smb_trigger.core.pending import PendingSet
from smb_trigger.core.share import IShareClient

logger = logging.getLogger(__name__)

MonitorFactory = Callable[..., StabilityMonitor]


class ChangeDispatcher:
    """Route raw change records to immediate emission or stability tracking.

    Attributes:
        client: Share client handed to stability monitors.
        pending: Filenames currently under stability tracking.
        path: Watched directory, reported as the event path.
        event: The only event kind that is emitted.
        wait_for_completion: Track created files until they stop growing.
        wait_duration_ms: Poll interval for stability monitors.
        max_polls: Optional sample limit for stability monitors.
        emit: Event sink.
    """

    def __init__(
        self,
        client: IShareClient,
        pending: PendingSet,
        path: str,
        event: Union[EventKind, str],
        emit: EmitCallback,
        wait_for_completion: bool = True,
        wait_duration_ms: float = 5000,
        max_polls: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        monitor_factory: MonitorFactory = StabilityMonitor,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: Share client used by stability monitors.
            pending: Shared pending set of the watch session.
            path: Watched directory on the share.
            event: Event kind to emit (created, deleted or updated).
            emit: Receives every emitted event.
            wait_for_completion: Only applies when event is created.
            wait_duration_ms: Interval between size samples.
            max_polls: Give up on a file after this many samples.
            logger: Logger to use instead of the module logger.
            monitor_factory: Builds monitors; replaceable in tests.
        """
        self.client = client
        self.pending = pending
        self.path = path
        self.event = EventKind(event)
        self.emit = emit
        self.wait_for_completion = wait_for_completion
        self.wait_duration_ms = wait_duration_ms
        self.max_polls = max_polls
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.monitor_factory = monitor_factory

        # Guards _closed and immediate emission; reentrant so a sink may close us
        self._emit_lock = threading.RLock()
        self._closed = False
        self._monitors_lock = threading.Lock()
        self._monitors: List[StabilityMonitor] = []

    @property
    def tracks_stability(self) -> bool:
        return self.wait_for_completion and self.event is EventKind.CREATED

    @property
    def closed(self) -> bool:
        return self._closed

    def handle_notification(self, response: Any) -> None:
        """Callback for the share client's change subscription.

        Accepts {"data": [...]} mappings or objects with a data
        attribute. Malformed notifications are skipped.

        Note:
            Never raises, so the subscription stays alive.
        """
        try:
            if isinstance(response, Mapping):
                data = response.get("data")
            else:
                data = getattr(response, "data", None)

            if not _is_batch(data):
                self.logger.debug(f"Skipping malformed notification: {response!r}")
                return

            self.dispatch(data)
        except Exception as e:
            self.logger.error(f"Error in change notification callback: {e}", exc_info=True)

    def dispatch(self, batch: Iterable[Any]) -> int:
        """Process a batch of raw change records.

        Args:
            batch: Raw records (RawChangeRecord instances or mappings).

        Returns:
            Number of events emitted immediately. Events confirmed later
            by stability monitors are not counted.
        """
        emitted = 0
        if self.closed:
            return emitted
        for raw in batch:
            try:
                if self._process_record(raw):
                    emitted += 1
            except Exception as e:
                self.logger.error(f"Error processing change {raw!r}: {e}", exc_info=True)
        return emitted

    def _process_record(self, raw: Any) -> bool:
        record = RawChangeRecord.from_raw(raw)
        kind = classify(record.action)

        self.logger.debug(
            f"Action: {record.action} | {record.action_name} | "
            f"Looking for: {self.event.value}"
        )

        if kind is None or kind is not self.event:
            return False

        if self.pending.contains(record.filename):
            self.logger.debug(f"Already tracking: {record.filename}")
            return False

        if kind is EventKind.CREATED and self.tracks_stability:
            self._start_monitor(record)
            return False

        with self._emit_lock:
            if self._closed:
                return False
            self.emit(EmittedEvent(event=kind, filename=record.filename, path=self.path))
        return True

    def _start_monitor(self, record: RawChangeRecord) -> None:
        if not self.pending.add_if_absent(record.filename):
            # Another batch registered the name since the contains() check
            return

        try:
            monitor = self.monitor_factory(
                client=self.client,
                pending=self.pending,
                directory=self.path,
                filename=record.filename,
                action=record.action,
                wait_duration_ms=self.wait_duration_ms,
                emit=self.emit,
                max_polls=self.max_polls,
                logger=self.logger,
            )
            with self._monitors_lock:
                if self.closed:
                    self.pending.remove(record.filename)
                    return
                self._prune()
                self._monitors.append(monitor)
                monitor.start()
        except Exception:
            self.pending.remove(record.filename)
            raise

        self.logger.debug(f"Waiting for {record.filename} to stabilize")

    def active_monitors(self) -> List[StabilityMonitor]:
        """Return monitors that are still tracking a file."""
        with self._monitors_lock:
            self._prune()
            return list(self._monitors)

    def close(self, join_timeout: float = MONITOR_JOIN_TIMEOUT) -> int:
        """Stop dispatching and cancel all monitors.

        After this returns no event is emitted, neither immediately nor
        by a stability monitor. Records delivered later are ignored.

        Returns:
            Number of monitors that were cancelled while still growing.
        """
        with self._emit_lock:
            self._closed = True
        return self.cancel_all(join_timeout)

    def cancel_all(self, join_timeout: float = MONITOR_JOIN_TIMEOUT) -> int:
        """Cancel every live monitor and wait for their threads.

        All joins share one deadline, so teardown takes at most
        join_timeout no matter how many monitors are stuck.

        Returns:
            Number of monitors that were still growing when cancelled.
        """
        with self._monitors_lock:
            monitors = list(self._monitors)
            self._monitors.clear()

        cancelled = 0
        for monitor in monitors:
            if not monitor.is_terminal:
                cancelled += 1
            monitor.cancel()
        deadline = time.monotonic() + join_timeout
        for monitor in monitors:
            monitor.join(max(0.0, deadline - time.monotonic()))
        return cancelled

    def _prune(self) -> None:
        """Drop finished monitors. Caller holds _monitors_lock."""
        self._monitors = [m for m in self._monitors if not m.is_terminal]


def _is_batch(data: Any) -> bool:
    return isinstance(data, Sequence) and not isinstance(data, (str, bytes, bytearray))
