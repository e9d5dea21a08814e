"""
Share client interfaces and a watchdog-backed client for mounted shares.

The core only needs two primitives from a share session: a change
notification subscription and a way to open a file and read its size.
IShareClient describes both. LocalShareClient implements them for a
share that is mounted into the local filesystem (CIFS mount, NAS
folder, or a plain local directory), using watchdog observers and
translating their events into SMB2-style change records.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from smb_trigger.config.constants import (
    ACTION_NAMES,
    FILE_ACTION_ADDED,
    FILE_ACTION_MODIFIED,
    FILE_ACTION_REMOVED,
    FILE_ACTION_RENAMED_NEW_NAME,
    FILE_ACTION_RENAMED_OLD_NAME,
)

logger = logging.getLogger(__name__)

# Callback receiving one notification: {"data": [record, ...]}
BatchCallback = Callable[[Dict[str, Any]], None]
Unsubscribe = Callable[[], None]


class IFileHandle(ABC):
    """An open file on the share."""

    @property
    @abstractmethod
    def file_size(self) -> int:
        """Size of the file in bytes at open time."""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the handle still needs closing."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the handle."""
        pass


class IShareClient(ABC):
    """Interface for a connected share session."""

    @abstractmethod
    def watch(
        self, path: str, recursive: bool, on_batch: BatchCallback
    ) -> Unsubscribe:
        """Subscribe to change notifications for a directory.

        Args:
            path: Directory on the share
            recursive: Whether changes in subfolders are reported
            on_batch: Called with {"data": [records]} for each notification

        Returns:
            A callable that cancels the subscription
        """
        pass

    @abstractmethod
    def open(self, path: str) -> IFileHandle:
        """Open a file for size queries.

        Raises:
            OSError: If the file is missing, locked or not accessible.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the session and release the connection."""
        pass


class LocalFileHandle(IFileHandle):
    """File handle backed by a local (or mounted) file object."""

    def __init__(self, fileobj: BinaryIO) -> None:
        self._fileobj = fileobj
        self._size = os.fstat(fileobj.fileno()).st_size

    @property
    def file_size(self) -> int:
        return self._size

    @property
    def is_open(self) -> bool:
        return not self._fileobj.closed

    def close(self) -> None:
        self._fileobj.close()


class ChangeRecordHandler(FileSystemEventHandler):
    """Translate watchdog events into SMB2-style change records.

    Filenames are reported relative to the watched directory with
    forward slashes, like SMB2 FILE_NOTIFY_INFORMATION entries.
    """

    def __init__(self, watched_dir: Path, on_batch: BatchCallback) -> None:
        super().__init__()
        self.watched_dir = watched_dir
        self.on_batch = on_batch

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._deliver([self._record(FILE_ACTION_ADDED, event.src_path)])

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._deliver([self._record(FILE_ACTION_REMOVED, event.src_path)])

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._deliver([self._record(FILE_ACTION_MODIFIED, event.src_path)])

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._deliver(
            [
                self._record(FILE_ACTION_RENAMED_OLD_NAME, event.src_path),
                self._record(FILE_ACTION_RENAMED_NEW_NAME, event.dest_path),
            ]
        )

    def _record(self, action: int, src_path: Union[str, bytes]) -> Dict[str, Any]:
        path = Path(os.fsdecode(src_path))
        try:
            filename = path.relative_to(self.watched_dir).as_posix()
        except ValueError:
            filename = path.name
        return {
            "action": action,
            "actionName": ACTION_NAMES[action],
            "filename": filename,
        }

    def _deliver(self, records: List[Dict[str, Any]]) -> None:
        try:
            self.on_batch({"data": records})
        except Exception as e:
            # Keep the observer thread alive
            logger.error(f"Change callback raised: {e}", exc_info=True)


class LocalShareClient(IShareClient):
    """Share client for a share mounted into the local filesystem.

    Attributes:
        root: Directory that share paths are resolved against.
        use_polling: Use watchdog's PollingObserver, which also sees
            changes on network mounts that do not deliver native events.
    """

    def __init__(
        self,
        root: Optional[Union[str, Path]] = None,
        use_polling: bool = False,
        polling_timeout: float = 1.0,
    ) -> None:
        """Connect to a mounted share.

        Args:
            root: Mount point of the share (default: current directory)
            use_polling: Poll the directory instead of using native events
            polling_timeout: Interval of the polling observer in seconds

        Raises:
            FileNotFoundError: If the root is not an accessible directory.
        """
        self.root = Path(root) if root is not None else Path.cwd()
        if not self.root.is_dir():
            raise FileNotFoundError(f"Share root is not a directory: {self.root}")
        self.use_polling = use_polling
        self.polling_timeout = polling_timeout
        self._lock = threading.Lock()
        self._observers: List[Any] = []
        self._closed = False

    def resolve(self, path: str) -> Path:
        """Map a share path onto the local mount."""
        return self.root / path.lstrip("/")

    def watch(
        self, path: str, recursive: bool, on_batch: BatchCallback
    ) -> Unsubscribe:
        watched_dir = self.resolve(path)
        if not watched_dir.is_dir():
            raise FileNotFoundError(
                f"Watched path is not a directory: {watched_dir}"
            )

        if self.use_polling:
            observer = PollingObserver(timeout=self.polling_timeout)
        else:
            observer = Observer()
        handler = ChangeRecordHandler(watched_dir, on_batch)
        observer.schedule(handler, str(watched_dir), recursive=recursive)
        observer.start()
        logger.debug(
            f"Watching {watched_dir} (recursive={recursive}, polling={self.use_polling})"
        )

        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer not in self._observers:
                    return
                self._observers.remove(observer)
            _stop_observer(observer)

        return unsubscribe

    def open(self, path: str) -> IFileHandle:
        fileobj = open(self.resolve(path), "rb")
        try:
            return LocalFileHandle(fileobj)
        except BaseException:
            fileobj.close()
            raise

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            observers = list(self._observers)
            self._observers.clear()
        for observer in observers:
            observer.stop()
        for observer in observers:
            if observer is not threading.current_thread():
                observer.join()


def _stop_observer(observer: Any) -> None:
    """Stop an observer, joining it unless called from its own thread.

    Handlers run on the observer thread, so a sink that tears the session
    down from there must not wait for itself.
    """
    observer.stop()
    if observer is not threading.current_thread():
        observer.join()
