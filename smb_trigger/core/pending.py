"""
Thread-safe set of filenames currently under stability tracking.

The dispatcher inserts names, monitors remove them when they finish
and session teardown clears the set. Entries are keyed by filename
only, so equal leaf names in different subfolders share one entry.
"""

import threading
from typing import FrozenSet, Set


class PendingSet:
    """De-duplication guard for in-flight filenames."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._names: Set[str] = set()

    def contains(self, filename: str) -> bool:
        """Check whether a monitor is active for this filename."""
        with self._lock:
            return filename in self._names

    def add(self, filename: str) -> None:
        """Add a filename; no-op if it is already present."""
        with self._lock:
            self._names.add(filename)

    def add_if_absent(self, filename: str) -> bool:
        """Atomically add a filename.

        Returns:
            True if the name was added, False if it was already pending.
        """
        with self._lock:
            if filename in self._names:
                return False
            self._names.add(filename)
            return True

    def remove(self, filename: str) -> None:
        """Remove a filename; no-op if it is not present."""
        with self._lock:
            self._names.discard(filename)

    def clear(self) -> None:
        """Drop every entry. Only used at session teardown."""
        with self._lock:
            self._names.clear()

    def snapshot(self) -> FrozenSet[str]:
        """Return a copy of the current entries."""
        with self._lock:
            return frozenset(self._names)

    def __contains__(self, filename: object) -> bool:
        with self._lock:
            return filename in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)
