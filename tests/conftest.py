"""
Pytest configuration and shared fixtures
"""

import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from faker import Faker

# Add parent directory to path so we can import smb_trigger
sys.path.insert(0, str(Path(__file__).parent.parent))

from smb_trigger.config.settings import Settings  # noqa: E402
from smb_trigger.core.share import IFileHandle, IShareClient  # noqa: E402


# =============================================================================
# Fake Share Client
# =============================================================================


class FakeFileHandle(IFileHandle):
    """Handle reporting a scripted size."""

    def __init__(self, size: int) -> None:
        self._size = size
        self._open = True

    @property
    def file_size(self) -> int:
        return self._size

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False


class FakeShareClient(IShareClient):
    """In-memory share client with scripted file sizes.

    Each path maps to a list of sizes (or exceptions) consumed one per
    open(); the last entry repeats once the list is exhausted. Unknown
    paths raise FileNotFoundError.
    """

    def __init__(self) -> None:
        self.sizes: Dict[str, List[Any]] = {}
        self.handles: List[FakeFileHandle] = []
        self.opened: List[str] = []
        self.callback: Optional[Callable[[Any], None]] = None
        self.watch_calls: List[tuple] = []
        self.unsubscribed = False
        self.closed = False
        self.watch_error: Optional[Exception] = None
        self._lock = threading.Lock()

    def script(self, path: str, *sizes: Any) -> None:
        with self._lock:
            self.sizes[path] = list(sizes)

    def watch(self, path, recursive, on_batch):
        if self.watch_error is not None:
            raise self.watch_error
        self.watch_calls.append((path, recursive))
        self.callback = on_batch

        def unsubscribe():
            self.unsubscribed = True
            self.callback = None

        return unsubscribe

    def open(self, path):
        with self._lock:
            self.opened.append(path)
            if path not in self.sizes:
                raise FileNotFoundError(2, "No such file or directory", path)
            queue = self.sizes[path]
            item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        handle = FakeFileHandle(item)
        self.handles.append(handle)
        return handle

    def close(self):
        self.closed = True

    def deliver(self, *records: Dict[str, Any]) -> None:
        """Deliver one notification like the share would."""
        assert self.callback is not None, "not subscribed"
        self.callback({"data": list(records)})


class EventCollector:
    """Thread-safe event sink."""

    def __init__(self) -> None:
        self.events: List[Any] = []
        self._lock = threading.Lock()

    def __call__(self, event) -> None:
        with self._lock:
            self.events.append(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self.events)


def record(action: int, filename: str, action_name: str = "") -> Dict[str, Any]:
    """Build a raw change record mapping."""
    return {"action": action, "actionName": action_name, "filename": filename}


def wait_for_condition(
    condition_fn: Callable[[], bool], timeout: float = 5.0, interval: float = 0.01
) -> bool:
    """Wait for a condition to become true.

    Returns:
        True if condition was met, False if timeout reached.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        if condition_fn():
            return True
        time.sleep(interval)
    return False


@pytest.fixture
def fake_client() -> FakeShareClient:
    return FakeShareClient()


@pytest.fixture
def events() -> EventCollector:
    return EventCollector()


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def wait_until():
    return wait_for_condition


@pytest.fixture
def watch_settings() -> Settings:
    """Settings for a created-watch with a fast poll interval."""
    return Settings(
        watched_path="incoming",
        event="created",
        wait_for_completion=True,
        wait_duration_ms=10,
        connect_attempts=1,
    )


# =============================================================================
# Faker Fixtures for Reproducible Test Data
# =============================================================================


@pytest.fixture(scope="session")
def faker_seed():
    """
    Provide a Faker instance with a fixed seed for reproducible test data.

    Session-scoped to maintain consistent sequences across all tests in a run.
    """
    fake = Faker()
    Faker.seed(42)
    return fake


@pytest.fixture
def random_filename(faker_seed):
    """
    Generate realistic random filenames for testing.

    Usage:
        filename = random_filename()  # Returns e.g. "approach.txt"
        pdf_name = random_filename(extension=".pdf")
    """

    def _generate(extension: str = ".txt") -> str:
        word = faker_seed.word()
        return f"{word}{extension}"

    return _generate
