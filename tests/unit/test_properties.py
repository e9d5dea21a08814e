"""
Property-based tests for the stability rules and path helpers.

Hypothesis generates size sequences and path segments to check the
invariants of StabilityMonitor and join_remote_path.
"""

from typing import List, Optional, Tuple

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from smb_trigger.core.events import EventKind, classify
from smb_trigger.core.monitor import MonitorState, StabilityMonitor
from smb_trigger.core.pending import PendingSet
from smb_trigger.utils.paths import join_remote_path

# =============================================================================
# Strategies
# =============================================================================

file_sizes = st.lists(st.integers(min_value=0, max_value=10_000), min_size=1, max_size=40)

path_segment = st.sampled_from([".", "incoming", "scans", "2024", "a b"])
remote_dir = st.lists(path_segment, min_size=1, max_size=6).map("/".join)
remote_name = st.text(alphabet="abcxyz_-.", min_size=1, max_size=12).filter(
    lambda name: not name.startswith(".")
)


def expected_outcome(sizes: List[int]) -> Tuple[MonitorState, Optional[int], int]:
    """Reference model: final state, emitted size and samples taken."""
    previous = None
    for polls, size in enumerate(sizes, start=1):
        if previous is not None and size == previous:
            return MonitorState.STABLE, size, polls
        if previous is not None and previous > 0 and size == 0:
            return MonitorState.ABORTED, None, polls
        if previous is None or size > previous:
            previous = size
    return MonitorState.GROWING, None, len(sizes)


class ListShareClient:
    """Minimal client returning a fixed size sequence."""

    def __init__(self, sizes: List[int]) -> None:
        self.sizes = list(sizes)

    def open(self, path):
        size = self.sizes.pop(0)
        return _Handle(size)


class _Handle:
    def __init__(self, size: int) -> None:
        self.file_size = size
        self.is_open = True

    def close(self) -> None:
        self.is_open = False


class TestStabilityProperties:
    """Property-based tests for StabilityMonitor size rules."""

    @settings(max_examples=200, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    @given(sizes=file_sizes)
    def test_outcome_follows_size_rules(self, sizes: List[int]):
        """
        Invariant: a sample equal to the largest size so far makes the file
        stable, a drop from non-zero to zero aborts it, a partial shrink
        keeps the larger size, anything else keeps it growing.
        """
        pending = PendingSet()
        pending.add("f.bin")
        emitted = []
        monitor = StabilityMonitor(
            client=ListShareClient(sizes),
            pending=pending,
            directory="incoming",
            filename="f.bin",
            action=1,
            wait_duration_ms=1,
            emit=emitted.append,
        )

        state = MonitorState.GROWING
        for _ in sizes:
            state = monitor.tick()
            if state is not MonitorState.GROWING:
                break

        want_state, want_size, want_polls = expected_outcome(sizes)
        assert state is want_state
        assert monitor.poll_count == want_polls

        if want_state is MonitorState.STABLE:
            assert [e.file_size for e in emitted] == [want_size]
            assert emitted[0].event is EventKind.CREATED
        else:
            assert emitted == []

        # Pending entry lives exactly as long as the monitor is growing
        assert ("f.bin" in pending) == (state is MonitorState.GROWING)

    @settings(max_examples=100, deadline=None)
    @given(sizes=file_sizes, max_polls=st.integers(min_value=1, max_value=10))
    def test_never_exceeds_max_polls(self, sizes: List[int], max_polls: int):
        """Invariant: a bounded monitor takes at most max_polls samples."""
        monitor = StabilityMonitor(
            client=ListShareClient(sizes),
            pending=PendingSet(),
            directory="incoming",
            filename="f.bin",
            action=1,
            wait_duration_ms=1,
            emit=lambda event: None,
            max_polls=max_polls,
        )

        for _ in sizes:
            if monitor.tick() is not MonitorState.GROWING:
                break

        assert monitor.poll_count <= max_polls
        if monitor.poll_count == max_polls:
            assert monitor.is_terminal


class TestRemotePathProperties:
    """Property-based tests for join_remote_path."""

    @given(directory=remote_dir, filename=remote_name)
    def test_no_dot_segments_remain(self, directory: str, filename: str):
        assert "/./" not in join_remote_path(directory, filename)

    @given(directory=remote_dir, filename=remote_name)
    def test_ends_with_filename(self, directory: str, filename: str):
        assert join_remote_path(directory, filename).endswith(filename)


class TestClassifyProperties:
    """Property-based tests for classify()."""

    @given(code=st.integers())
    def test_only_known_codes_classify(self, code: int):
        kind = classify(code)
        if code in (1, 2, 3):
            assert isinstance(kind, EventKind)
        else:
            assert kind is None
