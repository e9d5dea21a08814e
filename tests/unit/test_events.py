"""
Unit tests for event models and action-code classification.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from smb_trigger.core.events import (
    EmittedEvent,
    EventKind,
    MalformedRecordError,
    RawChangeRecord,
    classify,
)


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            (1, EventKind.CREATED),
            (2, EventKind.DELETED),
            (3, EventKind.UPDATED),
        ],
    )
    def test_known_codes_map_to_event_kinds(self, code, expected):
        assert classify(code) is expected

    @pytest.mark.parametrize("code", [0, 4, 5, -1, 99])
    def test_rename_and_unknown_codes_are_unclassified(self, code):
        assert classify(code) is None

    @pytest.mark.parametrize("code", [None, "1", 1.0, True, False, [1]])
    def test_non_integer_codes_are_unclassified(self, code):
        """Only real integers are action codes; bool is not read as 1/0."""
        assert classify(code) is None

    @given(st.integers().filter(lambda c: c not in (1, 2, 3)))
    def test_every_other_integer_is_unclassified(self, code):
        assert classify(code) is None

    def test_event_kind_values_are_wire_names(self):
        assert [kind.value for kind in EventKind] == ["created", "deleted", "updated"]


class TestRawChangeRecord:
    """Tests for RawChangeRecord.from_raw()."""

    def test_from_mapping_keeps_metadata(self):
        raw = {"action": 1, "actionName": "ADDED", "filename": "a.txt", "nextEntryOffset": 32}

        result = RawChangeRecord.from_raw(raw)

        assert result.action == 1
        assert result.action_name == "ADDED"
        assert result.filename == "a.txt"
        assert result.metadata == {"nextEntryOffset": 32}

    def test_snake_case_action_name_is_accepted(self):
        result = RawChangeRecord.from_raw(
            {"action": 2, "action_name": "REMOVED", "filename": "b.txt"}
        )
        assert result.action_name == "REMOVED"

    def test_record_instance_is_returned_unchanged(self):
        original = RawChangeRecord(action=3, action_name="", filename="c.txt")
        assert RawChangeRecord.from_raw(original) is original

    def test_missing_action_is_kept_as_none(self):
        result = RawChangeRecord.from_raw({"filename": "d.txt"})
        assert result.action is None
        assert classify(result.action) is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"action": 1},
            {"action": 1, "filename": ""},
            {"action": 1, "filename": 42},
            "a.txt",
            None,
        ],
    )
    def test_records_without_filename_are_malformed(self, raw):
        with pytest.raises(MalformedRecordError):
            RawChangeRecord.from_raw(raw)


class TestEmittedEvent:
    """Tests for EmittedEvent serialization."""

    def test_to_dict_without_size_omits_file_size(self):
        event = EmittedEvent(EventKind.DELETED, "old.log", "logs")

        assert event.to_dict() == {
            "event": "deleted",
            "filename": "old.log",
            "path": "logs",
        }

    def test_to_dict_with_size_includes_file_size(self):
        event = EmittedEvent(EventKind.CREATED, "scan.pdf", "incoming", file_size=100)

        assert event.to_dict()["fileSize"] == 100

    def test_zero_size_is_still_reported(self):
        event = EmittedEvent(EventKind.CREATED, "empty.txt", "incoming", file_size=0)
        assert event.to_dict()["fileSize"] == 0
