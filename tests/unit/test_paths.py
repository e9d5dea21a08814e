"""
Unit tests for remote path helpers.
"""

import errno

import pytest

from smb_trigger.utils.paths import join_remote_path, readable_error


class TestJoinRemotePath:
    """Tests for join_remote_path()."""

    @pytest.mark.parametrize(
        "directory,filename,expected",
        [
            ("incoming", "a.txt", "incoming/a.txt"),
            ("share/./incoming", "a.txt", "share/incoming/a.txt"),
            ("./incoming", "a.txt", "./incoming/a.txt"),
            ("share/././deep", "a.txt", "share/deep/a.txt"),
            ("incoming/.", "a.txt", "incoming/a.txt"),
            (".", "a.txt", "a.txt"),
            ("incoming", "sub/a.txt", "incoming/sub/a.txt"),
        ],
    )
    def test_joins_and_normalizes(self, directory, filename, expected):
        assert join_remote_path(directory, filename) == expected


class TestReadableError:
    """Tests for readable_error()."""

    def test_os_error_with_errno(self):
        error = FileNotFoundError(errno.ENOENT, "No such file or directory")
        assert readable_error(error) == "No such file or directory (ENOENT)"

    def test_os_error_without_errno(self):
        assert readable_error(OSError("share offline")) == "share offline"

    def test_plain_exception_message(self):
        assert readable_error(ValueError("bad credentials")) == "bad credentials"

    def test_empty_message_falls_back_to_class_name(self):
        assert readable_error(TimeoutError()) == "TimeoutError"
