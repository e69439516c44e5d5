"""Tests for core data models."""

from __future__ import annotations

from sharedrop.models import AliasStatus, FileEntry, LineMatch


class TestLineMatch:
    """Test LineMatch dataclass."""

    def test_real_match(self) -> None:
        """Positive line numbers are real hits."""
        match = LineMatch(3, "text")
        assert not match.is_sentinel
        assert match.to_dict() == {"lineNumber": 3, "content": "text"}

    def test_sentinel(self) -> None:
        """Line -1 carries a status message."""
        assert LineMatch(-1, "No matches found.").is_sentinel

    def test_equality(self) -> None:
        """Should compare by value."""
        assert LineMatch(1, "a") == LineMatch(1, "a")
        assert LineMatch(1, "a") != LineMatch(2, "a")


class TestFileEntry:
    """Test FileEntry dataclass."""

    def test_defaults(self) -> None:
        """Alias defaults to None."""
        entry = FileEntry(
            name="a.txt",
            path="YS50eHQ=",
            is_dir=False,
            size=10,
            display_size="10.00 bytes",
            modified=0.0,
        )
        assert entry.alias is None


class TestAliasStatus:
    """Test AliasStatus enum."""

    def test_values_are_strings(self) -> None:
        """Statuses serialize as plain strings."""
        assert AliasStatus.OK == "ok"
        assert AliasStatus("alias_taken") is AliasStatus.ALIAS_TAKEN
