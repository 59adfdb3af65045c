"""
Unit tests for highlight cleanup and public category mapping.

Run with: pytest tests/test_highlights.py -v
"""
import pytest

from changelog.highlights import GENERIC_HIGHLIGHTS, cleanup_highlights, public_category


class TestCleanupHighlights:
    def test_non_list_returns_empty(self):
        assert cleanup_highlights(None) == []
        assert cleanup_highlights("single string") == []
        assert cleanup_highlights([]) == []

    def test_good_highlights_pass_through(self):
        assert cleanup_highlights(["Faster exports", "New charts"]) == ["Faster exports", "New charts"]

    def test_drops_blank_and_non_string_items(self):
        assert cleanup_highlights(["Keep me", "  ", None, 42]) == ["Keep me"]

    def test_long_single_highlight_is_split_into_sentences(self):
        paragraph = (
            "- added live streaming of dashboard data. "
            "widgets can now be dragged anywhere on the page! "
            "exports include every chart type? "
            "this fourth sentence is dropped."
        )
        assert cleanup_highlights([paragraph]) == [
            "Added live streaming of dashboard data",
            "Widgets can now be dragged anywhere on the page",
            "Exports include every chart type",
        ]

    def test_truncated_mfa_highlight_is_repaired(self):
        paragraph = (
            "factor authentication is now available for all workspace members. "
            "Sessions expire automatically after thirty minutes of inactivity"
        )
        result = cleanup_highlights([paragraph])
        assert result[0] == "Multi-factor authentication is now available for all workspace members"

    def test_unsplittable_paragraph_falls_back_to_generic(self):
        one_long_sentence = "x" * 150
        assert cleanup_highlights([one_long_sentence]) == GENERIC_HIGHLIGHTS


class TestPublicCategory:
    @pytest.mark.parametrize("raw,expected", [
        ("feature_update", "Added"),
        ("major_release", "Added"),
        ("bug_fix", "Fixed"),
        ("security_update", "Security"),
        ("performance_improvement", "Improved"),
        ("Bugfix", "Fixed"),
        ("NEW", "Added"),
        ("removal", "Deprecated"),
        ("auth", "Security"),
        ("something else", "Improved"),
        (None, "Improved"),
    ])
    def test_mapping(self, raw, expected):
        assert public_category(raw) == expected
