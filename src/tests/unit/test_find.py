"""Tests for editor find and replace."""

import pytest

from fednotes.editor.find import (
    Match,
    find_all_matches,
    find_closest_match_index,
    replace_matches,
    validate_regex,
)


class TestFindAllMatches:
    """Tests for locating matches."""

    def test_case_insensitive_by_default(self):
        matches = find_all_matches("Cat cat CAT", "cat")

        assert [m.start for m in matches] == [0, 4, 8]

    def test_case_sensitive(self):
        matches = find_all_matches("Cat cat CAT", "cat", case_sensitive=True)

        assert [m.text for m in matches] == ["cat"]

    def test_literal_mode_escapes_regex(self):
        matches = find_all_matches("a.b axb", "a.b")

        assert [m.text for m in matches] == ["a.b"]

    def test_regex_groups(self):
        matches = find_all_matches("x=1, y=22", r"(\w)=(\d+)", use_regex=True)

        assert matches[1].groups == ("y", "22")

    def test_invalid_regex_returns_nothing(self):
        assert find_all_matches("text", "(unclosed", use_regex=True) == []

    @pytest.mark.parametrize("text,search", [("", "a"), ("abc", "")])
    def test_empty_inputs(self, text, search):
        assert find_all_matches(text, search) == []


class TestReplaceMatches:
    """Tests for replacing matches."""

    def test_replace_all_literal(self):
        text = "one two one"
        matches = find_all_matches(text, "one")

        assert replace_matches(text, matches, "1") == "1 two 1"

    def test_replace_with_different_length(self):
        """Offsets of earlier matches stay valid."""
        text = "a-a-a"
        matches = find_all_matches(text, "a")

        assert replace_matches(text, matches, "long") == "long-long-long"

    def test_regex_tokens(self):
        text = "John Smith"
        matches = find_all_matches(text, r"(\w+) (\w+)", use_regex=True)

        assert replace_matches(text, matches, "$2, $1 ($&) $$", use_regex=True) == (
            "Smith, John (John Smith) $"
        )

    def test_missing_group_is_empty(self):
        text = "ab"
        matches = find_all_matches(text, "(a)", use_regex=True)

        assert replace_matches(text, matches, "[$1$5]", use_regex=True) == "[a]b"

    def test_tokens_literal_outside_regex_mode(self):
        text = "ab"
        matches = [Match(0, 1, "a")]

        assert replace_matches(text, matches, "$&") == "$&b"

    def test_no_matches(self):
        assert replace_matches("text", [], "x") == "text"


class TestFindClosestMatchIndex:
    """Tests for next/previous navigation."""

    def setup_method(self):
        self.matches = [Match(0, 3, "abc"), Match(10, 13, "abc"), Match(20, 23, "abc")]

    def test_next_from_middle(self):
        assert find_closest_match_index(self.matches, 5) == 1

    def test_next_wraps(self):
        assert find_closest_match_index(self.matches, 21) == 0

    def test_previous(self):
        assert find_closest_match_index(self.matches, 15, "previous") == 1

    def test_previous_wraps(self):
        assert find_closest_match_index(self.matches, 1, "previous") == 2

    def test_no_matches(self):
        assert find_closest_match_index([], 0) == -1


class TestValidateRegex:
    def test_valid(self):
        assert validate_regex(r"\d+") == (True, None)

    def test_empty(self):
        assert validate_regex("") == (True, None)

    def test_invalid(self):
        ok, error = validate_regex("[abc")

        assert ok is False
        assert error
