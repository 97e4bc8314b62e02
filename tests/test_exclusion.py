"""Tests for exclusion pattern matching."""

import pytest

from sha_sentry.exclusion import is_excluded, match_exclusion, pattern_matches


# ---------------------------------------------------------------------------
# Substring patterns
# ---------------------------------------------------------------------------

class TestSubstringPatterns:
    def test_plain_substring_matches(self):
        assert pattern_matches("my-org/deploy-action@main", "my-org/")

    def test_plain_substring_is_case_insensitive(self):
        assert pattern_matches("My-Org/Deploy-Action@main", "my-org")

    def test_plain_substring_no_match(self):
        assert not pattern_matches("actions/checkout@v4", "my-org/")


# ---------------------------------------------------------------------------
# Glob patterns
# ---------------------------------------------------------------------------

class TestGlobPatterns:
    def test_star_matches_within_segment(self):
        assert pattern_matches("actions/checkout@v4", "actions/*")

    def test_star_does_not_cross_directories(self):
        assert not pattern_matches(".github/workflows/ci.yml", "*.yml")

    def test_double_star_crosses_directories(self):
        assert pattern_matches(".github/workflows/legacy.yml", "**/legacy.yml")

    def test_double_star_slash_matches_zero_directories(self):
        assert pattern_matches("legacy.yml", "**/legacy.yml")

    def test_glob_is_case_insensitive(self):
        assert pattern_matches(".github/workflows/Legacy.YML", "**/legacy.yml")

    def test_question_mark(self):
        assert pattern_matches("actions/cache@v4", "actions/cache@v?")

    def test_character_class(self):
        assert pattern_matches("actions/cache@v3", "actions/cache@v[34]")
        assert not pattern_matches("actions/cache@v5", "actions/cache@v[34]")

    def test_negated_character_class(self):
        assert pattern_matches("actions/cache@v5", "actions/cache@v[!34]")

    def test_glob_must_match_whole_candidate(self):
        assert not pattern_matches("other/actions/checkout@v4", "actions/*")

    def test_windows_separators_are_normalized(self):
        assert pattern_matches(".github\\workflows\\legacy.yml", "**/legacy.yml")

    def test_star_crosses_owner_separator_in_references(self):
        assert pattern_matches("actions/checkout@v4", "*checkout*", reference=True)
        assert is_excluded("actions/checkout@v4", ["*checkout*"], reference=True)

    def test_question_mark_crosses_owner_separator_in_references(self):
        assert pattern_matches("a/b@v1", "a?b@v1", reference=True)

    def test_star_still_stops_at_slash_for_paths(self):
        assert not pattern_matches(".github/workflows/checkout.yml", "*checkout*")


# ---------------------------------------------------------------------------
# Malformed patterns
# ---------------------------------------------------------------------------

class TestMalformedPatterns:
    def test_unclosed_bracket_falls_back_to_substring(self):
        assert pattern_matches("weird/[action@v1", "[action")

    def test_unclosed_bracket_without_substring_does_not_match(self):
        assert not pattern_matches("actions/checkout@v4", "[action")

    def test_invalid_range_falls_back_to_substring(self):
        assert not pattern_matches("actions/checkout@v4", "[z-a]*")


# ---------------------------------------------------------------------------
# match_exclusion / is_excluded
# ---------------------------------------------------------------------------

class TestMatchExclusion:
    def test_no_patterns_excludes_nothing(self):
        assert match_exclusion("actions/checkout@v4", []) is None
        assert is_excluded("actions/checkout@v4", []) is False

    def test_returns_first_matching_pattern(self):
        patterns = ["nope", "actions/", "actions/*"]
        assert match_exclusion("actions/checkout@v4", patterns) == "actions/"

    def test_blank_patterns_are_ignored(self):
        assert match_exclusion("actions/checkout@v4", ["", "   "]) is None

    def test_is_excluded(self):
        assert is_excluded(".github/workflows/legacy.yml", ["**/legacy.yml"]) is True

    @pytest.mark.parametrize("candidate", ["", "docker://alpine", "./local", "x"])
    def test_never_raises(self, candidate):
        match_exclusion(candidate, ["[", "**", "*", "?"])
