"""Tests for search/replace matcher."""

import pytest

from search_replace.search_replace_document import SearchReplaceDocument
from search_replace.search_replace_exceptions import AmbiguousInsertionError
from search_replace.search_replace_text import SimilarityScorer
from search_replace.search_replace_types import EditOperation


class TestSearchReplaceMatcherExact:
    """Test exact matching."""

    def test_exact_match_unique(self, matcher, helpers):
        """Test that a unique snippet resolves to its range with confidence 1.0."""
        document = helpers.document(["line 1", "line 2", "line 3", "line 4", "line 5"])
        operation = EditOperation(search_text="line 2\nline 3", replace_text="x")

        result = matcher.find_match(operation, document)

        assert result.success is True
        assert result.start_line == 2
        assert result.end_line == 3
        assert result.confidence == 1.0
        assert result.match_type == 'exact'
        assert result.actual_lines == ['line 2', 'line 3']

    def test_exact_match_at_file_start_and_end(self, matcher, helpers):
        """Test matches at the document boundaries."""
        document = helpers.document(["first", "middle", "last"])

        start = matcher.find_match(EditOperation("first", "x"), document)
        end = matcher.find_match(EditOperation("last", "x"), document)

        assert (start.start_line, start.end_line) == (1, 1)
        assert (end.start_line, end.end_line) == (3, 3)

    def test_whitespace_is_significant_for_exact_match(self, matcher_custom, helpers):
        """Test that exact matching does not strip whitespace."""
        matcher = matcher_custom(confidence_threshold=1.0)
        document = helpers.document(["    indented", "other"])

        result = matcher.find_match(EditOperation("indented", "x"), document)

        assert result.success is False

    def test_first_occurrence_without_hint(self, matcher, helpers):
        """Test that the first occurrence wins without a hint."""
        document = helpers.document(["dup", "a", "dup", "b", "dup"])

        result = matcher.find_match(EditOperation("dup", "x"), document)

        assert result.start_line == 1

    def test_nearest_occurrence_to_hint(self, matcher, helpers):
        """Test that the occurrence nearest the hint wins over the first one."""
        document = helpers.document(["dup", "a", "b", "c", "d", "e", "dup", "f"])

        result = matcher.find_match(EditOperation("dup", "x", start_line=6), document)

        assert result.start_line == 7
        assert result.confidence == 1.0

    def test_hint_tie_prefers_earliest(self, matcher, helpers):
        """Test that equally distant occurrences resolve to the earlier one."""
        document = helpers.document(["dup", "a", "b", "dup"])

        result = matcher.find_match(EditOperation("dup", "x", start_line=2), document)

        # Line 1 is one away from the hint, line 4 is two away
        assert result.start_line == 1

        tie = helpers.document(["dup", "a", "dup"])
        result = matcher.find_match(EditOperation("dup", "x", start_line=2), tie)

        assert result.start_line == 1

    def test_exact_match_far_from_hint(self, matcher_custom, helpers):
        """Test that exact matches are found outside the fuzzy search window."""
        matcher = matcher_custom(search_window=2)
        lines = [f"line {i}" for i in range(1, 101)]
        document = helpers.document(lines)

        result = matcher.find_match(EditOperation("line 90", "x", start_line=5), document)

        assert result.success is True
        assert result.start_line == 90
        assert result.match_type == 'exact'

    def test_end_line_hint(self, matcher, helpers):
        """Test that an end line hint alone guides the match."""
        document = helpers.document(["a", "b", "x", "a", "b", "y"])

        result = matcher.find_match(EditOperation("a\nb", "z", end_line=5), document)

        assert result.start_line == 4

    def test_unicode_exact_match(self, matcher, helpers):
        """Test exact matching of lines with emoji."""
        document = helpers.document(["# Test File", "", "**✔ This is a test line.**", "", "Some other content."])

        result = matcher.find_match(EditOperation("**✔ This is a test line.**", "x"), document)

        assert result.start_line == 3
        assert result.confidence == 1.0


class TestSearchReplaceMatcherInsertion:
    """Test insertion resolution."""

    def test_insertion_at_hint(self, matcher, helpers):
        """Test that an insertion resolves to the empty range before its hint."""
        document = helpers.document(["a", "b", "c"])

        result = matcher.find_match(EditOperation("", "new", start_line=2), document)

        assert result.success is True
        assert result.start_line == 2
        assert result.end_line == 1
        assert result.match_type == 'insertion'
        assert result.actual_lines == []

    def test_insertion_after_last_line(self, matcher, helpers):
        """Test that inserting after the last line is allowed."""
        document = helpers.document(["a", "b"])

        result = matcher.find_match(EditOperation("", "new", start_line=3), document)

        assert result.success is True

    def test_insertion_past_end(self, matcher, helpers):
        """Test that inserting beyond the end fails."""
        document = helpers.document(["a", "b"])

        result = matcher.find_match(EditOperation("", "new", start_line=4), document)

        assert result.success is False

    def test_insertion_before_first_line_fails(self, matcher, helpers):
        """Test that an insertion hint below line 1 fails."""
        document = helpers.document(["a", "b"])

        result = matcher.find_match(EditOperation("", "new", start_line=0), document)

        assert result.success is False

    def test_blank_line_search_matches_blank_line(self, matcher, helpers):
        """Test that a blank-line search replaces an existing blank line."""
        document = helpers.document(["a", "", "c"])

        result = matcher.find_match(EditOperation("", "middle", start_line=2, blank_line_search=True), document)

        assert result.success is True
        assert result.match_type == 'exact'
        assert result.start_line == 2
        assert result.end_line == 2

    def test_insertion_without_hint(self, matcher, helpers):
        """Test that an insertion without a hint is ambiguous."""
        document = helpers.document(["a"])

        with pytest.raises(AmbiguousInsertionError):
            matcher.find_match(EditOperation("", "new"), document)


class TestSearchReplaceMatcherFuzzy:
    """Test fuzzy matching."""

    def test_threshold_boundary(self, matcher_custom, helpers):
        """Test that one extra space matches only when the threshold allows it."""
        document = helpers.document(["def foo():", "    return foo + bar", "# end"])
        operation = EditOperation("    return foo  + bar", "x")
        score = SimilarityScorer("    return foo  + bar").ratio("    return foo + bar")

        below = matcher_custom(confidence_threshold=score - 0.01).find_match(operation, document)
        above = matcher_custom(confidence_threshold=score + 0.01).find_match(operation, document)

        assert below.success is True
        assert below.match_type == 'fuzzy'
        assert below.start_line == 2
        assert below.confidence == pytest.approx(score)
        assert above.success is False
        assert above.confidence == pytest.approx(score)
        assert above.start_line == 2

    def test_threshold_equal_to_score_matches(self, matcher_custom, helpers):
        """Test that a score equal to the threshold is accepted."""
        document = helpers.document(["alpha", "beta"])
        score = SimilarityScorer("alphx").ratio("alpha")

        result = matcher_custom(confidence_threshold=score).find_match(EditOperation("alphx", "x"), document)

        assert result.success is True

    def test_fuzzy_picks_highest_score(self, matcher_custom, helpers):
        """Test that the most similar window wins."""
        matcher = matcher_custom(confidence_threshold=0.8)
        document = helpers.document([
            "total = compute(a, b)",
            "unrelated line",
            "total = compute(a, c)",
        ])

        result = matcher.find_match(EditOperation("total = compute(a, c )", "x"), document)

        assert result.success is True
        assert result.start_line == 3

    def test_fuzzy_equal_scores_prefer_nearest_to_hint(self, matcher_custom, helpers):
        """Test that equally similar windows resolve to the one nearest the hint."""
        matcher = matcher_custom(confidence_threshold=0.8)
        document = helpers.document(["value = 1", "x", "y", "z", "value = 1"])

        result = matcher.find_match(EditOperation("value = 2", "v", start_line=4), document)

        assert result.success is True
        assert result.start_line == 5

    def test_fuzzy_limited_to_window_with_hint(self, matcher_custom, helpers):
        """Test that fuzzy matching ignores windows outside the hint window."""
        lines = ["filler"] * 30
        lines[24] = "important_call(x, y)"
        document = helpers.document(lines)
        operation = EditOperation("important_call(x, z)", "x", start_line=3)

        narrow = matcher_custom(confidence_threshold=0.8, search_window=5).find_match(operation, document)
        wide = matcher_custom(confidence_threshold=0.8, search_window=30).find_match(operation, document)

        assert narrow.success is False
        assert wide.success is True
        assert wide.start_line == 25

    def test_fuzzy_whole_document_without_hint(self, matcher_custom, helpers):
        """Test that fuzzy matching scans everything without a hint."""
        lines = ["filler"] * 200
        lines[180] = "important_call(x, y)"
        document = helpers.document(lines)

        result = matcher_custom(confidence_threshold=0.8).find_match(
            EditOperation("important_call(x, z)", "x"), document
        )

        assert result.success is True
        assert result.start_line == 181

    def test_no_match_reports_best_candidate(self, matcher, helpers):
        """Test that failures still describe the best window found."""
        document = helpers.document(["apple", "banana", "cherry"])

        result = matcher.find_match(EditOperation("bananas", "x"), document)

        assert result.success is False
        assert result.start_line == 2
        assert result.actual_lines == ['banana']
        assert 0.0 < result.confidence < 0.97

    def test_search_longer_than_document(self, matcher, helpers):
        """Test that a search with more lines than the document fails."""
        document = helpers.document(["only"])

        result = matcher.find_match(EditOperation("only\nmore", "x"), document)

        assert result.success is False
        assert result.actual_lines == []

    def test_empty_document(self, matcher, helpers):
        """Test that nothing matches in an empty document."""
        result = matcher.find_match(EditOperation("x", "y"), SearchReplaceDocument.from_text(""))

        assert result.success is False

    def test_fuzzy_with_unicode(self, matcher_custom, helpers):
        """Test fuzzy matching across emoji content."""
        matcher = matcher_custom(confidence_threshold=0.9)
        document = helpers.document(["Status: ✔ All systems operational", "Performance: 🚀 Blazing fast"])

        result = matcher.find_match(EditOperation("Status: ✔ All system operational", "x"), document)

        assert result.success is True
        assert result.start_line == 1
        assert result.actual_lines == ["Status: ✔ All systems operational"]


class TestSearchReplaceMatcherBlankLines:
    """Test blank-line tolerance."""

    def test_extra_trailing_blank_line(self, matcher, helpers):
        """Test that a trailing blank search line missing from the document is tolerated."""
        document = SearchReplaceDocument.from_text("a\nb\nc")

        result = matcher.find_match(EditOperation("b\nc\n", "x"), document)

        assert result.success is True
        assert (result.start_line, result.end_line) == (2, 3)
        assert result.trailing_blank_trimmed == 1
        assert result.match_type == 'exact'

    def test_extra_leading_blank_line(self, matcher, helpers):
        """Test that a leading blank search line missing from the document is tolerated."""
        document = helpers.document(["a", "b", "c"])

        result = matcher.find_match(EditOperation("\na\nb", "x"), document)

        assert result.success is True
        assert (result.start_line, result.end_line) == (1, 2)
        assert result.leading_blank_trimmed == 1

    def test_blank_lines_matched_when_present(self, matcher, helpers):
        """Test that blank lines are kept when the document has them."""
        document = helpers.document(["a", "", "b", ""])

        result = matcher.find_match(EditOperation("b\n", "x"), document)

        assert (result.start_line, result.end_line) == (3, 4)
        assert result.trailing_blank_trimmed == 0

    def test_tolerance_disabled(self, matcher_custom, helpers):
        """Test that blank-line tolerance can be turned off."""
        matcher = matcher_custom(confidence_threshold=1.0, blank_line_tolerance=False)
        document = SearchReplaceDocument.from_text("a\nb\nc")

        result = matcher.find_match(EditOperation("b\nc\n", "x"), document)

        assert result.success is False
