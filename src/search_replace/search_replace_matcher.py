"""Search block matching with exact and fuzzy strategies."""

import logging
from typing import List, Tuple

from search_replace.search_replace_document import SearchReplaceDocument, split_text_lines
from search_replace.search_replace_exceptions import AmbiguousInsertionError
from search_replace.search_replace_text import SimilarityScorer
from search_replace.search_replace_types import EditOperation, MatchResult


class SearchReplaceMatcher:
    """Locates the line range an edit operation applies to."""

    def __init__(
        self,
        confidence_threshold: float = 0.97,
        search_window: int = 50,
        blank_line_tolerance: bool = True
    ):
        """
        Initialize the matcher.

        Args:
            confidence_threshold: Minimum confidence (0.0-1.0) required for a fuzzy match
            search_window: Number of lines to search above/below a line hint
            blank_line_tolerance: Retry without a leading/trailing blank search line
        """
        self._confidence_threshold = confidence_threshold
        self._search_window = search_window
        self._blank_line_tolerance = blank_line_tolerance
        self._logger = logging.getLogger("SearchReplaceMatcher")

    def search_window(self) -> int:
        """Get the current search window size."""
        return self._search_window

    def confidence_threshold(self) -> float:
        """Get the minimum confidence for a fuzzy match."""
        return self._confidence_threshold

    def find_match(self, operation: EditOperation, document: SearchReplaceDocument) -> MatchResult:
        """
        Find the line range in the document that an operation should replace.

        Exact matches anywhere in the document win over fuzzy ones.  Fuzzy
        matching only considers windows near the line hint, when there is one.

        Args:
            operation: The edit operation to locate
            document: The document to search

        Returns:
            MatchResult with location and confidence; on failure the best
            candidate found is reported with success set to False
        """
        if operation.is_insertion:
            return self._match_insertion(operation, document)

        search_lines = split_text_lines(operation.search_text)
        hint = self._hinted_start(operation, len(search_lines))
        variants = self._search_variants(search_lines)

        for lines, leading, trailing in variants:
            exact_match = self._find_exact_match(lines, hint, document)
            if exact_match is not None:
                exact_match.leading_blank_trimmed = leading
                exact_match.trailing_blank_trimmed = trailing
                self._logger.debug(
                    "Exact match at lines %d-%d", exact_match.start_line, exact_match.end_line
                )
                return exact_match

        best_match = MatchResult(
            success=False,
            start_line=hint if hint is not None else 1,
            end_line=(hint if hint is not None else 1) + len(search_lines) - 1,
            confidence=0.0,
            match_type='fuzzy'
        )
        best_distance = 0

        for lines, leading, trailing in variants:
            candidate, distance = self._fuzzy_search(lines, hint, document, best_match.confidence)
            if candidate is None:
                continue

            if candidate.confidence > best_match.confidence or (
                candidate.confidence == best_match.confidence and distance < best_distance
            ):
                candidate.leading_blank_trimmed = leading
                candidate.trailing_blank_trimmed = trailing
                best_match = candidate
                best_distance = distance

        best_match.success = best_match.confidence >= self._confidence_threshold and bool(best_match.actual_lines)
        self._logger.debug(
            "Best fuzzy match at lines %d-%d with confidence %.4f (threshold %.4f)",
            best_match.start_line,
            best_match.end_line,
            best_match.confidence,
            self._confidence_threshold
        )
        return best_match

    def _match_insertion(self, operation: EditOperation, document: SearchReplaceDocument) -> MatchResult:
        """
        Resolve a pure insertion to its hinted position.

        Args:
            operation: Operation with empty search text
            document: Document the insertion applies to

        Returns:
            MatchResult for the empty range before the hinted line
        """
        if operation.start_line is None:
            raise AmbiguousInsertionError(
                "Cannot insert without a line hint",
                {
                    'phase': 'matching',
                    'reason': 'Empty search content needs a line hint to know where to insert',
                }
            )

        location = operation.start_line
        return MatchResult(
            success=1 <= location <= document.line_count() + 1,
            start_line=location,
            end_line=location - 1,
            confidence=1.0,
            match_type='insertion'
        )

    def _hinted_start(self, operation: EditOperation, line_count: int) -> int | None:
        """
        Work out where the operation is expected to start.

        Args:
            operation: Operation with optional hints
            line_count: Number of search lines

        Returns:
            Expected start line, or None without hints
        """
        if operation.start_line is not None:
            return operation.start_line

        if operation.end_line is not None:
            return max(1, operation.end_line - line_count + 1)

        return None

    def _search_variants(self, search_lines: List[str]) -> List[Tuple[List[str], int, int]]:
        """
        Build the search line lists to try, in order of preference.

        Args:
            search_lines: Lines of the search text

        Returns:
            List of (lines, leading blanks removed, trailing blanks removed)
        """
        variants = [(search_lines, 0, 0)]
        if not self._blank_line_tolerance or len(search_lines) < 2:
            return variants

        trailing = 1 if search_lines[-1].strip() == '' else 0
        leading = 1 if search_lines[0].strip() == '' else 0

        if trailing:
            variants.append((search_lines[:-1], 0, 1))

        if leading:
            variants.append((search_lines[1:], 1, 0))

        if leading and trailing and len(search_lines) > 2:
            variants.append((search_lines[1:-1], 1, 1))

        return variants

    def _find_exact_match(
        self,
        search_lines: List[str],
        hint: int | None,
        document: SearchReplaceDocument
    ) -> MatchResult | None:
        """
        Find an exact occurrence of the search lines.

        Args:
            search_lines: Lines that must match exactly
            hint: Expected start line, if known
            document: Document to search

        Returns:
            MatchResult for the occurrence nearest the hint (or the first one
            without a hint), None if there is no exact occurrence
        """
        lines = document.lines
        count = len(search_lines)
        best_location: int | None = None

        for idx in range(len(lines) - count + 1):
            if lines[idx] != search_lines[0] or list(lines[idx:idx + count]) != search_lines:
                continue

            location = idx + 1
            if hint is None:
                best_location = location
                break

            if best_location is None or abs(location - hint) < abs(best_location - hint):
                best_location = location

        if best_location is None:
            return None

        return MatchResult(
            success=True,
            start_line=best_location,
            end_line=best_location + count - 1,
            confidence=1.0,
            match_type='exact',
            actual_lines=list(search_lines)
        )

    def _fuzzy_search(
        self,
        search_lines: List[str],
        hint: int | None,
        document: SearchReplaceDocument,
        floor: float
    ) -> Tuple[MatchResult | None, int]:
        """
        Search for the most similar window of lines.

        Args:
            search_lines: Lines we expect to find
            hint: Expected start line; limits the search to the window around it
            document: Document to search
            floor: Confidence already achieved; windows that cannot beat it are skipped

        Returns:
            Tuple of (best MatchResult or None if no window qualifies, distance from hint)
        """
        count = len(search_lines)
        last_start = document.line_count() - count + 1
        if last_start < 1:
            return None, 0

        if hint is None:
            first_line, last_line = 1, last_start

        else:
            first_line = max(1, hint - self._search_window)
            last_line = min(last_start, hint + self._search_window)

        scorer = SimilarityScorer('\n'.join(search_lines))
        best_match: MatchResult | None = None
        best_distance = 0

        for line_num in range(first_line, last_line + 1):
            actual_lines = document.get_lines(line_num, count)
            confidence = scorer.ratio('\n'.join(actual_lines), floor)
            if confidence < floor:
                continue

            distance = abs(line_num - hint) if hint is not None else 0

            # Prefer matches closer to the expected location if confidence is equal
            if best_match is not None and (
                confidence < best_match.confidence
                or (confidence == best_match.confidence and distance >= best_distance)
            ):
                continue

            best_match = MatchResult(
                success=False,
                start_line=line_num,
                end_line=line_num + count - 1,
                confidence=confidence,
                match_type='fuzzy',
                actual_lines=actual_lines
            )
            best_distance = distance
            floor = confidence

        return best_match, best_distance
