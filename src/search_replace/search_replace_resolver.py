"""Overlap detection and application ordering for resolved blocks."""

import logging
from typing import List, Sequence, Tuple

from search_replace.search_replace_exceptions import OverlappingEditsError
from search_replace.search_replace_types import EditOperation, MatchResult


class SearchReplaceResolver:
    """
    Validates that resolved blocks are independent and orders them for application.

    Blocks are applied from the bottom of the document to the top, so the line
    numbers of blocks not yet applied stay valid.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger("SearchReplaceResolver")

    def resolve(
        self,
        operations: Sequence[EditOperation],
        matches: Sequence[MatchResult]
    ) -> List[Tuple[int, EditOperation, MatchResult]]:
        """
        Check for overlaps and produce the application order.

        Args:
            operations: Edit operations in instruction order
            matches: Resolved match for each operation, in the same order

        Returns:
            List of (block index, operation, match) tuples, highest start line first

        Raises:
            OverlappingEditsError: If any two resolved ranges intersect
        """
        if len(operations) != len(matches):
            raise ValueError("Every operation needs exactly one match")

        for i in range(len(matches)):
            for j in range(i + 1, len(matches)):
                if self._ranges_overlap(matches[i], matches[j]):
                    self._raise_overlap(i, matches[i], j, matches[j])

        ordered = sorted(
            zip(range(len(operations)), operations, matches),
            key=lambda item: (item[2].start_line, item[2].end_line),
            reverse=True
        )
        self._logger.debug(
            "Application order: %s", ", ".join(str(idx + 1) for idx, _, _ in ordered)
        )
        return ordered

    def _ranges_overlap(self, first: MatchResult, second: MatchResult) -> bool:
        """
        Check if two resolved ranges intersect.

        An insertion occupies the position before its start line: it conflicts
        with a range that continues across that position, and with another
        insertion at the same position since their relative order would be
        undefined.

        Args:
            first: First match
            second: Second match

        Returns:
            True if the ranges conflict
        """
        first_insert = first.end_line < first.start_line
        second_insert = second.end_line < second.start_line

        if first_insert and second_insert:
            return first.start_line == second.start_line

        if first_insert:
            return second.start_line < first.start_line <= second.end_line

        if second_insert:
            return first.start_line < second.start_line <= first.end_line

        return first.start_line <= second.end_line and second.start_line <= first.end_line

    def _describe_range(self, match: MatchResult) -> str:
        if match.end_line < match.start_line:
            return f"insertion before line {match.start_line}"

        return f"lines {match.start_line}-{match.end_line}"

    def _raise_overlap(
        self,
        first_idx: int,
        first: MatchResult,
        second_idx: int,
        second: MatchResult
    ) -> None:
        """
        Raise an OverlappingEditsError for two conflicting blocks.

        Args:
            first_idx: Index of the first block (0-indexed)
            first: Match of the first block
            second_idx: Index of the second block (0-indexed)
            second: Match of the second block

        Raises:
            OverlappingEditsError: Always
        """
        message = (
            f"Blocks {first_idx + 1} and {second_idx + 1} overlap: block {first_idx + 1} matched "
            f"{self._describe_range(first)}, block {second_idx + 1} matched {self._describe_range(second)}"
        )
        self._logger.warning(message)
        raise OverlappingEditsError(
            message,
            {
                'phase': 'validation',
                'reason': 'Overlapping blocks detected',
                'blocks': [first_idx + 1, second_idx + 1],
                'block1_range': [first.start_line, first.end_line],
                'block2_range': [second.start_line, second.end_line],
                'suggestion': 'Blocks affect overlapping line ranges. Merge them into one block or '
                    'regenerate the diff with non-overlapping changes.'
            }
        )
