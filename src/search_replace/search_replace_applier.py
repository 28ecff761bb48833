"""Search/replace diff application."""

import logging
from typing import List, Tuple

from search_replace.search_replace_document import SearchReplaceDocument, split_text_lines
from search_replace.search_replace_exceptions import NoMatchError, SearchReplaceError
from search_replace.search_replace_matcher import SearchReplaceMatcher
from search_replace.search_replace_parser import SearchReplaceParser
from search_replace.search_replace_resolver import SearchReplaceResolver
from search_replace.search_replace_settings import SearchReplaceSettings
from search_replace.search_replace_types import (
    ApplyFailure,
    ApplyResult,
    ApplySuccess,
    EditOperation,
    MatchResult,
)


def _indent_of(line: str) -> str:
    """Get the leading spaces and tabs of a line."""
    return line[:len(line) - len(line.lstrip(' \t'))]


class SearchReplaceApplier:
    """Applies search/replace diffs to text, all blocks or none."""

    def __init__(self, settings: SearchReplaceSettings | None = None):
        """
        Initialize the applier.

        Args:
            settings: Matching configuration, defaults if not given
        """
        self._settings = settings if settings is not None else SearchReplaceSettings()
        self._parser = SearchReplaceParser(strip_line_numbers=self._settings.strip_line_numbers)
        self._resolver = SearchReplaceResolver()
        self._logger = logging.getLogger("SearchReplaceApplier")

    def _create_matcher(self) -> SearchReplaceMatcher:
        """Create a matcher configured from the settings."""
        return SearchReplaceMatcher(
            confidence_threshold=self._settings.fuzzy_threshold,
            search_window=self._settings.search_window,
            blank_line_tolerance=self._settings.blank_line_tolerance
        )

    def apply_diff(self, original_content: str, diff_text: str, dry_run: bool = False) -> ApplyResult:
        """
        Apply search/replace blocks to text.

        This operation is atomic - either all blocks apply successfully or none
        of them do and a failure result describes why.

        Args:
            original_content: Text to modify
            diff_text: One or more search/replace blocks
            dry_run: If True, validate but return the original content

        Returns:
            ApplySuccess with the new content, or ApplyFailure describing the
            first problem found

        Raises:
            TypeError: If original_content or diff_text is not a string
        """
        if not isinstance(original_content, str):
            raise TypeError(f"Original content must be a string, got {type(original_content).__name__}")

        if not isinstance(diff_text, str):
            raise TypeError(f"Diff text must be a string, got {type(diff_text).__name__}")

        try:
            return self._apply(original_content, diff_text, dry_run)

        except SearchReplaceError as e:
            self._logger.warning("Diff rejected (%s): %s", e.failure_kind.value, e)
            return ApplyFailure(reason=e.failure_kind, detail=str(e), error_details=e.error_details)

    def _apply(self, original_content: str, diff_text: str, dry_run: bool) -> ApplySuccess:
        """
        Parse, locate, validate and apply all blocks.

        Args:
            original_content: Text to modify
            diff_text: Search/replace blocks
            dry_run: If True, stop after validation

        Returns:
            ApplySuccess with the resulting content

        Raises:
            SearchReplaceError: If any phase fails
        """
        operations = self._parser.parse(diff_text)
        document = SearchReplaceDocument.from_text(original_content)

        # Phase 1: Locate every block in the original document
        matcher = self._create_matcher()
        matches: List[MatchResult] = []
        for idx, operation in enumerate(operations):
            match_result = matcher.find_match(operation, document)
            if not match_result.success:
                self._raise_no_match(idx, len(operations), operation, match_result, document, matcher)

            self._logger.debug(
                "Block %d: %s match at lines %d-%d (confidence %.4f)",
                idx + 1,
                match_result.match_type,
                match_result.start_line,
                match_result.end_line,
                match_result.confidence
            )
            matches.append(match_result)

        # Phase 2: Check for overlaps and sort bottom to top
        ordered = self._resolver.resolve(operations, matches)

        if dry_run:
            return ApplySuccess(content=original_content, blocks_applied=len(operations))

        # Phase 3: Apply all blocks
        for _idx, operation, match_result in ordered:
            document = document.splice(
                match_result.start_line,
                match_result.end_line,
                self._replacement_lines(operation, match_result)
            )

        return ApplySuccess(content=document.to_text(), blocks_applied=len(operations))

    def _replacement_lines(self, operation: EditOperation, match_result: MatchResult) -> List[str]:
        """
        Work out the lines that replace a matched range.

        Args:
            operation: Operation being applied
            match_result: Where it matched

        Returns:
            Replacement lines, adjusted for blank-line tolerance and indentation
        """
        if operation.replace_text == '':
            return []

        replace_lines = split_text_lines(operation.replace_text)

        if match_result.trailing_blank_trimmed and len(replace_lines) > 1 and replace_lines[-1].strip() == '':
            replace_lines = replace_lines[:-1]

        if match_result.leading_blank_trimmed and len(replace_lines) > 1 and replace_lines[0].strip() == '':
            replace_lines = replace_lines[1:]

        if match_result.match_type != 'fuzzy':
            return replace_lines

        search_lines = split_text_lines(operation.search_text)
        search_lines = search_lines[match_result.leading_blank_trimmed:len(search_lines) - match_result.trailing_blank_trimmed]
        return self._reindent(search_lines, match_result.actual_lines, replace_lines)

    def _reindent(self, search_lines: List[str], actual_lines: List[str], replace_lines: List[str]) -> List[str]:
        """
        Shift replacement indentation to follow the document after a fuzzy match.

        The first non-blank search line and its counterpart in the document give
        the base indentation of each side; every replacement line keeps its
        indentation relative to the search base but is moved onto the document
        base.

        Args:
            search_lines: Search lines that were matched
            actual_lines: Document lines they matched
            replace_lines: Replacement lines

        Returns:
            Re-indented replacement lines, unchanged when both bases agree
        """
        bases: Tuple[str, str] | None = None
        for search_line, actual_line in zip(search_lines, actual_lines):
            if search_line.strip() and actual_line.strip():
                bases = (_indent_of(search_line), _indent_of(actual_line))
                break

        if bases is None or bases[0] == bases[1]:
            return replace_lines

        search_indent, actual_indent = bases
        reindented: List[str] = []
        for line in replace_lines:
            if not line.strip():
                reindented.append(line)
                continue

            indent = _indent_of(line)
            content = line[len(indent):]
            if indent.startswith(search_indent):
                reindented.append(actual_indent + indent[len(search_indent):] + content)
                continue

            # Less indented than the search base: remove the same amount from the document base
            outdent = len(search_indent) - len(indent)
            reindented.append(actual_indent[:max(0, len(actual_indent) - outdent)] + content)

        return reindented

    def _raise_no_match(
        self,
        idx: int,
        total: int,
        operation: EditOperation,
        match_result: MatchResult,
        document: SearchReplaceDocument,
        matcher: SearchReplaceMatcher
    ) -> None:
        """
        Raise a NoMatchError with diagnostics for the caller.

        Args:
            idx: Index of the failed block (0-indexed)
            total: Total number of blocks
            operation: Operation that failed to match
            match_result: Best candidate found
            document: Document that was searched
            matcher: Matcher whose threshold and window were used

        Raises:
            NoMatchError: Always
        """
        if operation.is_insertion:
            message = (
                f"Block {idx + 1}: cannot insert before line {match_result.start_line}, "
                f"the document has {document.line_count()} line(s)"
            )
            raise NoMatchError(
                message,
                {
                    'phase': 'matching',
                    'failed_block': idx + 1,
                    'total_blocks': total,
                    'reason': 'Insertion line is outside the document',
                    'expected_location': operation.start_line,
                    'line_count': document.line_count(),
                    'suggestion': f"Use a ':start_line:' between 1 and {document.line_count() + 1}."
                }
            )

        search_lines = split_text_lines(operation.search_text)
        threshold = matcher.confidence_threshold()
        search_window = matcher.search_window()
        hint = operation.start_line
        if hint is None and operation.end_line is not None:
            hint = max(1, operation.end_line - len(search_lines) + 1)

        if hint is None:
            searched_range = [1, document.line_count()]
            range_text = "entire document"

        else:
            searched_range = [
                max(1, hint - search_window),
                min(document.line_count(), hint + search_window + len(search_lines) - 1)
            ]
            range_text = f"lines {searched_range[0]}-{searched_range[1]}"

        best_match_text = '\n'.join(
            f"{match_result.start_line + offset} | {line}" for offset, line in enumerate(match_result.actual_lines)
        ) or "(no match)"

        message = (
            f"Block {idx + 1} of {total}: no sufficiently similar match found "
            f"({match_result.confidence:.0%} similar, needs {threshold:.0%})\n"
            "\n"
            "Debug Info:\n"
            f"- Similarity Score: {match_result.confidence:.0%}\n"
            f"- Required Threshold: {threshold:.0%}\n"
            f"- Search Range: {range_text}\n"
            "\n"
            "Search Content:\n"
            f"{operation.search_text}\n"
            "\n"
            "Best Match Found:\n"
            f"{best_match_text}"
        )
        raise NoMatchError(
            message,
            {
                'phase': 'matching',
                'failed_block': idx + 1,
                'total_blocks': total,
                'reason': 'Could not locate search content with sufficient confidence',
                'expected_location': operation.start_line,
                'expected_content': search_lines,
                'searched_range': searched_range,
                'threshold': threshold,
                'best_match': {
                    'location': match_result.start_line,
                    'confidence': round(match_result.confidence, 4),
                    'actual_content': match_result.actual_lines
                },
                'suggestion': 'Search content does not match the document. Consider reading the current '
                    'content and regenerating the block.'
            }
        )


def apply_diff(
    original_content: str,
    diff_instructions: str,
    settings: SearchReplaceSettings | None = None
) -> ApplyResult:
    """
    Apply search/replace blocks to text.

    Args:
        original_content: Text to modify
        diff_instructions: One or more search/replace blocks
        settings: Optional matching configuration

    Returns:
        ApplySuccess with the new content, or ApplyFailure with the reason
    """
    return SearchReplaceApplier(settings).apply_diff(original_content, diff_instructions)
