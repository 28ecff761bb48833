"""Search/replace block parsing."""

from enum import Enum, auto
import logging
import re
from typing import List

from search_replace.search_replace_document import split_text_lines
from search_replace.search_replace_exceptions import AmbiguousInsertionError, MalformedBlockError
from search_replace.search_replace_types import EditOperation


class ParserState(Enum):
    """States of the block parser."""

    EXPECT_SEARCH = auto()  # Between blocks, waiting for a SEARCH marker
    IN_SEARCH = auto()  # Collecting line hints and search content
    IN_REPLACE = auto()  # Collecting replacement content
    DONE = auto()  # All input consumed


class SearchReplaceParser:
    """
    Parser for search/replace diff blocks.

    Expected format:
    <<<<<<< SEARCH
    :start_line:12
    -------
    original line 1
    original line 2
    =======
    new line 1
    >>>>>>> REPLACE

    The line hints and the "-------" separator are optional.  Markers are
    only recognized on their own line, starting in the first column, and only
    in their expected position; anything else is content.
    """

    SEARCH_MARKER = re.compile(r'^<<<<<<< SEARCH>?\s*$')
    DIVIDER_MARKER = re.compile(r'^=======\s*$')
    REPLACE_MARKER = re.compile(r'^>>>>>>> REPLACE\s*$')
    HINT_SEPARATOR = re.compile(r'^-------\s*$')
    LINE_HINT = re.compile(r'^:(start_line|end_line):(.*)$')
    HINT_VALUE = re.compile(r'[0-9]+')

    # A backslash in front of a marker keeps it as literal content
    ESCAPED_MARKER = re.compile(r'^\\(<<<<<<<|=======|>>>>>>>|-------|:start_line:|:end_line:)')

    # "12 | code" prefixes copied from numbered file listings
    LINE_NUMBER_PREFIX = re.compile(r'^\s*[0-9]+\s+\|(?!\|)')
    LINE_NUMBER_STRIP = re.compile(r'^\s*[0-9]+\s+\|(?!\|) ?')

    def __init__(self, strip_line_numbers: bool = True):
        """
        Initialize the parser.

        Args:
            strip_line_numbers: Remove "N | " prefixes when every search line has one
        """
        self._strip_line_numbers = strip_line_numbers
        self._logger = logging.getLogger("SearchReplaceParser")

    def parse(self, diff_text: str) -> List[EditOperation]:
        """
        Parse diff text into edit operations.

        Args:
            diff_text: Text containing one or more search/replace blocks

        Returns:
            Edit operations in the order they appear

        Raises:
            MalformedBlockError: If the block structure is invalid
            AmbiguousInsertionError: If a block has empty search text and no line hint
        """
        if not isinstance(diff_text, str):
            raise TypeError(f"Diff text must be a string, got {type(diff_text).__name__}")

        operations: List[EditOperation] = []
        state = ParserState.EXPECT_SEARCH

        search_lines: List[str] = []
        replace_lines: List[str] = []
        start_line: int | None = None
        end_line: int | None = None
        in_header = False
        block_start = 0

        for line_num, line in enumerate(split_text_lines(diff_text), 1):
            if state == ParserState.EXPECT_SEARCH:
                if self.SEARCH_MARKER.match(line):
                    state = ParserState.IN_SEARCH
                    search_lines = []
                    replace_lines = []
                    start_line = None
                    end_line = None
                    in_header = True
                    block_start = line_num
                    continue

                if self.DIVIDER_MARKER.match(line) or self.REPLACE_MARKER.match(line):
                    self._raise_malformed(
                        len(operations) + 1,
                        line_num,
                        f"Unexpected '{line.strip()}' without a preceding '<<<<<<< SEARCH'",
                    )

                # Anything between blocks is commentary
                continue

            if state == ParserState.IN_SEARCH:
                if self.DIVIDER_MARKER.match(line):
                    state = ParserState.IN_REPLACE
                    continue

                if self.SEARCH_MARKER.match(line):
                    self._raise_malformed(
                        len(operations) + 1,
                        line_num,
                        f"Nested '<<<<<<< SEARCH' inside the search section of the block started at line {block_start}",
                    )

                if self.REPLACE_MARKER.match(line):
                    self._raise_malformed(
                        len(operations) + 1,
                        line_num,
                        "Found '>>>>>>> REPLACE' before the '=======' divider",
                    )

                if in_header:
                    hint = self.LINE_HINT.match(line)
                    if hint:
                        value = self._parse_hint_value(hint.group(2), len(operations) + 1, line_num)
                        if hint.group(1) == 'start_line':
                            start_line = value

                        else:
                            end_line = value

                        continue

                    in_header = False
                    if self.HINT_SEPARATOR.match(line):
                        continue

                search_lines.append(self._unescape(line))
                continue

            # state == ParserState.IN_REPLACE
            if self.REPLACE_MARKER.match(line):
                operations.append(self._build_operation(
                    search_lines, replace_lines, start_line, end_line, len(operations) + 1, block_start
                ))
                state = ParserState.EXPECT_SEARCH
                continue

            if self.SEARCH_MARKER.match(line) or self.DIVIDER_MARKER.match(line):
                self._raise_malformed(
                    len(operations) + 1,
                    line_num,
                    f"Unexpected '{line.strip()}' inside the replace section of the block started at line {block_start}",
                )

            replace_lines.append(self._unescape(line))

        if state == ParserState.IN_SEARCH:
            self._raise_malformed(
                len(operations) + 1,
                block_start,
                "'<<<<<<< SEARCH' has no matching '=======' divider",
            )

        if state == ParserState.IN_REPLACE:
            self._raise_malformed(
                len(operations) + 1,
                block_start,
                "'=======' divider has no matching '>>>>>>> REPLACE'",
            )

        state = ParserState.DONE

        if not operations:
            raise MalformedBlockError(
                "No search/replace blocks found",
                {
                    'phase': 'parsing',
                    'reason': 'No search/replace blocks found',
                    'suggestion': "Each block must start with '<<<<<<< SEARCH', contain a '=======' divider "
                        "and end with '>>>>>>> REPLACE', each marker on its own line."
                }
            )

        self._logger.debug("Parsed %d search/replace block(s)", len(operations))
        return operations

    def _parse_hint_value(self, value: str, block_num: int, line_num: int, label: str = "Line hint") -> int:
        """
        Parse the number from a line hint.

        Args:
            value: Text after the hint name
            block_num: Block being parsed (1-indexed)
            line_num: Diff line number of the hint
            label: Name of the value in error messages

        Returns:
            Hinted line number
        """
        value = value.strip()
        if not self.HINT_VALUE.fullmatch(value) or int(value) < 1:
            self._raise_malformed(block_num, line_num, f"{label} must be a positive integer, got '{value}'")

        return int(value)

    def _unescape(self, line: str) -> str:
        """Remove the backslash from an escaped marker line."""
        if self.ESCAPED_MARKER.match(line):
            return line[1:]

        return line

    def _has_line_numbers(self, lines: List[str]) -> bool:
        """Check if every line carries a "N | " prefix."""
        return bool(lines) and all(self.LINE_NUMBER_PREFIX.match(line) for line in lines)

    def _build_operation(
        self,
        search_lines: List[str],
        replace_lines: List[str],
        start_line: int | None,
        end_line: int | None,
        block_num: int,
        block_start: int
    ) -> EditOperation:
        """
        Build an edit operation from the collected block content.

        Args:
            search_lines: Search section lines
            replace_lines: Replace section lines
            start_line: Start line hint, if any
            end_line: End line hint, if any
            block_num: Block number (1-indexed)
            block_start: Diff line number of the block's SEARCH marker

        Returns:
            Edit operation for the block
        """
        blank_line_search = False
        if self._strip_line_numbers and self._has_line_numbers(search_lines) and (
            self._has_line_numbers(replace_lines) or not ''.join(replace_lines).strip()
        ):
            if start_line is None:
                start_line = self._parse_hint_value(
                    search_lines[0].split('|', 1)[0], block_num, block_start, "Line number prefix"
                )

            search_lines = [self.LINE_NUMBER_STRIP.sub('', line) for line in search_lines]
            replace_lines = [self.LINE_NUMBER_STRIP.sub('', line) for line in replace_lines]

            # A numbered blank line names an existing line to replace
            blank_line_search = search_lines == ['']

        if start_line is not None and end_line is not None and end_line < start_line:
            self._raise_malformed(
                block_num,
                block_start,
                f"':end_line:{end_line}' is before ':start_line:{start_line}'",
            )

        search_text = '\n'.join(search_lines)
        if search_text == '' and start_line is None and not blank_line_search:
            raise AmbiguousInsertionError(
                f"Block {block_num} has empty search content and no ':start_line:' hint",
                {
                    'phase': 'parsing',
                    'block': block_num,
                    'diff_line': block_start,
                    'reason': 'Empty search content needs a line hint to know where to insert',
                    'suggestion': "Add ':start_line:N' after '<<<<<<< SEARCH' to insert before line N, "
                        "or include the lines to replace in the search section."
                }
            )

        return EditOperation(
            search_text=search_text,
            replace_text='\n'.join(replace_lines),
            start_line=start_line,
            end_line=end_line,
            blank_line_search=blank_line_search,
        )

    def _raise_malformed(self, block_num: int, line_num: int, reason: str) -> None:
        """
        Raise a MalformedBlockError for a structural problem.

        Args:
            block_num: Block being parsed (1-indexed)
            line_num: Diff line number where the problem was found
            reason: Description of the problem

        Raises:
            MalformedBlockError: Always
        """
        raise MalformedBlockError(
            f"Malformed block {block_num} at diff line {line_num}: {reason}",
            {
                'phase': 'parsing',
                'block': block_num,
                'diff_line': line_num,
                'reason': reason,
                'suggestion': "Use the sequence '<<<<<<< SEARCH', search lines, '=======', replace lines, "
                    "'>>>>>>> REPLACE'.  Escape content lines that look like markers with a leading backslash, "
                    "e.g. '\\======='."
            }
        )
