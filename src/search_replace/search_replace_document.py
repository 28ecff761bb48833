"""Immutable line-oriented document model."""

import re
from collections import Counter
from typing import List, Sequence, Tuple


_LINE_TERMINATOR = re.compile(r'\r\n|\r|\n')


def split_text_lines(text: str) -> List[str]:
    """
    Split text into lines on line terminators only.

    Unlike str.splitlines() this does not break on form feeds, vertical tabs or
    Unicode line separators, and a trailing terminator yields a final empty
    line.

    Args:
        text: Text to split

    Returns:
        List of lines without terminators
    """
    return _LINE_TERMINATOR.split(text)


class SearchReplaceDocument:
    """
    An ordered sequence of 1-indexed lines, each with its own terminator.

    Instances are never modified; splice() returns a new document.
    """

    def __init__(self, lines: Sequence[str], line_endings: Sequence[str], newline: str = '\n'):
        """
        Initialize the document.

        Args:
            lines: Line contents without terminators
            line_endings: Terminator of each line ('' for an unterminated last line)
            newline: Terminator used for lines added by edits
        """
        if len(lines) != len(line_endings):
            raise ValueError("Every line needs exactly one line ending")

        self._lines: Tuple[str, ...] = tuple(lines)
        self._line_endings: Tuple[str, ...] = tuple(line_endings)
        self._newline = newline

    @classmethod
    def from_text(cls, text: str) -> 'SearchReplaceDocument':
        """
        Build a document from text, recording every line terminator.

        Args:
            text: Document content

        Returns:
            New document
        """
        if not isinstance(text, str):
            raise TypeError(f"Document content must be a string, got {type(text).__name__}")

        lines: List[str] = []
        line_endings: List[str] = []
        position = 0
        for terminator in _LINE_TERMINATOR.finditer(text):
            lines.append(text[position:terminator.start()])
            line_endings.append(terminator.group())
            position = terminator.end()

        if position < len(text):
            lines.append(text[position:])
            line_endings.append('')

        return cls(lines, line_endings, cls._dominant_newline(line_endings))

    @staticmethod
    def _dominant_newline(line_endings: Sequence[str]) -> str:
        """
        Find the most common line terminator.

        Args:
            line_endings: Terminators in document order

        Returns:
            Most frequent terminator, the first seen on ties, '\\n' if none
        """
        counts = Counter(ending for ending in line_endings if ending)
        if not counts:
            return '\n'

        # Counter preserves insertion order, so max() picks the first seen on ties
        return max(counts, key=lambda ending: counts[ending])

    @property
    def lines(self) -> Tuple[str, ...]:
        """Line contents without terminators."""
        return self._lines

    @property
    def line_endings(self) -> Tuple[str, ...]:
        """Terminator of each line."""
        return self._line_endings

    @property
    def newline(self) -> str:
        """Terminator used for new lines."""
        return self._newline

    def line_count(self) -> int:
        """Get the number of lines in the document."""
        return len(self._lines)

    def get_lines(self, start_line: int, count: int) -> List[str]:
        """
        Get lines from the document.

        Args:
            start_line: Starting line number (1-indexed)
            count: Number of lines to retrieve

        Returns:
            List of line contents, shorter than count at the end of the document
        """
        start_idx = max(0, start_line - 1)
        return list(self._lines[start_idx:start_idx + count])

    def splice(self, start_line: int, end_line: int, new_lines: Sequence[str]) -> 'SearchReplaceDocument':
        """
        Replace an inclusive line range with new lines.

        An insertion is expressed as end_line == start_line - 1, placing the new
        lines before start_line. Lines outside the range keep their content and
        terminators. New lines reuse the terminators of the lines they replace,
        in order, and extra lines use the dominant terminator. When the range
        reaches the end of the document the last line of the result takes over
        the original final terminator.

        Args:
            start_line: First line to replace (1-indexed)
            end_line: Last line to replace (inclusive)
            new_lines: Replacement line contents

        Returns:
            New document
        """
        line_count = len(self._lines)
        if start_line < 1 or end_line < start_line - 1 or end_line > line_count:
            raise ValueError(f"Invalid line range {start_line}-{end_line} for document of {line_count} lines")

        head_lines = list(self._lines[:start_line - 1])
        head_endings = list(self._line_endings[:start_line - 1])
        replaced_endings = [ending or self._newline for ending in self._line_endings[start_line - 1:end_line]]
        new_endings = [
            replaced_endings[idx] if idx < len(replaced_endings) else self._newline for idx in range(len(new_lines))
        ]

        if end_line == line_count:
            final_ending = self._line_endings[-1] if self._line_endings else ''
            if new_lines:
                new_endings[-1] = final_ending
                if head_endings and head_endings[-1] == '':
                    head_endings[-1] = self._newline

            elif head_endings and final_ending == '':
                head_endings[-1] = ''

        lines = head_lines + list(new_lines) + list(self._lines[end_line:])
        line_endings = head_endings + new_endings + list(self._line_endings[end_line:])
        return SearchReplaceDocument(lines, line_endings, self._newline)

    def to_text(self) -> str:
        """Reassemble the document into text."""
        return ''.join(line + ending for line, ending in zip(self._lines, self._line_endings))
