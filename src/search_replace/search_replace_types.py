"""Shared dataclasses for search/replace diff operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class FailureKind(Enum):
    """Reasons a diff can be rejected."""

    MALFORMED_BLOCK = "MalformedBlock"
    AMBIGUOUS_INSERTION = "AmbiguousInsertion"
    NO_MATCH = "NoMatch"
    OVERLAPPING_EDITS = "OverlappingEdits"


@dataclass(frozen=True)
class EditOperation:
    """A single search/replace instruction."""

    search_text: str  # Expected original content, empty for a pure insertion
    replace_text: str  # Replacement content, empty to delete the matched lines
    start_line: int | None = None  # Advisory starting line (1-indexed)
    end_line: int | None = None  # Advisory ending line (1-indexed, inclusive)
    blank_line_search: bool = False  # Empty search_text stands for one blank line, not an insertion

    @property
    def is_insertion(self) -> bool:
        """True if this operation inserts without replacing anything."""
        return self.search_text == "" and not self.blank_line_search


@dataclass
class MatchResult:
    """Result of attempting to locate an edit operation in a document."""

    success: bool
    start_line: int  # First matched line (1-indexed)
    end_line: int  # Last matched line (inclusive), start_line - 1 for insertions
    confidence: float  # 0.0 to 1.0
    match_type: str  # "exact", "fuzzy" or "insertion"
    actual_lines: List[str] = field(default_factory=list)
    leading_blank_trimmed: int = 0  # Blank search lines dropped from the front
    trailing_blank_trimmed: int = 0  # Blank search lines dropped from the back

    @property
    def line_count(self) -> int:
        """Number of document lines covered by the match."""
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class ApplySuccess:
    """A diff that was applied in full."""

    content: str
    blocks_applied: int = 0
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ApplyFailure:
    """A diff that was rejected; nothing was changed."""

    reason: FailureKind
    detail: str
    error_details: dict[str, Any] | None = None
    success: bool = field(default=False, init=False)


ApplyResult = ApplySuccess | ApplyFailure
