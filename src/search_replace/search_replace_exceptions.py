"""Custom exceptions for search/replace diff operations."""

from typing import Any

from search_replace.search_replace_types import FailureKind


class SearchReplaceError(Exception):
    """Base exception for search/replace diff operations."""

    failure_kind: FailureKind  # Set by every concrete subclass

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class MalformedBlockError(SearchReplaceError):
    """Raised when the diff text does not follow the block grammar."""

    failure_kind = FailureKind.MALFORMED_BLOCK


class AmbiguousInsertionError(SearchReplaceError):
    """Raised when a block has empty search text but no line hint."""

    failure_kind = FailureKind.AMBIGUOUS_INSERTION


class NoMatchError(SearchReplaceError):
    """Raised when a block's search text cannot be located."""

    failure_kind = FailureKind.NO_MATCH


class OverlappingEditsError(SearchReplaceError):
    """Raised when two resolved blocks affect overlapping line ranges."""

    failure_kind = FailureKind.OVERLAPPING_EDITS
