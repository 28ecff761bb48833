"""
Search/replace diff parsing, matching, and application.

This package applies blocks of search/replace edits to text, locating each
search snippet exactly or by fuzzy matching and applying every block or none.
"""

from search_replace.search_replace_applier import SearchReplaceApplier, apply_diff
from search_replace.search_replace_document import SearchReplaceDocument
from search_replace.search_replace_exceptions import (
    AmbiguousInsertionError,
    MalformedBlockError,
    NoMatchError,
    OverlappingEditsError,
    SearchReplaceError,
)
from search_replace.search_replace_matcher import SearchReplaceMatcher
from search_replace.search_replace_parser import SearchReplaceParser
from search_replace.search_replace_resolver import SearchReplaceResolver
from search_replace.search_replace_settings import SearchReplaceSettings
from search_replace.search_replace_types import (
    ApplyFailure,
    ApplyResult,
    ApplySuccess,
    EditOperation,
    FailureKind,
    MatchResult,
)

__all__ = [
    # Exceptions
    'SearchReplaceError',
    'MalformedBlockError',
    'AmbiguousInsertionError',
    'NoMatchError',
    'OverlappingEditsError',
    # Types
    'EditOperation',
    'MatchResult',
    'FailureKind',
    'ApplySuccess',
    'ApplyFailure',
    'ApplyResult',
    'SearchReplaceSettings',
    'SearchReplaceDocument',
    # Core classes
    'SearchReplaceParser',
    'SearchReplaceMatcher',
    'SearchReplaceResolver',
    'SearchReplaceApplier',
    'apply_diff',
]
