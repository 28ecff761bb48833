"""Shared fixtures and utilities for search/replace tests."""

import pytest

from search_replace.search_replace_applier import SearchReplaceApplier
from search_replace.search_replace_document import SearchReplaceDocument
from search_replace.search_replace_matcher import SearchReplaceMatcher
from search_replace.search_replace_parser import SearchReplaceParser
from search_replace.search_replace_resolver import SearchReplaceResolver
from search_replace.search_replace_settings import SearchReplaceSettings


@pytest.fixture
def parser():
    """Create a block parser for testing."""
    return SearchReplaceParser()


@pytest.fixture
def matcher():
    """Create a matcher with default settings."""
    return SearchReplaceMatcher()


@pytest.fixture
def matcher_custom():
    """Factory for matchers with custom configuration."""
    def _create_matcher(
        confidence_threshold: float = 0.97,
        search_window: int = 50,
        blank_line_tolerance: bool = True
    ):
        return SearchReplaceMatcher(
            confidence_threshold=confidence_threshold,
            search_window=search_window,
            blank_line_tolerance=blank_line_tolerance
        )
    return _create_matcher


@pytest.fixture
def resolver():
    """Create a conflict and order resolver."""
    return SearchReplaceResolver()


@pytest.fixture
def applier():
    """Create an applier with default settings."""
    return SearchReplaceApplier()


@pytest.fixture
def applier_custom():
    """Factory for appliers with custom settings."""
    def _create_applier(**kwargs):
        return SearchReplaceApplier(SearchReplaceSettings(**kwargs))
    return _create_applier


class SearchReplaceTestHelpers:
    """Helper utilities for search/replace testing."""

    @staticmethod
    def document(lines):
        """Create a newline-terminated document from lines."""
        return SearchReplaceDocument.from_text('\n'.join(lines) + '\n')

    @staticmethod
    def block(search, replace, start_line=None, end_line=None):
        """Build the text of one search/replace block."""
        parts = ['<<<<<<< SEARCH']
        if start_line is not None:
            parts.append(f':start_line:{start_line}')

        if end_line is not None:
            parts.append(f':end_line:{end_line}')

        if start_line is not None or end_line is not None:
            parts.append('-------')

        if search:
            parts.append(search)

        parts.append('=======')
        if replace:
            parts.append(replace)

        parts.append('>>>>>>> REPLACE')
        return '\n'.join(parts)


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return SearchReplaceTestHelpers
