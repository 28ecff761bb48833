"""Unicode-aware text comparison helpers."""

import difflib
import unicodedata
from typing import List


_ZERO_WIDTH_JOINER = '\u200d'

# Typographic characters that upstream generators commonly swap for their ASCII forms
_TYPOGRAPHIC_EQUIVALENTS = str.maketrans({
    '\u2018': "'",
    '\u2019': "'",
    '\u201a': "'",
    '\u201b': "'",
    '\u201c': '"',
    '\u201d': '"',
    '\u201e': '"',
    '\u201f': '"',
    '\u2013': '-',
    '\u2014': '-',
    '\u2026': '...',
    '\u00a0': ' ',
})


def _is_regional_indicator(char: str) -> bool:
    return '\U0001f1e6' <= char <= '\U0001f1ff'


def _extends_cluster(char: str) -> bool:
    """
    Check if a code point attaches to the preceding grapheme cluster.

    Args:
        char: Single code point

    Returns:
        True for combining marks, variation selectors, joiners, emoji
        modifiers and tag characters
    """
    if unicodedata.category(char) in ('Mn', 'Mc', 'Me'):
        return True

    if char == _ZERO_WIDTH_JOINER:
        return True

    # Emoji skin tone modifiers
    if '\U0001f3fb' <= char <= '\U0001f3ff':
        return True

    # Tag characters used by subdivision flags
    return '\U000e0020' <= char <= '\U000e007f'


def split_graphemes(text: str) -> List[str]:
    """
    Split text into user-perceived characters.

    This follows the parts of the Unicode extended grapheme cluster rules that
    matter for source text: combining sequences, emoji ZWJ sequences, emoji
    modifiers, tag sequences and regional indicator flag pairs each form one
    cluster.

    Args:
        text: Text to split

    Returns:
        List of grapheme clusters whose concatenation is the input text
    """
    clusters: List[str] = []
    join_next = False

    for char in text:
        if clusters and (
            join_next
            or _extends_cluster(char)
            or (len(clusters[-1]) == 1 and _is_regional_indicator(clusters[-1]) and _is_regional_indicator(char))
        ):
            clusters[-1] += char

        else:
            clusters.append(char)

        join_next = char == _ZERO_WIDTH_JOINER

    return clusters


def normalize_for_comparison(text: str) -> str:
    """
    Normalize text before similarity scoring.

    Applies NFC so composed and decomposed forms compare equal, then maps smart
    quotes, dashes, ellipses and non-breaking spaces to ASCII.  Only used for
    scoring: matched document text is never rewritten.

    Args:
        text: Text to normalize

    Returns:
        Normalized text
    """
    return unicodedata.normalize('NFC', text).translate(_TYPOGRAPHIC_EQUIVALENTS)


class SimilarityScorer:
    """
    Scores candidate texts against one fixed reference text.

    The reference is prepared once, so scoring many windows of a document
    against the same search text only pays for the candidates.
    """

    def __init__(self, reference: str):
        """
        Initialize the scorer.

        Args:
            reference: Text every candidate is compared with
        """
        self._matcher = difflib.SequenceMatcher(None, autojunk=False)
        self._matcher.set_seq2(split_graphemes(normalize_for_comparison(reference)))

    def ratio(self, candidate: str, floor: float = 0.0) -> float:
        """
        Calculate the similarity between the reference and a candidate.

        Args:
            candidate: Text to score
            floor: Scores below this are not of interest; when a cheap upper
                bound already falls below it, that bound is returned instead
                of the exact ratio

        Returns:
            Similarity score from 0.0 to 1.0
        """
        self._matcher.set_seq1(split_graphemes(normalize_for_comparison(candidate)))

        upper_bound = self._matcher.real_quick_ratio()
        if upper_bound < floor:
            return upper_bound

        upper_bound = self._matcher.quick_ratio()
        if upper_bound < floor:
            return upper_bound

        return self._matcher.ratio()
