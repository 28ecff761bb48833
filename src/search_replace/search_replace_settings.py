"""Configuration for applying search/replace diffs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchReplaceSettings:
    """
    Settings that control how search blocks are located.

    Settings are passed explicitly to each call so that the engine holds no
    process-wide state.
    """

    fuzzy_threshold: float = 0.97  # Minimum similarity to accept a non-exact match
    search_window: int = 50  # Lines searched above/below a line hint when fuzzy matching
    blank_line_tolerance: bool = True  # Allow one extra leading/trailing blank search line
    strip_line_numbers: bool = True  # Remove "N | " prefixes copied from numbered listings

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy_threshold <= 1.0:
            raise ValueError(f"fuzzy_threshold must be between 0.0 and 1.0, got {self.fuzzy_threshold}")

        if self.search_window < 0:
            raise ValueError(f"search_window must not be negative, got {self.search_window}")
