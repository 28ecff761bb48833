#!/usr/bin/env python3
"""
Search/replace diff tool - apply search/replace blocks to a file.

Usage:
    python -m search_replace --file <source_file> --diff <diff_file> [options]

Options:
    --file PATH       Source file to edit (required)
    --diff PATH       File containing search/replace blocks (required)
    --apply           Actually write the changes (default is dry-run)
    --backup          Create backup before applying (file.bak)
    --threshold F     Minimum similarity for fuzzy matches (default: 0.97)
    --window N        Lines searched around a line hint (default: 50)
    --json            Print the result as JSON
    --verbose         Show detailed output
    --no-color        Disable colored output
"""

import argparse
import json
import logging
from pathlib import Path
import shutil
import sys
from typing import List

from search_replace.search_replace_applier import SearchReplaceApplier
from search_replace.search_replace_settings import SearchReplaceSettings
from search_replace.search_replace_types import ApplyFailure, ApplyResult


class Colors:
    """ANSI color codes for terminal output."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'

    @classmethod
    def disable(cls) -> None:
        """Disable colors (for non-terminal output)."""
        cls.RESET = ''
        cls.BOLD = ''
        cls.RED = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.CYAN = ''


class SearchReplaceCLI:
    """
    Command-line front end.

    Coordinates:
    - Reading the source and diff files
    - Applying the diff
    - Reporting the result and writing the file
    """

    def __init__(self, args: argparse.Namespace):
        """
        Initialize the tool with command-line arguments.

        Args:
            args: Parsed command-line arguments
        """
        self.args = args
        self.source_file = Path(args.file)
        self.diff_file = Path(args.diff)
        self._logger = logging.getLogger("SearchReplaceCLI")

        if not sys.stdout.isatty() or args.no_color or args.json:
            Colors.disable()

        self.applier = SearchReplaceApplier(SearchReplaceSettings(
            fuzzy_threshold=args.threshold,
            search_window=args.window
        ))

    def run(self) -> int:
        """
        Run the tool.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        for path in (self.source_file, self.diff_file):
            if not path.is_file():
                self._print_error(f"File not found: {path}")
                return 1

        try:
            # Keep line endings exactly as they are on disk
            with open(self.source_file, 'r', encoding='utf-8', newline='') as f:
                original_content = f.read()

            with open(self.diff_file, 'r', encoding='utf-8', newline='') as f:
                diff_text = f.read()

        except (OSError, UnicodeDecodeError) as e:
            self._print_error(f"Failed to read input: {e}")
            return 1

        result = self.applier.apply_diff(original_content, diff_text, dry_run=not self.args.apply)

        if self.args.json:
            print(json.dumps(self._result_to_dict(result), indent=2, ensure_ascii=False))

        else:
            self._show_result(result)

        if isinstance(result, ApplyFailure):
            return 1

        if not self.args.apply:
            return 0

        if self.args.backup:
            backup_file = self.source_file.with_suffix(self.source_file.suffix + '.bak')
            try:
                shutil.copy2(self.source_file, backup_file)

            except OSError as e:
                self._print_error(f"Failed to create backup: {e}")
                return 1

            self._logger.info("Created backup: %s", backup_file)

        try:
            with open(self.source_file, 'w', encoding='utf-8', newline='') as f:
                f.write(result.content)

        except OSError as e:
            self._print_error(f"Failed to write {self.source_file}: {e}")
            return 1

        self._logger.info("Wrote %s", self.source_file)
        return 0

    def _result_to_dict(self, result: ApplyResult) -> dict:
        """Convert a result into a JSON-serializable dictionary."""
        if isinstance(result, ApplyFailure):
            return {
                'status': 'failed',
                'file': str(self.source_file),
                'reason': result.reason.value,
                'detail': result.detail,
                'error_details': result.error_details,
            }

        return {
            'status': 'applied' if self.args.apply else 'valid',
            'file': str(self.source_file),
            'blocks_applied': result.blocks_applied,
        }

    def _show_result(self, result: ApplyResult) -> None:
        """Display the outcome in human-readable form."""
        if isinstance(result, ApplyFailure):
            print(f"{Colors.RED}✗ Diff rejected ({result.reason.value}):{Colors.RESET}")
            print(result.detail)
            return

        if self.args.apply:
            print(f"{Colors.GREEN}✓ Applied {result.blocks_applied} block(s){Colors.RESET}")
            print(f"  Modified: {Colors.CYAN}{self.source_file}{Colors.RESET}")
            return

        print(f"{Colors.GREEN}✓ All {result.blocks_applied} block(s) can be applied{Colors.RESET}")
        print(f"\n{Colors.YELLOW}Dry-run mode: No changes were made{Colors.RESET}")
        print(f"  Use {Colors.BOLD}--apply{Colors.RESET} to actually apply the diff")

    def _print_error(self, message: str) -> None:
        """Print error message."""
        print(f"{Colors.RED}Error:{Colors.RESET} {message}", file=sys.stderr)


def parse_arguments(argv: List[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Apply search/replace blocks to a file with fuzzy matching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dry run (default) - check that every block can be applied
  python -m search_replace --file src/example.py --diff changes.txt

  # Apply with backup
  python -m search_replace --file src/example.py --diff changes.txt --apply --backup

  # Accept looser fuzzy matches near the line hints
  python -m search_replace --file src/example.py --diff changes.txt --threshold 0.9 --window 100
        """
    )

    parser.add_argument('--file', required=True, help='Source file to edit')
    parser.add_argument('--diff', required=True, help='File containing search/replace blocks')
    parser.add_argument('--apply', action='store_true', help='Actually write the changes (default is dry-run)')
    parser.add_argument('--backup', action='store_true', help='Create backup before applying (file.bak)')
    parser.add_argument(
        '--threshold',
        type=float,
        default=0.97,
        help='Minimum similarity for fuzzy matches (default: 0.97)'
    )
    parser.add_argument(
        '--window',
        type=int,
        default=50,
        help='Lines searched above/below a line hint (default: 50)'
    )
    parser.add_argument('--json', action='store_true', help='Print the result as JSON')
    parser.add_argument('--verbose', action='store_true', help='Show detailed output')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')

    args = parser.parse_args(argv)
    if not 0.0 <= args.threshold <= 1.0:
        parser.error('--threshold must be between 0.0 and 1.0')

    if args.window < 0:
        parser.error('--window must not be negative')

    return args


def setup_logging(verbose: bool) -> None:
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def main(argv: List[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    return SearchReplaceCLI(args).run()


if __name__ == "__main__":
    sys.exit(main())
