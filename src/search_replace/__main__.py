"""
CLI entry point for the search/replace diff tool.

This allows the tool to be run as:
    python -m search_replace --file myfile.py --diff changes.txt
"""

import sys

from search_replace.search_replace_cli import main

if __name__ == "__main__":
    sys.exit(main())
