#!/usr/bin/env python3
"""
ascii-view - Render web pages as fixed-width, navigable text.

Quick start:
    python main.py https://example.com        # Render a live page
    python main.py page.json                  # Render a captured styled tree
    python main.py https://example.com -p     # Browse in the pager

For more options: python main.py --help
"""

from ascii_view.cli import main

if __name__ == "__main__":
    exit(main())
