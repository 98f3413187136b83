"""Main entry point for the reelstore CLI.

Usage:
    python -m reelstore --help
    reelstore --help  # If installed via pip/uv
"""

from reelstore.cli import main

if __name__ == "__main__":
    main()
