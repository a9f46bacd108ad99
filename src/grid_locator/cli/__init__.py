"""CLI package for Grid Locator.

Execute via:
  python -m grid_locator.cli <command> [options]

Or, once installed, through the console script:
  grid-locator <command>

Commands implemented in `main.py` using the standard library `argparse`.
"""

from .main import main  # re-export for python -m grid_locator.cli

__all__ = ["main"]
