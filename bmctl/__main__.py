"""
Main entry point for running the bmctl package directly.

    python -m bmctl poweron --name master-0
"""

import sys

from bmctl.cli import main

if __name__ == "__main__":
    sys.exit(main())
