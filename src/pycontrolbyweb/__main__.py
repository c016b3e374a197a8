"""
Entry point for ``python -m pycontrolbyweb``.

All argument parsing lives in cli.py.
"""

import sys

from pycontrolbyweb.cli import main

if __name__ == "__main__":
    sys.exit(main())
