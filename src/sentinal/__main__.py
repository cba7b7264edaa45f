# SPDX-License-Identifier: MIT
"""Package entry point: run sentinal via `python -m sentinal`."""

import sys

from sentinal.cli import main

if __name__ == "__main__":
    sys.exit(main())
