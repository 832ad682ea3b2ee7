#!/usr/bin/env python3
"""Entry point for the Animal Face ID desktop window."""

import os
import sys

HERE = os.path.dirname(os.path.abspath(__file__))
if HERE not in sys.path:
    sys.path.insert(0, HERE)

from petid.cli import configure_logging
from petid.core.config import ServiceConfig


def main() -> int:
    configure_logging("-v" in sys.argv[1:] or "--verbose" in sys.argv[1:])
    try:
        config = ServiceConfig.from_env()
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    from petid.ui.main_window import run

    run(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
