#!/usr/bin/env python3
"""
Entry point for running the digest as a module.

    python -m gcp_release_digest          # run one digest and exit
    python -m gcp_release_digest serve    # serve the HTTP trigger
"""

import argparse
import sys

from gcp_release_digest.app import get_app


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="gcp_release_digest",
        description="Summarize Google Cloud release notes and post them to chat webhooks",
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["run", "serve"],
        default="run",
        help="'run' a single digest (default) or 'serve' the HTTP trigger",
    )
    args = parser.parse_args(argv)

    app = get_app()
    if args.command == "serve":
        app.run()
        return 0

    status_code, _ = app.trigger()
    return 0 if status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
