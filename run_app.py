#!/usr/bin/env python3
"""
Simple script to serve the digest HTTP trigger.
"""

from gcp_release_digest.app import get_app


def main():
    """Run the app."""
    get_app().run()


if __name__ == "__main__":
    main()
