#!/usr/bin/env python3
"""
Convenience script to run enrichment with common settings.
"""

import sys
from addon_gallery.cli import app


def main():
    # Default arguments for common use case
    default_args = [
        "enrich",
        "--out", "data/output/gallery.csv",
        "--pacing", "1.0",
    ]

    # Use command line args if provided, otherwise use defaults
    if len(sys.argv) > 1:
        app()
    else:
        print("Running with default settings...")
        print(f"Command: addon-gallery {' '.join(default_args)}")
        sys.argv.extend(default_args)
        app()


if __name__ == "__main__":
    main()
