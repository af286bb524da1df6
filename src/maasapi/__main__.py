"""
MAAS API CLI entry point.

Usage:
    python -m maasapi --url http://maas:5240/MAAS probe
    python -m maasapi versions
"""

from maasapi.cli import main

if __name__ == "__main__":
    main()
