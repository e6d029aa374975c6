"""
Entry point for running airwayfit as a module.

Usage:
    python -m airwayfit brands
    python -m airwayfit match --name "i-gel" --manufacturer Intersurgical --size 4
    python -m airwayfit serve --port 8000
"""

import sys

from airwayfit.cli.main import cli

if __name__ == "__main__":
    sys.exit(cli())
