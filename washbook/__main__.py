"""
Convenience entry point for running washbook directly.

Usage: python -m washbook [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
