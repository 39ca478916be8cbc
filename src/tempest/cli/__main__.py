"""
CLI entry point for tempest.cli module.

This allows running: python -m tempest.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
