"""
PowerAttr CLI Entry Point

This module allows running PowerAttr as:
    python -m powerattr [command] [options]
"""

from powerattr.cli import cli

if __name__ == "__main__":
    cli()
