"""
Main entry point for running as module: python -m zkglossary
"""
from zkglossary.cli.cli_interface import cli

if __name__ == '__main__':
    cli()
