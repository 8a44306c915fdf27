"""
Main entry point for buildbox.

This module allows buildbox to be run as:
    python -m buildbox
"""

from .cli import main

if __name__ == "__main__":
    main()
