"""
CLI module for fsguard.

Provides command-line access to pattern resolution, bounded reads and
permission checks.
"""

from fsguard.cli.main import cli

__all__ = ["cli"]
