"""
Command-line interface for containermon.
"""

from .main import main_cli

__all__ = ["main_cli"]
