"""
CLI package for FamilyLinX.

Provides the Typer application entrypoint for maintenance commands.
"""

from familylinx.cli.app import app, main

__all__ = [
    "app",
    "main",
]
