"""
FamilyLinX API module.

Provides FastAPI HTTP endpoints for families, groups, members, albums and the
calendar.
"""

from familylinx.api.main import app, run_server

__all__ = ["app", "run_server"]
