"""
ASGI entry point for FamilyLinX.

Re-exports the FastAPI app from familylinx/api/main.py for ASGI servers.
"""

from familylinx.api.main import app

__all__ = ["app"]
