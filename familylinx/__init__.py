"""
FamilyLinX - family tree and photo album service.
"""

__version__ = "0.1.0"
