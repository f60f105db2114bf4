"""
CLI command modules for FamilyLinX.

Each command function is registered on the Typer app in ``familylinx.cli.app``.
"""

from familylinx.cli.commands.groups import list_subgroups_command, show_hierarchy_command
from familylinx.cli.commands.members import copy_members_command, list_members_command

__all__ = [
    "copy_members_command",
    "list_members_command",
    "list_subgroups_command",
    "show_hierarchy_command",
]
