import logging

import typer

from familylinx.cli.commands.groups import list_subgroups_command, show_hierarchy_command
from familylinx.cli.commands.members import copy_members_command, list_members_command
from familylinx.config import get_settings

app = typer.Typer(
    name="familylinx",
    help="FamilyLinX maintenance commands: inspect groups and copy members",
    add_completion=False,
)

app.command("list-subgroups")(list_subgroups_command)
app.command("list-members")(list_members_command)
app.command("show-hierarchy")(show_hierarchy_command)
app.command("copy-members")(copy_members_command)


def main():
    logging.basicConfig(level=get_settings().log_level)
    app()


if __name__ == "__main__":
    main()
