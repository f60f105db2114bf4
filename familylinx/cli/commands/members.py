import typer
from rich.table import Table

from familylinx.cli.utils import console, db_session, load_root, run_or_fail
from familylinx.services.migration import copy_members, resolve_group_path


def list_members_command(
    root_slug: str = typer.Argument(..., help="Slug of the root group"),
):
    """
    List the members of a root group and whether they have a sub-group.
    """
    with db_session() as db:
        tree, root = load_root(db, root_slug)
        members = tree.persons(root.id)

        if not members:
            console.print("No members found in this group")
            return

        table = Table(title=f"Members of /{root_slug} ({len(members)} total)")
        table.add_column("#", justify="right")
        table.add_column("Name", style="bold")
        table.add_column("ID")
        table.add_column("Relationship")
        table.add_column("Sub-group")

        for index, person in enumerate(members, start=1):
            table.add_row(
                str(index),
                person.name,
                person.id,
                person.relationship,
                f"yes ({person.sub_group_id})" if person.sub_group_id else "no",
            )
        console.print(table)


def copy_members_command(
    source: str = typer.Argument(..., help="Slug path of the source group, e.g. suhaidi"),
    destination: str = typer.Argument(..., help="Slug path of the destination, e.g. toknggal/ngahjusoh/alisulong"),
):
    """
    Copy every member of one group into another, with new ids.

    Existing destination members are kept.
    """
    with db_session() as db:
        source_group = run_or_fail(resolve_group_path, db, source)
        destination_group = run_or_fail(resolve_group_path, db, destination)
        console.print(f"Source: [bold]{source_group.name}[/bold] ({source_group.id})")
        console.print(f"Destination: [bold]{destination_group.name}[/bold] ({destination_group.id})")

        copies = copy_members(db, source_group, destination_group)
        if not copies:
            console.print("No members found in the source group")
            return

        for person in copies:
            console.print(f"  copied {person.name} ({len(person.photos)} photo(s))")
        console.print(
            f"[green]Copied {len(copies)} member(s); destination now has "
            f"{len(destination_group.persons)}[/green]"
        )
