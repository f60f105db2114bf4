from typing import Optional

import typer
from rich.table import Table
from rich.tree import Tree

from familylinx.cli.utils import console, db_session, load_root
from familylinx.services.migration import search_groups
from familylinx.services.tree import GroupTree, HierarchyNode


def list_subgroups_command(
    root_slug: str = typer.Argument(..., help="Slug of the root group, e.g. toknggal"),
):
    """
    List the direct sub-groups of a root group.
    """
    with db_session() as db:
        tree, root = load_root(db, root_slug)
        children = tree.children_of(root.id)

        if not children:
            console.print(f"No sub-groups found under /{root_slug}")
            return

        table = Table(title=f"Sub-groups of /{root_slug} ({len(children)})")
        table.add_column("#", justify="right")
        table.add_column("Name", style="bold")
        table.add_column("Slug")
        table.add_column("ID")
        table.add_column("Members", justify="right")

        for index, group in enumerate(children, start=1):
            table.add_row(
                str(index),
                group.name,
                group.slug or "(no slug)",
                group.id,
                str(len(tree.persons(group.id))),
            )
        console.print(table)


def _add_branch(branch: Tree, node: HierarchyNode) -> None:
    for child in node.children:
        label = f"/{child.path}  [bold]{child.name}[/bold]  ({child.id}, {child.member_count} members)"
        _add_branch(branch.add(label), child)


def _print_matches(tree: GroupTree, text: str) -> None:
    matches = search_groups(tree, text)
    if not matches:
        console.print(f"No groups found with name or slug containing \"{text}\"")
        return

    console.print(f"Found {len(matches)} group(s) matching \"{text}\":")
    for index, group in enumerate(matches, start=1):
        parent = tree.get(group.parent_group_id) if group.parent_group_id else None
        parent_label = f"{parent.name} (slug: {parent.slug})" if parent else "none (root)"
        console.print(f"{index}. [bold]{group.name}[/bold]  slug={group.slug}  id={group.id}  parent={parent_label}")


def show_hierarchy_command(
    root_slug: str = typer.Argument(..., help="Slug of the root group"),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Also list groups whose slug equals or name contains this text",
    ),
):
    """
    Print the group tree under a root group with slug paths.
    """
    with db_session() as db:
        tree, root = load_root(db, root_slug)
        node = tree.hierarchy(root.id)

        outline = Tree(f"/{node.path}  [bold]{node.name}[/bold]  ({node.id}, {node.member_count} members)")
        _add_branch(outline, node)
        console.print(outline)

        if search:
            _print_matches(tree, search)
