"""
Shared helpers for CLI commands.
"""

from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console
from sqlalchemy.orm import Session

from familylinx.database import get_db_context
from familylinx.exceptions import FamilyLinxError
from familylinx.models.family import Group
from familylinx.services.families import find_root_group_by_slug
from familylinx.services.groups import load_tree
from familylinx.services.tree import GroupTree

console = Console()


@contextmanager
def db_session() -> Iterator[Session]:
    """A session committed when the command finishes without error."""
    with get_db_context() as db:
        yield db


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=1)


def load_root(db: Session, root_slug: str) -> tuple[GroupTree, Group]:
    """Find a root group by slug and load its family's tree, or exit."""
    root = find_root_group_by_slug(db, root_slug)
    if root is None:
        fail(f"Could not find /{root_slug} root group")
    console.print(f"Found /{root_slug} root group: [bold]{root.name}[/bold] ({root.id})")
    return load_tree(db, root.family_id), root


def run_or_fail(func, *args, **kwargs):
    """Call a service, turning domain errors into an error exit."""
    try:
        return func(*args, **kwargs)
    except FamilyLinxError as e:
        fail(e.message)
