"""
Unit tests for the familylinx command line tool.

Commands run against the test session by patching the CLI's session factory.
"""

from contextlib import contextmanager

import pytest
from typer.testing import CliRunner

from familylinx.cli import app
from familylinx.services.groups import delete_group, get_group

runner = CliRunner()


@pytest.fixture
def cli_db(db_session, monkeypatch):
    """Route CLI sessions to the test database."""

    @contextmanager
    def _context():
        yield db_session
        db_session.flush()

    monkeypatch.setattr("familylinx.cli.utils.get_db_context", _context)
    return db_session


class TestListSubgroups:

    def test_lists_children(self, cli_db, sample_tree):
        result = runner.invoke(app, ["list-subgroups", "toknggal"])

        assert result.exit_code == 0
        assert "Found /toknggal root group" in result.output
        assert "ngahjusoh" in result.output
        assert "alisulong" not in result.output

    def test_no_children(self, cli_db, sample_tree):
        delete_group(cli_db, "demo-family", "g-ngah", cascade=True)

        result = runner.invoke(app, ["list-subgroups", "toknggal"])
        assert "No sub-groups found under /toknggal" in result.output

    def test_unknown_root(self, cli_db, sample_tree):
        result = runner.invoke(app, ["list-subgroups", "nobody"])

        assert result.exit_code == 1
        assert "Could not find /nobody root group" in result.output


class TestListMembers:

    def test_lists_members(self, cli_db, sample_tree):
        result = runner.invoke(app, ["list-members", "toknggal"])

        assert result.exit_code == 0
        assert "Tok Nggal" in result.output
        assert "yes (g-ngah)" in result.output

    def test_empty_group(self, cli_db, sample_tree):
        sample_tree.root.replace_members([])

        result = runner.invoke(app, ["list-members", "toknggal"])

        assert "No members found in this group" in result.output


class TestShowHierarchy:

    def test_prints_paths(self, cli_db, sample_tree):
        result = runner.invoke(app, ["show-hierarchy", "toknggal"])

        assert result.exit_code == 0
        assert "/toknggal/ngahjusoh" in result.output
        assert "/toknggal/ngahjusoh/alisulong" in result.output

    def test_search(self, cli_db, sample_tree):
        result = runner.invoke(app, ["show-hierarchy", "toknggal", "--search", "alisulong"])

        assert "Found 1 group(s) matching" in result.output
        assert "id=g-ali" in result.output

    def test_search_without_match(self, cli_db, sample_tree):
        result = runner.invoke(app, ["show-hierarchy", "toknggal", "-s", "zzz"])
        assert "No groups found" in result.output


class TestCopyMembers:

    def test_copies_into_destination(self, cli_db, sample_tree):
        result = runner.invoke(app, ["copy-members", "toknggal/ngahjusoh", "toknggal/ngahjusoh/alisulong"])

        assert result.exit_code == 0, result.output
        assert "Copied 2 member(s); destination now has 3" in result.output
        names = [p.name for p in get_group(cli_db, "demo-family", "g-ali").persons]
        assert names == ["Adam", "Ali Sulong", "Siti"]

    def test_missing_destination(self, cli_db, sample_tree):
        result = runner.invoke(app, ["copy-members", "toknggal", "toknggal/nobody"])

        assert result.exit_code == 1
        assert "Could not find /toknggal/nobody group" in result.output
