"""Tests for converting Click/Typer applications into command trees."""

from __future__ import annotations

import click
import pytest
import typer

from climcp.models import CommandNode, FlagKind
from climcp.tree.annotations import SAFE
from climcp.tree.click_adapter import (
    flag_from_option,
    node_from_click,
    option_kind,
    to_click_command,
)


def _child(node: CommandNode, name: str) -> CommandNode:
    return next(c for c in node.children if c.name == name)


@pytest.fixture
def click_group() -> click.Group:
    @click.group()
    @click.option("--debug", is_flag=True)
    def cli() -> None:
        """Root command."""

    @cli.command("deploy", short_help="Deploy the app")
    @click.option("--env", "-e", default="staging", help="Target environment.")
    @click.option("--replicas", type=click.IntRange(min=1))
    @click.option("--offset", type=click.IntRange(min=-5))
    @click.option("--ratio", type=float)
    @click.option("--tag", multiple=True)
    @click.option("--port", multiple=True, type=int)
    @click.option("-v", "--verbose", count=True)
    @click.option("-q", is_flag=True)
    @click.option("--dry-run/--no-dry-run", default=False)
    @click.argument("service")
    def deploy(**kwargs) -> None:
        """Deploy a service.

        Builds and rolls out SERVICE to the chosen environment.
        """

    @cli.group("db")
    def db() -> None:
        """Database commands."""

    @db.command("migrate")
    def migrate() -> None:
        """Run migrations."""

    @cli.command("internal", hidden=True)
    def internal() -> None:
        """Hidden."""

    return cli


class TestToClickCommand:
    def test_click_command_passthrough(self, click_group: click.Group) -> None:
        assert to_click_command(click_group) is click_group

    def test_typer_app_compiled(self) -> None:
        app = typer.Typer()

        @app.command()
        def hello() -> None:
            pass

        assert isinstance(to_click_command(app), click.Command)

    def test_other_objects_rejected(self) -> None:
        with pytest.raises(TypeError):
            to_click_command(object())


class TestNodeFromClick:
    """Tree shape, runnability, and help text."""

    def test_children_in_declaration_order(self, click_group: click.Group) -> None:
        root = node_from_click(click_group)
        assert [c.name for c in root.children] == ["deploy", "db"]

    def test_hidden_commands_skipped(self, click_group: click.Group) -> None:
        root = node_from_click(click_group)
        assert "internal" not in [c.name for c in root.children]

    def test_excluded_commands_skipped(self, click_group: click.Group) -> None:
        root = node_from_click(click_group, exclude=[click_group.commands["db"]])
        assert [c.name for c in root.children] == ["deploy"]

    def test_groups_not_runnable(self, click_group: click.Group) -> None:
        root = node_from_click(click_group)
        db = root.children[1]
        assert not root.runnable
        assert not db.runnable
        assert db.children[0].runnable

    def test_invoke_without_command_group_is_runnable(self) -> None:
        @click.group(invoke_without_command=True)
        def cli() -> None:
            pass

        assert node_from_click(cli).runnable

    def test_root_name_override(self, click_group: click.Group) -> None:
        assert node_from_click(click_group, name="ops").name == "ops"

    def test_short_help_and_long_help(self, click_group: click.Group) -> None:
        deploy = node_from_click(click_group).children[0]
        assert deploy.short == "Deploy the app"
        assert "Builds and rolls out SERVICE" in deploy.long

    def test_first_paragraph_is_short(self, click_group: click.Group) -> None:
        migrate = node_from_click(click_group).children[1].children[0]
        assert migrate.short == "Run migrations."
        assert migrate.long == ""

    def test_group_options_not_inherited(self, click_group: click.Group) -> None:
        deploy = node_from_click(click_group).children[0]
        assert deploy.inherited_flags == []
        assert deploy.lookup_flag("debug") is None

    def test_arguments_are_not_flags(self, click_group: click.Group) -> None:
        deploy = node_from_click(click_group).children[0]
        assert deploy.lookup_flag("service") is None

    def test_typer_sample_app(self, sample_app: click.Command) -> None:
        root = node_from_click(sample_app, name="tracker")
        assert sorted(c.name for c in root.children) == ["issue", "version"]
        issue = _child(root, "issue")
        assert [c.name for c in issue.children] == ["list", "close", "fail"]
        listing = issue.children[0]
        assert listing.short == "List issues."
        assert listing.annotations[SAFE] == "true"
        assert [f.name for f in listing.flags if f.name != "help"] == [
            "state",
            "label",
            "per-page",
            "mine",
        ]

    def test_typer_example_annotation(self, sample_app: click.Command) -> None:
        close = _child(_child(node_from_click(sample_app), "issue"), "close")
        assert close.example == "tracker issue close 42 --comment 'fixed'"


class TestFlagConversion:
    """Option kinds and names."""

    @pytest.fixture
    def deploy_flags(self, click_group: click.Group) -> dict:
        deploy = node_from_click(click_group).children[0]
        return {f.name: f for f in deploy.flags}

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("env", FlagKind.STRING),
            ("replicas", FlagKind.UINT),
            ("offset", FlagKind.INT),
            ("ratio", FlagKind.FLOAT),
            ("tag", FlagKind.STRING_ARRAY),
            ("port", FlagKind.NUMBER_ARRAY),
            ("verbose", FlagKind.BOOL),
            ("dry-run", FlagKind.BOOL),
        ],
    )
    def test_kinds(self, deploy_flags: dict, name: str, kind: FlagKind) -> None:
        assert deploy_flags[name].kind == kind

    def test_short_only_option_skipped(self, deploy_flags: dict) -> None:
        assert "q" not in deploy_flags

    def test_usage_default_and_shorthand(self, deploy_flags: dict) -> None:
        env = deploy_flags["env"]
        assert env.usage == "Target environment."
        assert env.default == "staging"
        assert env.shorthand == "e"

    def test_longest_long_name_wins(self) -> None:
        option = click.Option(["--n", "--count"], type=int)
        flag = flag_from_option(option)
        assert flag is not None
        assert flag.name == "count"

    def test_hidden_option(self) -> None:
        option = click.Option(["--token"], hidden=True)
        flag = flag_from_option(option)
        assert flag is not None
        assert flag.hidden

    def test_choice_is_string(self) -> None:
        option = click.Option(["--format"], type=click.Choice(["json", "text"]))
        assert option_kind(option) == FlagKind.STRING
