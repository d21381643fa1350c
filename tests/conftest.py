"""Shared test fixtures for climcp.

Provides reusable fixtures for building command trees, isolating config
environments, managing output state, and running CLI commands. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from climcp.models import CommandNode, FlagDescriptor, FlagKind
from climcp.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_CLI = FIXTURES_DIR / "sample_cli.py"
SAMPLE_TARGET = f"{SAMPLE_CLI}:app"
SAMPLE_MANIFEST = FIXTURES_DIR / "tracker.yaml"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Command tree fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def issue_list_node() -> CommandNode:
    """A leaf command with one flag of every kind plus an inherited flag."""
    return CommandNode(
        name="list",
        short="List issues",
        runnable=True,
        annotations={"mcp:safe": "true"},
        flags=[
            FlagDescriptor(name="label", kind=FlagKind.STRING_ARRAY),
            FlagDescriptor(name="per-page", kind=FlagKind.INT),
            FlagDescriptor(name="closed", kind=FlagKind.BOOL),
            FlagDescriptor(name="assignee", kind=FlagKind.STRING),
            FlagDescriptor(name="weight", kind=FlagKind.FLOAT),
            FlagDescriptor(name="token", kind=FlagKind.STRING, hidden=True),
            FlagDescriptor(name="help", kind=FlagKind.BOOL),
        ],
        inherited_flags=[
            FlagDescriptor(name="repo", kind=FlagKind.STRING),
            FlagDescriptor(name="closed", kind=FlagKind.STRING),
        ],
    )


@pytest.fixture
def sample_tree(issue_list_node: CommandNode) -> CommandNode:
    """``glab`` root with an ``issue`` group (list, close) and an ``auth`` group."""
    return CommandNode(
        name="glab",
        short="GitLab CLI",
        children=[
            CommandNode(
                name="issue",
                short="Work with issues",
                children=[
                    issue_list_node,
                    CommandNode(
                        name="close",
                        short="Close an issue",
                        long="Closes the issue and optionally leaves a comment.",
                        runnable=True,
                        flags=[FlagDescriptor(name="comment", kind="string")],
                    ),
                ],
            ),
            CommandNode(
                name="auth",
                children=[CommandNode(name="status", runnable=True)],
            ),
        ],
    )


@pytest.fixture
def sample_target() -> str:
    """Import target of the sample Typer CLI (``file.py:app``)."""
    return SAMPLE_TARGET


@pytest.fixture
def sample_manifest() -> Path:
    """Path of the YAML manifest describing the ``tracker`` CLI."""
    return SAMPLE_MANIFEST


@pytest.fixture
def sample_app():
    """The sample Typer CLI from ``tests/fixtures/sample_cli.py``."""
    from climcp.tree import load_target

    return load_target(SAMPLE_TARGET)


@pytest.fixture
def echo_program() -> list[str]:
    """Argv prefix of a program that prints its arguments, one per line.

    An argument of ``exit=N`` makes it exit with code *N*.
    """
    script = (
        "import sys\n"
        "args = sys.argv[1:]\n"
        "print('\\n'.join(args))\n"
        "codes = [int(a[5:]) for a in args if a.startswith('exit=')]\n"
        "sys.exit(codes[0] if codes else 0)\n"
    )
    return [sys.executable, "-c", script]


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config. Clears all CLIMCP_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("climcp.config._is_xdg_platform", lambda: True)

    for var in ["CLIMCP_TOOL_PREFIX", "CLIMCP_TIMEOUT", "CLIMCP_DEFAULT_LIMIT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
