"""Tests for attaching ``mcp serve`` to a host Typer application."""

from __future__ import annotations

import asyncio

import pytest
import typer

from climcp.bridge import InProcessExecutor, SubprocessExecutor
from climcp.embed import add_mcp_command


@pytest.fixture
def host_app() -> typer.Typer:
    app = typer.Typer(name="hostcli")

    @app.command("hello")
    def hello(name: str = typer.Option("world", "--name")) -> None:
        """Say hello."""
        typer.echo(f"hello {name}")

    @app.command("wipe")
    def wipe() -> None:
        """Delete everything."""
        typer.echo("wiped")

    add_mcp_command(app)
    return app


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch) -> list:
    registries: list = []
    monkeypatch.setattr("climcp.bridge.run_stdio", registries.append)
    return registries


class TestAddMcpCommand:
    def test_registers_group(self, host_app: typer.Typer) -> None:
        command = typer.main.get_command(host_app)
        assert "mcp" in command.commands
        assert "serve" in command.commands["mcp"].commands

    def test_custom_group_name(self) -> None:
        app = typer.Typer()

        @app.command("ping")
        def ping() -> None:
            typer.echo("pong")

        add_mcp_command(app, name="agent")
        assert "agent" in typer.main.get_command(app).commands

    def test_serve_excludes_mcp_group(
        self, host_app, served, cli_runner, isolated_config
    ) -> None:
        result = cli_runner.invoke(host_app, ["mcp", "serve"], prog_name="hostcli")
        assert result.exit_code == 0, result.output
        (registry,) = served
        names = [d.name for d in registry.descriptors]
        assert names == ["hostcli_hello", "hostcli_wipe"]
        assert isinstance(registry.executor, SubprocessExecutor)

    def test_prefix_and_timeout(self, host_app, served, cli_runner, isolated_config) -> None:
        cli_runner.invoke(
            host_app, ["mcp", "serve", "--prefix", "h", "--timeout", "5"], prog_name="hostcli"
        )
        (registry,) = served
        assert "h_hello" in registry
        assert registry.executor.timeout == 5

    def test_in_process_call(self, host_app, served, cli_runner, isolated_config) -> None:
        cli_runner.invoke(host_app, ["mcp", "serve", "--in-process"], prog_name="hostcli")
        (registry,) = served
        assert isinstance(registry.executor, InProcessExecutor)

        response = asyncio.run(registry.call("hostcli_hello", {"flags": {"name": "mcp"}}))
        assert response.is_error is False
        assert response.text.strip() == "hello mcp"
