"""Attach an ``mcp serve`` command to an existing Typer application.

A CLI built with Typer can expose itself as an MCP server with one call::

    import typer
    from climcp.embed import add_mcp_command

    app = typer.Typer()
    ...
    add_mcp_command(app)

``mycli mcp serve`` then serves every runnable command of ``mycli`` (except
the ``mcp`` group itself). Each tool call re-executes ``mycli`` as a child
process, so the host CLI needs no changes to its commands.
"""

from __future__ import annotations

from typing import Optional

import click
import typer

from climcp.exceptions import ClimcpError
from climcp.output import configure_logging, error


def add_mcp_command(app: typer.Typer, name: str = "mcp") -> typer.Typer:
    """Register an ``<name> serve`` sub-command on *app*.

    Args:
        app: The host CLI.
        name: Name of the group holding ``serve``.

    Returns:
        The added sub-application, for registering further commands.
    """
    mcp_app = typer.Typer(no_args_is_help=True, help="Model Context Protocol server.")

    @mcp_app.command("serve")
    def mcp_serve(
        prefix: Optional[str] = typer.Option(
            None, "--prefix", help="Tool name prefix (default: this CLI's name)."
        ),
        in_process: bool = typer.Option(
            False, "--in-process", help="Run tool calls in this process."
        ),
        timeout: Optional[float] = typer.Option(
            None, "--timeout", help="Per-call timeout in seconds."
        ),
        include_examples: bool = typer.Option(
            False, "--include-examples", help="Append examples to tool descriptions."
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Log debug records to stderr."
        ),
    ) -> None:
        """Serve this CLI's commands as MCP tools over stdio."""
        from climcp.bridge import InProcessExecutor, SubprocessExecutor, ToolRegistry, run_stdio
        from climcp.bridge.executor import resolve_self_command
        from climcp.config import resolve_settings
        from climcp.tree import node_from_click

        configure_logging(verbose)
        try:
            settings = resolve_settings(
                tool_prefix=prefix,
                timeout=timeout,
                in_process=True if in_process else None,
                include_examples=True if include_examples else None,
            )
        except ClimcpError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

        command = typer.main.get_command(app)
        excluded = []
        if isinstance(command, click.Group) and name in command.commands:
            excluded.append(command.commands[name])
        root = node_from_click(command, name=_program_name(command), exclude=excluded)

        if settings.in_process:
            executor = InProcessExecutor(command, prog_name=root.name)
        else:
            executor = SubprocessExecutor(resolve_self_command(), timeout=settings.timeout)
        run_stdio(ToolRegistry.from_tree(root, executor, settings))

    app.add_typer(mcp_app, name=name)
    return mcp_app


def _program_name(command: click.Command) -> str:
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        return ctx.find_root().info_name or command.name or "cli"
    return command.name or "cli"
