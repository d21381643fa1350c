"""Serve and run commands -- the MCP server and its re-exec entry point.

Implements two top-level commands:

* ``climcp serve TARGET`` -- load a command tree, register one tool per
  runnable command, and serve the tools over stdio until the client
  disconnects.
* ``climcp run TARGET ARGS...`` (hidden) -- invoke an import target with
  raw arguments. ``serve`` re-executes this command once per tool call so
  every call runs in a fresh process.
"""

from __future__ import annotations

import logging
import traceback
from typing import Optional

import typer

from climcp.exceptions import ClimcpError
from climcp.exit_codes import EXIT_GENERIC_FAILURE
from climcp.output import configure_logging, error, get_output

logger = logging.getLogger(__name__)


def serve_command(
    target: str = typer.Argument(
        ..., help="Import target (module:attr or file.py:attr), or a manifest with --manifest."
    ),
    manifest: bool = typer.Option(
        False, "--manifest", "-m", help="Treat TARGET as a YAML/JSON manifest (path, URL or '-')."
    ),
    program: Optional[str] = typer.Option(
        None, "--program", help="Command to execute for tool calls (shell-quoted)."
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", help="Tool name prefix (default: root command name)."
    ),
    in_process: bool = typer.Option(
        False, "--in-process", help="Run import targets in this process."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-call timeout in seconds."
    ),
    include_examples: bool = typer.Option(
        False, "--include-examples", help="Append examples to tool descriptions."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Server name reported to clients."
    ),
) -> None:
    """Serve TARGET's commands as MCP tools over stdio.

    Stdout carries the protocol stream for the lifetime of the command;
    diagnostics and log records go to stderr (``--verbose`` for debug
    records).

    Example::

        climcp serve mycli.main:app
        climcp serve --manifest ./tool.yaml --program "tool --no-color"
    """
    from climcp.bridge import run_stdio
    from climcp.config import resolve_settings
    from climcp.runtime import create_registry

    configure_logging(get_output().is_verbose)

    try:
        settings = resolve_settings(
            tool_prefix=prefix,
            timeout=timeout,
            in_process=True if in_process else None,
            include_examples=True if include_examples else None,
            server_name=name,
        )
        registry = create_registry(target, settings, manifest=manifest, program=program)
    except ClimcpError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not len(registry):
        logger.warning("No runnable commands found in %s", target)
    logger.info("Serving %d tools over stdio", len(registry))
    run_stdio(registry)


def run_command(
    target: str = typer.Argument(..., help="Import target (module:attr or file.py:attr)."),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments passed to TARGET."),
) -> None:
    """Invoke TARGET with raw arguments.

    Everything after TARGET is passed through untouched, including options
    such as ``--help``.
    """
    from climcp.tree import load_target

    try:
        command = load_target(target)
    except ClimcpError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    try:
        command.main(args=list(args or []), prog_name=command.name, standalone_mode=True)
    except SystemExit:
        raise
    except Exception:
        # Uncaught errors belong in the captured output, not a crash log.
        traceback.print_exc()
        raise typer.Exit(code=EXIT_GENERIC_FAILURE) from None
