"""Tools commands -- preview, inspect, call and document generated tools.

Provides the ``climcp tools`` sub-command group. Every sub-command loads a
TARGET the same way ``climcp serve`` does, so what these commands show is
exactly what a connected client would see:

* ``list`` -- one row per tool: name, destructiveness, flag count, summary.
* ``show`` -- the full descriptor (description and input schema) as JSON.
* ``call`` -- run one tool call and print the returned page.
* ``docs`` -- write a Markdown tool reference.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, NoReturn, Optional

import typer

from climcp.exceptions import ClimcpError, InvalidUsageError, ToolNotFoundError
from climcp.exit_codes import EXIT_GENERIC_FAILURE
from climcp.output import debug, error, format_response, print_data, print_table, success, suggest

tools_app = typer.Typer(no_args_is_help=True)


_TARGET_ARG = typer.Argument(
    ..., help="Import target (module:attr or file.py:attr), or a manifest with --manifest."
)
_MANIFEST_OPT = typer.Option(
    False, "--manifest", "-m", help="Treat TARGET as a YAML/JSON manifest."
)
_PREFIX_OPT = typer.Option(None, "--prefix", help="Tool name prefix.")


def _registry(
    target: str,
    manifest: bool,
    prefix: Optional[str] = None,
    program: Optional[str] = None,
    in_process: bool = False,
    timeout: Optional[float] = None,
    include_examples: bool = False,
):  # noqa: ANN202
    """Build the registry for *target*, exiting with the error's code on failure."""
    from climcp.config import resolve_settings
    from climcp.runtime import create_registry

    try:
        settings = resolve_settings(
            tool_prefix=prefix,
            timeout=timeout,
            in_process=True if in_process else None,
            include_examples=True if include_examples else None,
        )
        return create_registry(target, settings, manifest=manifest, program=program)
    except ClimcpError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@tools_app.command("list")
def tools_list(
    target: str = _TARGET_ARG,
    manifest: bool = _MANIFEST_OPT,
    prefix: Optional[str] = _PREFIX_OPT,
) -> None:
    """List the tools generated for TARGET.

    Example::

        climcp tools list mycli.main:app
        climcp --json tools list --manifest ./tool.yaml
    """
    registry = _registry(target, manifest, prefix=prefix)

    rows = []
    for tool in registry.descriptors:
        flags = tool.parameters["properties"]["flags"]["properties"]
        summary, _, _ = tool.description.partition("\n")
        rows.append([
            tool.name,
            "yes" if tool.destructive else "no",
            str(len(flags)),
            summary,
        ])

    print_table(
        headers=["Tool", "Destructive", "Flags", "Summary"],
        rows=rows,
        title=f"Tools ({len(rows)})",
    )


@tools_app.command("show")
def tools_show(
    target: str = _TARGET_ARG,
    tool: str = typer.Argument(..., help="Tool name."),
    manifest: bool = _MANIFEST_OPT,
    prefix: Optional[str] = _PREFIX_OPT,
    include_examples: bool = typer.Option(
        False, "--include-examples", help="Append examples to the description."
    ),
) -> None:
    """Show the full descriptor of one tool.

    Example::

        climcp tools show mycli.main:app mycli_issue_list
    """
    registry = _registry(target, manifest, prefix=prefix, include_examples=include_examples)
    descriptor = registry.get(tool)
    if descriptor is None:
        _tool_not_found(tool)
    format_response(
        descriptor.model_dump(mode="json", exclude={"path", "flag_options"})
    )


@tools_app.command("call")
def tools_call(
    target: str = _TARGET_ARG,
    tool: str = typer.Argument(..., help="Tool name."),
    params: Optional[str] = typer.Option(
        None, "--params", "-p", help='Call parameters as JSON, e.g. \'{"args": ["42"]}\'.'
    ),
    manifest: bool = _MANIFEST_OPT,
    program: Optional[str] = typer.Option(
        None, "--program", help="Command to execute (shell-quoted)."
    ),
    prefix: Optional[str] = _PREFIX_OPT,
    in_process: bool = typer.Option(
        False, "--in-process", help="Run import targets in this process."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Timeout in seconds."
    ),
) -> None:
    """Call one tool and print the returned page of output.

    The page goes to stdout; pagination metadata is printed to stderr with
    ``--verbose``. Exits non-zero when the command failed.

    Example::

        climcp tools call mycli.main:app mycli_issue_list --params '{"flags": {"state": "open"}}'
    """
    try:
        call_params = _parse_params(params)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    registry = _registry(
        target,
        manifest,
        prefix=prefix,
        program=program,
        in_process=in_process,
        timeout=timeout,
    )
    if tool not in registry:
        _tool_not_found(tool)

    response = asyncio.run(registry.call(tool, call_params))
    print_data(response.text)
    debug(json.dumps(response.pagination.model_dump(mode="json", exclude_none=True)))
    if response.is_error:
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)


@tools_app.command("docs")
def tools_docs(
    target: str = _TARGET_ARG,
    output_dir: str = typer.Option(
        "./tools-reference", "--output", "-o", help="Output directory."
    ),
    title: Optional[str] = typer.Option(
        None, "--title", help="Heading for TOOLS.md (default: root command name)."
    ),
    manifest: bool = _MANIFEST_OPT,
    prefix: Optional[str] = _PREFIX_OPT,
) -> None:
    """Write a Markdown reference of TARGET's tools.

    Produces ``TOOLS.md`` and one ``references/<tool>.md`` page per tool.

    Example::

        climcp tools docs mycli.main:app -o ./skills/mycli
    """
    from climcp.docs import generate_tool_docs

    registry = _registry(target, manifest, prefix=prefix)
    heading = title or registry.name

    result = generate_tool_docs(registry.descriptors, output_dir, heading)
    success(f"Wrote {len(registry)} tool pages to {result}")
    suggest(f"Review: cat {result}/TOOLS.md")


def _parse_params(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--params is not valid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise InvalidUsageError("--params must be a JSON object")
    return value


def _tool_not_found(name: str) -> NoReturn:
    exc = ToolNotFoundError(f"Unknown tool: {name}")
    error(str(exc))
    suggest("List available tools with: climcp tools list TARGET")
    raise typer.Exit(code=exc.exit_code)
