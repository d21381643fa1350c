"""climcp -- Expose a CLI's command tree as MCP tools.

This package walks a Click/Typer application (or a YAML/JSON manifest
describing any other CLI), builds one tool per leaf command with a compact
input schema, and serves those tools over the Model Context Protocol. Each
tool call is translated back into command-line arguments, executed, and its
combined output returned in bounded, navigable pages.

Typical workflow::

    climcp tools list mycli.main:app     # preview the generated tools
    climcp serve mycli.main:app          # serve them over stdio

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and settings resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    embed: Attach an ``mcp serve`` command to an existing Typer CLI.
"""

__version__ = "0.1.0"
