"""Built-in CLI sub-commands for climcp.

This package groups the Typer command modules that form the CLI's
top-level command tree:

* :mod:`~climcp.commands.serve` -- serve a target's tools over stdio, plus
  the hidden ``run`` re-exec entry point.
* :mod:`~climcp.commands.tools` -- list, show, call and document tools.
* :mod:`~climcp.commands.config` -- view and modify global settings.

Group modules export a :class:`typer.Typer` sub-application; single
commands are plain callbacks registered on the root app.
"""
