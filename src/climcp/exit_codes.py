"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~climcp.exceptions.ClimcpError` subclass.
Wrapper scripts can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ climcp tools list mypkg.cli:nope
    $ echo $?
    7   # EXIT_TARGET_LOAD_ERROR -- the import target could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_TOOL_NOT_FOUND = 4
"""The requested tool is not part of the command tree."""

EXIT_TARGET_LOAD_ERROR = 7
"""The Click/Typer import target could not be loaded."""

EXIT_MANIFEST_ERROR = 8
"""The command manifest could not be read, parsed, or validated."""
