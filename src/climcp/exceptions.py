"""Exception hierarchy for climcp.

All exceptions inherit from :class:`ClimcpError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`climcp.exit_codes`.
The top-level error handler in :func:`climcp.app.main` catches
``ClimcpError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Tool calls never raise these: failures while serving are reported back to
the caller as error content (see :mod:`climcp.bridge.server`).

Subclass hierarchy::

    ClimcpError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ToolNotFoundError   (exit 4)
    +-- TargetLoadError     (exit 7)
    +-- ManifestError       (exit 8)
    +-- ConfigError         (exit 1)
"""

from climcp.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
    EXIT_TARGET_LOAD_ERROR,
    EXIT_TOOL_NOT_FOUND,
)


class ClimcpError(Exception):
    """Base exception for all climcp errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`climcp.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ClimcpError):
    """Raised for invalid CLI arguments (e.g. malformed ``--params`` JSON)."""

    exit_code = EXIT_INVALID_USAGE


class ToolNotFoundError(ClimcpError):
    """Raised when a tool name does not match any leaf command."""

    exit_code = EXIT_TOOL_NOT_FOUND


class TargetLoadError(ClimcpError):
    """Raised when a ``module:attr`` or ``file.py:attr`` target cannot be loaded."""

    exit_code = EXIT_TARGET_LOAD_ERROR


class ManifestError(ClimcpError):
    """Raised when a command manifest cannot be loaded or fails validation."""

    exit_code = EXIT_MANIFEST_ERROR


class ConfigError(ClimcpError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
