"""Config commands -- view and modify the global configuration.

Provides the ``climcp config`` sub-command group for reading, updating and
resetting the user's :class:`~climcp.models.GlobalConfig`. The ``serve``
block supplies defaults for ``climcp serve`` and ``climcp tools``; project
config, ``CLIMCP_*`` variables and CLI flags still override it.
"""

from __future__ import annotations

import typer

from climcp.exceptions import ConfigError
from climcp.exit_codes import EXIT_INVALID_USAGE
from climcp.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_UNSET_VALUES = ("none", "null")


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show serve settings after project config and environment overrides.",
    ),
) -> None:
    """Show the current configuration.

    Example::

        climcp config show
        climcp --json config show --effective
    """
    from climcp.config import get_config_dir, load_global_config, resolve_settings

    try:
        if effective:
            data = {"serve": resolve_settings().model_dump(mode="json")}
        else:
            data = load_global_config().model_dump(mode="json")
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    format_response(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g. 'serve.timeout')."
    ),
    value: str = typer.Argument(help="Value to set ('none' clears optional keys)."),
) -> None:
    """Set a configuration value.

    The value is validated (and coerced) by the config model, so
    ``serve.timeout 30`` stores a number and ``serve.in_process yes`` a
    boolean. ``none`` or ``null`` clears an optional key.

    Example::

        climcp config set serve.tool_prefix gh
        climcp config set serve.default_limit 20000
        climcp config set serve.timeout none
    """
    from pydantic import ValidationError

    from climcp.config import load_global_config, save_global_config
    from climcp.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    *parents, final_key = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]

    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    target[final_key] = None if value.lower() in _UNSET_VALUES else value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    stored = new_config.model_dump(mode="json")
    for part in key.split("."):
        stored = stored[part]
    success(f"Set {key} = {stored}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        climcp --force config reset
    """
    from climcp.config import save_global_config
    from climcp.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
