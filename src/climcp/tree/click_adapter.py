"""Convert a Click (or Typer) command tree into :class:`~climcp.models.CommandNode`.

The bridge never inspects Click objects at call time. This module folds each
command's options into a declarative flag table once, at startup, so schema
building and parameter translation only deal with
:class:`~climcp.models.FlagDescriptor` values.

**Mapping rules:**

* Only :class:`click.Option` parameters become flags; :class:`click.Argument`
  values are passed positionally through the tool's ``args`` array.
* The flag name is the longest ``--long`` option string. Options that only
  have a short form (``-x``) cannot be addressed as ``--<name>`` and are
  skipped.
* Boolean flags (``is_flag``) and counters (``count=True``) become
  :attr:`~climcp.models.FlagKind.BOOL`; ``multiple=True`` options become
  arrays; ``INT`` / ``FLOAT`` types become numeric kinds (``IntRange`` with a
  non-negative minimum maps to ``uint``); everything else is a string.
* Group-level options are parsed by the group before the sub-command name,
  so they cannot follow a leaf command's path and are not exposed.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any, Optional

import click
import typer

from climcp.models import CommandNode, FlagDescriptor, FlagKind
from climcp.tree.annotations import EXAMPLE, get_annotations


def to_click_command(target: Any) -> click.Command:
    """Return *target* as a :class:`click.Command`, compiling Typer apps.

    Raises:
        TypeError: If *target* is neither a Click command nor a Typer app.
    """
    if isinstance(target, typer.Typer):
        return typer.main.get_command(target)
    if isinstance(target, click.Command):
        return target
    raise TypeError(
        f"Expected a click.Command or typer.Typer, got {type(target).__name__}"
    )


def node_from_click(
    command: Any,
    name: Optional[str] = None,
    exclude: Iterable[click.Command] = (),
) -> CommandNode:
    """Build a :class:`CommandNode` tree from a Click command or Typer app.

    Args:
        command: The root :class:`click.Command` / :class:`click.Group`, or a
            :class:`typer.Typer` application.
        name: Name for the root node. Defaults to the command's own name.
        exclude: Commands to leave out of the tree (matched by identity),
            e.g. the ``mcp`` group of a CLI that embeds the server.

    Returns:
        The root :class:`CommandNode`. Hidden commands are omitted.
    """
    root = to_click_command(command)
    excluded = {id(c) for c in exclude}
    return _convert(root, name or root.name or "cli", excluded)


def _convert(command: click.Command, name: str, excluded: set[int]) -> CommandNode:
    short, long = _split_help(command)
    annotations = get_annotations(inspect.unwrap(command.callback)) if command.callback else {}
    annotations.update(get_annotations(command.callback))
    annotations.update(get_annotations(command))

    children: list[CommandNode] = []
    if isinstance(command, click.Group):
        # Dict order is declaration order; list_commands() would sort.
        for child_name, child in command.commands.items():
            if child.hidden or id(child) in excluded:
                continue
            children.append(_convert(child, child_name, excluded))
        runnable = bool(command.invoke_without_command and command.callback)
    else:
        runnable = True

    return CommandNode(
        name=name,
        short=short,
        long=long,
        example=annotations.get(EXAMPLE, ""),
        annotations=annotations,
        flags=flags_from_params(command.params),
        children=children,
        runnable=runnable,
    )


def _split_help(command: click.Command) -> tuple[str, str]:
    """Split a command's help into ``(short, long)``.

    ``short_help`` wins for the short part when set; otherwise the first
    paragraph of ``help`` is used and the rest becomes the long part.
    """
    text = inspect.cleandoc(command.help or "")
    # Click strips everything after \f from help output.
    text = text.split("\f", 1)[0].strip()
    first, _, rest = text.partition("\n\n")
    first = " ".join(first.split())
    if command.short_help:
        return command.short_help.strip(), text if text != command.short_help else ""
    return first, rest.strip()


def flags_from_params(params: Iterable[click.Parameter]) -> list[FlagDescriptor]:
    """Convert Click parameters to flag descriptors, in declaration order."""
    flags: list[FlagDescriptor] = []
    seen: set[str] = set()
    for param in params:
        if not isinstance(param, click.Option):
            continue
        flag = flag_from_option(param)
        if flag is None or flag.name in seen:
            continue
        seen.add(flag.name)
        flags.append(flag)
    return flags


def flag_from_option(option: click.Option) -> Optional[FlagDescriptor]:
    """Convert a single :class:`click.Option`, or ``None`` if it has no long name."""
    long_opts = [o for o in option.opts if o.startswith("--")]
    if not long_opts:
        return None
    name = max(long_opts, key=len)[2:]
    short_opts = [o for o in option.opts if not o.startswith("--")]
    default = option.default
    if isinstance(default, tuple):
        default = list(default)
    if not isinstance(default, (str, int, float, bool, list)):
        default = None

    return FlagDescriptor(
        name=name,
        kind=option_kind(option),
        hidden=bool(option.hidden),
        usage=option.help or "",
        default=default,
        shorthand=short_opts[0].lstrip("-") if short_opts else None,
    )


def option_kind(option: click.Option) -> FlagKind:
    """Derive the :class:`FlagKind` of a Click option from its type and mode."""
    if option.is_flag or option.count:
        return FlagKind.BOOL
    param_type = option.type
    if option.multiple:
        if isinstance(param_type, (click.types.IntParamType, click.types.FloatParamType)):
            return FlagKind.NUMBER_ARRAY
        return FlagKind.STRING_ARRAY
    if isinstance(param_type, click.IntRange):
        minimum = param_type.min
        if minimum is not None and minimum >= 0:
            return FlagKind.UINT
        return FlagKind.INT
    if isinstance(param_type, click.types.IntParamType):
        return FlagKind.INT
    if isinstance(param_type, click.types.FloatParamType):
        return FlagKind.FLOAT
    return FlagKind.STRING
