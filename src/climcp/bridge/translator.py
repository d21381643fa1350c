"""Translate tool-call parameters back into command-line arguments.

A call arrives as an untyped JSON object::

    {"args": ["42"], "flags": {"label": ["bug"], "per_page": 20}, "limit": 2000}

and becomes ``(["--label", "bug", "--per-page", "20", "42"],
ResponseConfig(limit=2000, offset=0))``.

Translation is best-effort: malformed members and flags the command does not
declare are dropped rather than rejected, so a slightly-off call still runs.

Values that mean "unset" on a command line are suppressed: ``False``, ``0``,
``""`` and ``None`` never emit a token. An explicit ``--count 0`` therefore
cannot be expressed; the command's own default applies instead.
"""

from __future__ import annotations

import json
import math
from typing import Any

from climcp.models import CommandNode, FlagDescriptor, ResponseConfig
from climcp.tools.builder import ARGS_PARAM, FLAGS_PARAM, LIMIT_PARAM, OFFSET_PARAM

_UNSET_STRINGS = frozenset({"", "0", "false"})


def translate_params(
    params: dict[str, Any] | None,
    node: CommandNode,
    default_limit: int | None = None,
) -> tuple[list[str], ResponseConfig]:
    """Convert call *params* into an argv for *node* plus a response config.

    Flag tokens come first, in the node's declared flag order (local flags,
    then inherited ones), followed by the positional ``args`` in call order.

    Args:
        params: The call's arguments object. Unknown members are ignored.
        node: The command being called; its flags gate which ``--name``
            tokens are emitted.
        default_limit: Limit used when the call passes none.

    Returns:
        A ``(argv, config)`` tuple.
    """
    params = params or {}
    config = ResponseConfig()
    if default_limit is not None:
        config.limit = default_limit

    positionals: list[str] = []
    raw_args = params.get(ARGS_PARAM)
    if isinstance(raw_args, list):
        positionals = [a for a in raw_args if isinstance(a, str) and a]

    limit = _as_int(params.get(LIMIT_PARAM))
    if limit is not None:
        config.limit = limit
    offset = _as_int(params.get(OFFSET_PARAM))
    if offset is not None:
        config.offset = offset

    emitted: dict[str, list[str]] = {}
    raw_flags = params.get(FLAGS_PARAM)
    if isinstance(raw_flags, dict):
        for key, value in raw_flags.items():
            if value is None:
                continue
            flag = _resolve_flag(node, str(key))
            tokens = flag_tokens(flag.name if flag else None, value)
            if flag is not None and tokens:
                emitted.setdefault(flag.name, []).extend(tokens)

    argv: list[str] = []
    for flag in node.all_flags():
        argv.extend(emitted.pop(flag.name, ()))
    return argv + positionals, config


def _resolve_flag(node: CommandNode, key: str) -> FlagDescriptor | None:
    """Find the flag for a call key: kebab-case name first, then the literal key."""
    return node.lookup_flag(key.replace("_", "-")) or node.lookup_flag(key)


def flag_tokens(name: str | None, value: Any) -> list[str]:
    """Return the argv tokens for one flag value.

    The value is always converted; *name* being ``None`` (an undeclared flag)
    only means nothing is emitted.
    """
    if isinstance(value, bool):
        return [f"--{name}"] if value and name else []
    if isinstance(value, str):
        return [f"--{name}", value] if value and name else []
    if isinstance(value, list):
        tokens: list[str] = []
        for item in value:
            if isinstance(item, str) and item and name:
                tokens.extend([f"--{name}", item])
        return tokens
    if isinstance(value, (int, float)):
        if value == 0:
            return []
        text = format_number(value)
        return [f"--{name}", text] if name else []

    text = _stringify(value)
    if text in _UNSET_STRINGS or not name:
        return []
    return [f"--{name}", text]


def format_number(value: int | float) -> str:
    """Format a JSON number for the command line.

    Integral values never get a decimal point or exponent, so large IDs
    (beyond 2**53) stay exact: ``1e20`` becomes ``"100000000000000000000"``.
    Other floats use the shortest representation that round-trips.
    """
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _stringify(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)
