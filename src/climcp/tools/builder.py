"""Build one :class:`~climcp.models.ToolDescriptor` per runnable command.

**Algorithm summary**

1. Walk the command tree depth-first (:func:`~climcp.tree.walker.walk_tree`).
2. Skip the root and every node without an action (pure groups are still
   walked so their children are reached).
3. For each remaining node, compose the description, the destructiveness
   hint, and an input schema with four fixed properties: ``args``,
   ``flags``, ``limit`` and ``offset``.

The ``flags`` object lists the node's visible flags in declaration order,
local flags first, then inherited flags that no local flag shadows.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from climcp.models import (
    DEFAULT_DESCRIPTION_BUDGET,
    DEFAULT_RESPONSE_LIMIT,
    CommandNode,
    FlagDescriptor,
    ServeSettings,
    ToolDescriptor,
)
from climcp.tools.description import build_description, fallback_description
from climcp.tools.flags import flag_schema, schema_property_name
from climcp.tree.annotations import is_destructive
from climcp.tree.walker import CommandPath, walk_tree

ARGS_PARAM = "args"
FLAGS_PARAM = "flags"
LIMIT_PARAM = "limit"
OFFSET_PARAM = "offset"

_ARGS_DESCRIPTION = (
    "Positional arguments passed to the command after its flags, in order "
    "(e.g. issue IDs, file names). Check the description for what the "
    "command accepts."
)
_FLAGS_DESCRIPTION = (
    "Named flags and their values. All command flags are available as "
    "properties of this object."
)
_LIMIT_DESCRIPTION = (
    "Maximum response size in characters. Use smaller values to reduce "
    "context usage. The response includes pagination metadata for "
    "navigating large outputs."
)
_OFFSET_DESCRIPTION = (
    "Starting character position. Negative values count from the end (like "
    "'tail'). The response includes 'navigation_hints' with pre-computed "
    "offsets."
)


def tool_name(prefix: str, path: Sequence[str]) -> str:
    """Return the tool name for a command path (``prefix_issue_list``)."""
    return "_".join([prefix, *path])


def visible_flags(node: CommandNode) -> list[FlagDescriptor]:
    """Flags exposed in the schema: non-hidden, never ``help``."""
    return [f for f in node.all_flags() if not f.hidden and f.name != "help"]


def build_tool(
    node: CommandNode,
    path: CommandPath,
    prefix: str,
    budget: int = DEFAULT_DESCRIPTION_BUDGET,
    default_limit: int = DEFAULT_RESPONSE_LIMIT,
    ancestors: Sequence[CommandNode] = (),
    include_examples: bool = False,
) -> ToolDescriptor:
    """Build the :class:`ToolDescriptor` for *node* at *path*.

    Args:
        node: A runnable command node.
        path: The node's command path (root excluded).
        prefix: Tool name prefix, usually the root command name.
        budget: Character budget for the long description.
        default_limit: Advertised default for the ``limit`` parameter.
        ancestors: The node's ancestors from the root down, used to find
            inherited examples when *include_examples* is set.
        include_examples: Append ``Examples:`` / ``Arguments:`` sections.
    """
    description = build_description(
        node, budget, ancestors=ancestors, include_examples=include_examples
    )
    if not description:
        description = fallback_description(prefix, path)

    flag_properties: dict[str, Any] = {}
    flag_options: dict[str, str] = {}
    for flag in visible_flags(node):
        prop = schema_property_name(flag.name)
        flag_properties[prop] = flag_schema(flag)
        flag_options[prop] = "--" + flag.name

    parameters = {
        "type": "object",
        "properties": {
            ARGS_PARAM: {
                "type": "array",
                "items": {"type": "string"},
                "description": _ARGS_DESCRIPTION,
            },
            FLAGS_PARAM: {
                "type": "object",
                "properties": flag_properties,
                "description": _FLAGS_DESCRIPTION,
            },
            LIMIT_PARAM: {
                "type": "number",
                "default": default_limit,
                "minimum": 0,
                "description": _LIMIT_DESCRIPTION,
            },
            OFFSET_PARAM: {
                "type": "number",
                "default": 0,
                "description": _OFFSET_DESCRIPTION,
            },
        },
    }

    return ToolDescriptor(
        name=tool_name(prefix, path),
        description=description,
        destructive=is_destructive(node),
        parameters=parameters,
        path=path,
        flag_options=flag_options,
    )


def build_tools(
    root: CommandNode,
    settings: ServeSettings | None = None,
) -> list[tuple[ToolDescriptor, CommandNode]]:
    """Build descriptors for every runnable non-root node under *root*.

    Returns:
        ``(descriptor, node)`` pairs in traversal order. The node is kept so
        calls can be translated against its declared flags.
    """
    settings = settings or ServeSettings()
    prefix = settings.tool_prefix or root.name
    by_path: dict[CommandPath, CommandNode] = {}
    tools: list[tuple[ToolDescriptor, CommandNode]] = []

    for node, path in walk_tree(root):
        by_path[path] = node
        if node is root or not node.runnable:
            continue
        ancestors = [by_path[path[:i]] for i in range(len(path))]
        descriptor = build_tool(
            node,
            path,
            prefix,
            budget=settings.description_budget,
            default_limit=settings.default_limit,
            ancestors=ancestors,
            include_examples=settings.include_examples,
        )
        tools.append((descriptor, node))
    return tools
