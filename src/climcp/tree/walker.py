"""Depth-first traversal of a :class:`~climcp.models.CommandNode` tree."""

from __future__ import annotations

from collections.abc import Iterator

from climcp.models import CommandNode

CommandPath = tuple[str, ...]


def walk_tree(root: CommandNode) -> Iterator[tuple[CommandNode, CommandPath]]:
    """Yield every ``(node, path)`` pair reachable from *root*.

    Traversal is depth-first with parents before children, and children in
    their declaration order. The root is yielded first with the empty path;
    every other node's path is its parent's path plus its own name. Callers
    decide which nodes to keep (see :func:`~climcp.tools.builder.build_tools`).

    Example::

        >>> [path for _, path in walk_tree(root)]
        [(), ('issue',), ('issue', 'list'), ('issue', 'close')]
    """
    yield from _walk(root, ())


def _walk(node: CommandNode, path: CommandPath) -> Iterator[tuple[CommandNode, CommandPath]]:
    yield node, path
    for child in node.children:
        yield from _walk(child, path + (child.name,))
