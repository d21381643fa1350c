"""Bounded tool descriptions built from command help text.

Tool descriptions are sent to the calling agent for every tool on every
session, so the long help text is cut to a small character budget. The
short description is always kept whole.
"""

from __future__ import annotations

from collections.abc import Sequence

from climcp.models import DEFAULT_DESCRIPTION_BUDGET, CommandNode
from climcp.tree.annotations import HELP_ARGUMENTS


def truncate_text(text: str, budget: int = DEFAULT_DESCRIPTION_BUDGET) -> str:
    """Cut *text* to at most *budget* characters at a word boundary.

    Scans backward from ``budget - 4`` for a space or newline and cuts there,
    stripping trailing whitespace, then appends ``"..."``. When no boundary
    exists in range the text is hard-cut at ``budget - 3``.

    Example::

        >>> truncate_text("This is a long text that should be truncated", 20)
        'This is a long...'
        >>> truncate_text("Verylongtextwithnospaces", 10)
        'Verylon...'
    """
    if len(text) <= budget:
        return text
    for index in range(min(budget - 4, len(text) - 1), -1, -1):
        if text[index] in (" ", "\n"):
            return text[:index].rstrip() + "..."
    return text[: max(budget - 3, 0)] + "..."


def build_description(
    node: CommandNode,
    budget: int = DEFAULT_DESCRIPTION_BUDGET,
    ancestors: Sequence[CommandNode] = (),
    include_examples: bool = False,
) -> str:
    """Build the description of the tool for *node*.

    The short description comes first, followed by a blank line and the
    truncated long description. With *include_examples*, the nearest
    ``example`` and ``help:arguments`` text found on the node or its
    *ancestors* (nearest last) is appended as ``Examples:`` / ``Arguments:``
    sections.

    Returns:
        The description, or ``""`` when the node has no help text at all.
    """
    parts: list[str] = []

    def add(*lines: str) -> None:
        if parts:
            parts.append("")
        parts.extend(lines)

    if node.short:
        parts.append(node.short)
    if node.long:
        add(truncate_text(node.long, budget))

    if include_examples:
        lineage = [node, *reversed(ancestors)]
        example = next((n.example.strip() for n in lineage if n.example.strip()), "")
        arguments = next(
            (
                n.annotations[HELP_ARGUMENTS].strip()
                for n in lineage
                if n.annotations.get(HELP_ARGUMENTS, "").strip()
            ),
            "",
        )
        if example:
            add("Examples:", example)
        if arguments:
            add("Arguments:", arguments)

    return "\n".join(parts)


def fallback_description(prefix: str, path: Sequence[str]) -> str:
    """Description for a command that declares no help text."""
    words = " ".join([prefix, *path]).strip()
    return f"Execute {words} command"
