"""Command annotations and the destructiveness classifier.

Commands carry a small string-to-string annotation map. Two keys matter to
tool-calling clients: :data:`DESTRUCTIVE` and :data:`SAFE`. Clients use the
resulting ``destructiveHint`` to decide whether a call needs confirmation, so
a command that declares neither is treated as destructive.

Annotations are attached to Click/Typer callbacks with :func:`annotate` (or
the :func:`safe` / :func:`destructive` shortcuts) and picked up by
:func:`~climcp.tree.click_adapter.node_from_click`. Manifests declare them
under an ``annotations`` key.

Example::

    @app.command("list")
    @safe()
    def list_issues(state: str = "opened") -> None:
        ...
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

from climcp.models import CommandNode

DESTRUCTIVE = "mcp:destructive"
SAFE = "mcp:safe"
HELP_ARGUMENTS = "help:arguments"
EXAMPLE = "example"

_ATTRIBUTE = "__climcp_annotations__"

T = TypeVar("T")


def annotate(
    annotations: Optional[Mapping[str, str]] = None, **extra: str
) -> Callable[[T], T]:
    """Return a decorator that merges annotations into a callback or command.

    Works on plain functions (before ``@app.command`` registers them) and on
    already-built :class:`click.Command` objects.

    Args:
        annotations: Mapping of annotation keys to string values. Keys with
            colons (``"mcp:safe"``) must be passed this way.
        **extra: Additional annotations with identifier-safe keys.
    """
    values = dict(annotations or {})
    values.update(extra)

    def decorator(target: T) -> T:
        merged = dict(getattr(target, _ATTRIBUTE, None) or {})
        merged.update(values)
        setattr(target, _ATTRIBUTE, merged)
        return target

    return decorator


def safe() -> Callable[[T], T]:
    """Mark a command as read-only (``destructiveHint: false``)."""
    return annotate({SAFE: "true"})


def destructive() -> Callable[[T], T]:
    """Mark a command as mutating state (``destructiveHint: true``)."""
    return annotate({DESTRUCTIVE: "true"})


def get_annotations(target: Any) -> dict[str, str]:
    """Return the annotations attached to *target* (empty dict if none)."""
    return dict(getattr(target, _ATTRIBUTE, None) or {})


def is_destructive(node: CommandNode) -> bool:
    """Classify *node* as destructive from its declared annotations.

    An explicit :data:`DESTRUCTIVE` annotation wins; otherwise an explicit
    :data:`SAFE` annotation is negated; otherwise ``True``.
    """
    annotations = node.annotations
    if DESTRUCTIVE in annotations:
        return annotations[DESTRUCTIVE] == "true"
    if SAFE in annotations:
        return annotations[SAFE] != "true"
    return True
