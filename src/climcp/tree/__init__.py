"""Command tree sources and traversal.

The bridge reads one immutable :class:`~climcp.models.CommandNode` tree.
This sub-package produces and walks it:

* :mod:`~climcp.tree.click_adapter` -- fold a Click/Typer application into
  a node tree with a declarative flag table per command.
* :mod:`~climcp.tree.manifest` -- load a YAML/JSON manifest describing an
  external CLI.
* :mod:`~climcp.tree.loader` -- resolve ``module:attr`` import targets.
* :mod:`~climcp.tree.walker` -- depth-first ``(node, path)`` traversal.
* :mod:`~climcp.tree.annotations` -- ``safe`` / ``destructive`` markers and
  the destructiveness classifier.
"""

from climcp.tree.annotations import annotate, destructive, is_destructive, safe
from climcp.tree.click_adapter import node_from_click
from climcp.tree.loader import load_target
from climcp.tree.manifest import load_manifest
from climcp.tree.walker import walk_tree

__all__ = [
    "annotate",
    "destructive",
    "is_destructive",
    "load_manifest",
    "load_target",
    "node_from_click",
    "safe",
    "walk_tree",
]
