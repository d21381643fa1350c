"""Turn a TARGET argument into a served tool registry.

Shared by ``climcp serve`` and ``climcp tools``. A target is either a
Click/Typer import target (``module:attr`` or ``file.py:attr``) or, with
``manifest=True``, a manifest source describing an external program.

Executor selection:

* manifest targets run ``--program`` (default: the manifest root name);
* import targets re-execute ``python -m climcp run TARGET`` per call, or run
  in-process when ``in_process`` is set;
* an explicit ``--program`` always wins for import targets too.
"""

from __future__ import annotations

import logging
import shlex
import sys
from typing import Optional

import click

from climcp.bridge.executor import CommandExecutor, InProcessExecutor, SubprocessExecutor
from climcp.bridge.server import ToolRegistry
from climcp.models import CommandNode, ServeSettings
from climcp.tree import load_manifest, load_target, node_from_click

logger = logging.getLogger(__name__)

SELF_COMMAND = [sys.executable, "-m", "climcp"]
"""Argv prefix that runs this package with the current interpreter."""


def load_tree(
    target: str, manifest: bool = False
) -> tuple[CommandNode, Optional[click.Command]]:
    """Load *target* as a command tree.

    Returns:
        ``(root, command)``; ``command`` is the Click command for import
        targets and ``None`` for manifests.

    Raises:
        TargetLoadError: If an import target cannot be loaded.
        ManifestError: If a manifest cannot be read or validated.
    """
    if manifest:
        return load_manifest(target), None
    command = load_target(target)
    return node_from_click(command), command


def create_executor(
    target: str,
    root: CommandNode,
    command: Optional[click.Command],
    settings: ServeSettings,
    program: Optional[str] = None,
) -> CommandExecutor:
    """Pick the executor for a loaded target (see module docstring)."""
    if program:
        argv = shlex.split(program)
    elif command is None:
        argv = [root.name]
    elif settings.in_process:
        logger.debug("Running %s in-process", target)
        return InProcessExecutor(command, prog_name=root.name)
    else:
        argv = [*SELF_COMMAND, "run", target]
    logger.debug("Executing tools via %s", shlex.join(argv))
    return SubprocessExecutor(argv, timeout=settings.timeout)


def create_registry(
    target: str,
    settings: ServeSettings,
    manifest: bool = False,
    program: Optional[str] = None,
) -> ToolRegistry:
    """Load *target* and register one tool per runnable command."""
    root, command = load_tree(target, manifest)
    executor = create_executor(target, root, command, settings, program)
    return ToolRegistry.from_tree(root, executor, settings)
