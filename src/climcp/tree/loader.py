"""Resolve ``module:attr`` and ``path/to/file.py:attr`` targets to Click commands."""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

import click

from climcp.exceptions import TargetLoadError
from climcp.tree.click_adapter import to_click_command

_DEFAULT_ATTRIBUTES = ("app", "cli", "main")


def load_target(spec: str) -> click.Command:
    """Import the Click command or Typer app named by *spec*.

    Args:
        spec: ``package.module:attribute`` or ``path/to/file.py:attribute``.
            When ``:attribute`` is omitted, ``app``, ``cli`` and ``main``
            are tried in that order.

    Returns:
        The target as a :class:`click.Command` (Typer apps are compiled).

    Raises:
        TargetLoadError: If the module cannot be imported, the attribute is
            missing, or it is not a Click command or Typer app.
    """
    module_part, _, attribute = spec.partition(":")
    if not module_part:
        raise TargetLoadError(f"Invalid target '{spec}': expected module:attribute")

    module = _import(module_part)
    target = _find_attribute(module, attribute, spec)
    try:
        return to_click_command(target)
    except TypeError as exc:
        raise TargetLoadError(f"Target '{spec}' is not a CLI: {exc}") from exc


def _import(module_part: str) -> ModuleType:
    if module_part.endswith(".py") or "/" in module_part or "\\" in module_part:
        return _import_file(Path(module_part))
    # Console scripts do not put the working directory on sys.path.
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    try:
        return importlib.import_module(module_part)
    except ImportError as exc:
        raise TargetLoadError(f"Cannot import module '{module_part}': {exc}") from exc


def _import_file(path: Path) -> ModuleType:
    if not path.is_file():
        raise TargetLoadError(f"Target file not found: {path}")
    module_name = f"_climcp_target_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise TargetLoadError(f"Cannot load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise TargetLoadError(f"Error while loading {path}: {exc}") from exc
    return module


def _find_attribute(module: ModuleType, attribute: str, spec: str) -> Any:
    if attribute:
        if not hasattr(module, attribute):
            raise TargetLoadError(f"'{module.__name__}' has no attribute '{attribute}'")
        return getattr(module, attribute)
    for candidate in _DEFAULT_ATTRIBUTES:
        if hasattr(module, candidate):
            return getattr(module, candidate)
    raise TargetLoadError(
        f"No CLI found in '{spec}'; name one explicitly (e.g. {spec}:app)"
    )
