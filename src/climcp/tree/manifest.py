"""Load a declarative command manifest from a URL, local file, or stdin.

A manifest describes the command tree of a CLI that climcp cannot import
(any executable on ``PATH``) as plain data. Each command lists its flags
with a primitive kind; persistent flags declared on a command are accepted
by all of its descendants.

Example manifest (YAML)::

    name: glab
    commands:
      - name: issue
        short: Work with issues
        persistent_flags:
          - {name: repo, kind: string}
        commands:
          - name: list
            short: List project issues
            annotations: {"mcp:safe": "true"}
            flags:
              - {name: label, kind: stringSlice}
              - {name: per-page, kind: int}
              - {name: closed, kind: bool}

The two public functions are:

* :func:`load_manifest` -- Load, parse, and convert a manifest from any
  supported source.
* :func:`manifest_to_node` -- Convert an already-parsed manifest dict.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from climcp.exceptions import ManifestError
from climcp.models import CommandNode, FlagDescriptor


class ManifestCommand(BaseModel):
    """One command entry of a manifest, before flag inheritance is applied."""

    name: str
    short: str = ""
    long: str = ""
    example: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)
    flags: list[FlagDescriptor] = Field(default_factory=list)
    persistent_flags: list[FlagDescriptor] = Field(default_factory=list)
    commands: list[ManifestCommand] = Field(default_factory=list)
    runnable: Optional[bool] = Field(
        default=None,
        description="Defaults to true for commands without sub-commands",
    )

    @field_validator("annotations", mode="before")
    @classmethod
    def _stringify_annotations(cls, value: Any) -> Any:
        # YAML reads `mcp:safe: true` as a boolean.
        if isinstance(value, dict):
            return {
                str(k): str(v).lower() if isinstance(v, bool) else str(v)
                for k, v in value.items()
            }
        return value


def load_manifest(source: str) -> CommandNode:
    """Load a command manifest from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The root :class:`~climcp.models.CommandNode` of the described tree.

    Raises:
        ManifestError: If the source cannot be loaded, parsed, or validated.
    """
    if source == "-":
        raw = _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        raw = _load_from_url(source)
    else:
        raw = _load_from_file(source)
    return manifest_to_node(raw)


def manifest_to_node(raw: dict[str, Any]) -> CommandNode:
    """Validate a parsed manifest and convert it to a :class:`CommandNode` tree.

    Raises:
        ManifestError: If the manifest does not match the expected shape.
    """
    try:
        manifest = ManifestCommand.model_validate(raw)
    except ValidationError as exc:
        raise ManifestError(f"Invalid command manifest: {exc}") from exc
    return _to_node(manifest, [])


def _to_node(command: ManifestCommand, inherited: list[FlagDescriptor]) -> CommandNode:
    runnable = command.runnable
    if runnable is None:
        runnable = not command.commands

    # A command's own persistent flags apply to itself and every descendant.
    passed_down = _merge_flags(command.persistent_flags, inherited)
    return CommandNode(
        name=command.name,
        short=command.short,
        long=command.long,
        example=command.example,
        annotations=command.annotations,
        flags=command.flags,
        inherited_flags=passed_down,
        children=[_to_node(child, passed_down) for child in command.commands],
        runnable=runnable,
    )


def _merge_flags(
    nearer: list[FlagDescriptor], farther: list[FlagDescriptor]
) -> list[FlagDescriptor]:
    """Concatenate flag lists, dropping later entries that reuse a name."""
    names = {f.name for f in nearer}
    return list(nearer) + [f for f in farther if f.name not in names]


def _load_from_stdin() -> dict[str, Any]:
    """Read a manifest from stdin.

    Raises:
        ManifestError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ManifestError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise ManifestError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a manifest from URL. Supports JSON and YAML responses.

    Raises:
        ManifestError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ManifestError(
            f"HTTP {exc.response.status_code} fetching manifest from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ManifestError(f"Failed to fetch manifest from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a manifest from a local ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        ManifestError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Failed to read manifest file {path}: {exc}") from exc

    if not content.strip():
        raise ManifestError(f"Manifest file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter.

    Raises:
        ManifestError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ManifestError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ManifestError(
                    f"Manifest must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise ManifestError(
                "Manifest must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result

    msg = "Failed to parse manifest as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise ManifestError(msg)
