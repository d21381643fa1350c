"""Generate a Markdown tool reference from tool descriptors.

Produces, inside the output directory:

* ``TOOLS.md`` -- overview of every tool grouped by the first segment of
  its command path, with its destructiveness and one-line summary.
* ``references/<tool>.md`` -- the full description, the equivalent command
  line, and the flag table of one tool.

Templates live in ``docs/templates/`` and are rendered with Jinja2.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from climcp.models import ToolDescriptor
from climcp.tools.builder import FLAGS_PARAM

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``docs/templates/``)."""

_ROOT_GROUP = "General"


def generate_tool_docs(
    tools: Sequence[ToolDescriptor],
    output_dir: str | Path,
    title: str,
    program: Optional[str] = None,
) -> Path:
    """Write the Markdown reference for *tools* into *output_dir*.

    Args:
        tools: Descriptors to document, in the order they should appear.
        output_dir: Destination directory. Created (with parents) if missing.
        title: Heading for ``TOOLS.md``, usually the CLI name.
        program: Command shown in the "Command line" section of each page.
            Defaults to *title*.

    Returns:
        The :class:`~pathlib.Path` of *output_dir*.
    """
    output_path = Path(output_dir)
    refs_path = output_path / "references"
    refs_path.mkdir(parents=True, exist_ok=True)

    env = _create_jinja_env()
    entries = [_tool_context(tool, program or title) for tool in tools]

    _render_template(
        env,
        "tools.md.j2",
        output_path / "TOOLS.md",
        {"title": title, "groups": _group_by_resource(entries), "count": len(entries)},
    )
    for entry in entries:
        _render_template(
            env, "tool.md.j2", refs_path / f"{entry['name']}.md", {"tool": entry}
        )
    return output_path


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _tool_context(tool: ToolDescriptor, program: str) -> dict[str, Any]:
    """Flatten a descriptor into the variables the templates use."""
    flag_schema = tool.parameters["properties"][FLAGS_PARAM]["properties"]
    flags = [
        {
            "property": prop,
            "option": tool.flag_options.get(prop, "--" + prop.replace("_", "-")),
            "type": schema["type"],
        }
        for prop, schema in flag_schema.items()
    ]
    summary, _, _ = tool.description.partition("\n")
    return {
        "name": tool.name,
        "summary": summary,
        "description": tool.description,
        "destructive": tool.destructive,
        "command": " ".join([program, *tool.path]),
        "path": list(tool.path),
        "flags": flags,
    }


def _group_by_resource(entries: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group tool entries by their first path segment, title-cased."""
    groups: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for entry in entries:
        path = entry["path"]
        group = path[0].title() if len(path) > 1 else _ROOT_GROUP
        groups[group].append(entry)
    return dict(groups)


def _render_template(
    env: Environment,
    template_name: str,
    output_path: Path,
    context: dict[str, Any],
) -> None:
    template = env.get_template(template_name)
    output_path.write_text(template.render(**context), encoding="utf-8")
