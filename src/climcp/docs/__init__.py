"""Markdown reference for generated tools.

Renders a ``TOOLS.md`` overview plus one ``references/<tool>.md`` page per
tool, for use as agent skill files or project documentation.

Exports:
    generate_tool_docs: Write the reference directory for a set of tools.
"""

from climcp.docs.generator import generate_tool_docs

__all__ = ["generate_tool_docs"]
