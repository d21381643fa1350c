"""Tool schema generation -- one tool descriptor per leaf command.

Sub-modules:

* :mod:`~climcp.tools.description` -- bounded descriptions from help text.
* :mod:`~climcp.tools.flags` -- flag kind to JSON-schema type.
* :mod:`~climcp.tools.builder` -- compose the full tool descriptor.
"""

from climcp.tools.builder import build_tool, build_tools
from climcp.tools.description import build_description, truncate_text
from climcp.tools.flags import flag_schema

__all__ = [
    "build_description",
    "build_tool",
    "build_tools",
    "flag_schema",
    "truncate_text",
]
