"""Call-time half of the bridge: translate, execute, paginate, serve.

Typical usage::

    from climcp.bridge import SubprocessExecutor, ToolRegistry, run_stdio
    from climcp.tree import load_target, node_from_click

    command = load_target("mycli.main:app")
    registry = ToolRegistry.from_tree(node_from_click(command), SubprocessExecutor())
    run_stdio(registry)

Sub-modules:

* :mod:`~climcp.bridge.translator` -- call parameters to argv.
* :mod:`~climcp.bridge.executor` -- subprocess and in-process execution.
* :mod:`~climcp.bridge.paginator` -- bounded pages with navigation hints.
* :mod:`~climcp.bridge.server` -- tool registry and MCP server loop.
"""

from climcp.bridge.executor import InProcessExecutor, SubprocessExecutor
from climcp.bridge.paginator import paginate
from climcp.bridge.server import ToolRegistry, ToolResponse, build_server, run_stdio
from climcp.bridge.translator import translate_params

__all__ = [
    "InProcessExecutor",
    "SubprocessExecutor",
    "ToolRegistry",
    "ToolResponse",
    "build_server",
    "paginate",
    "run_stdio",
    "translate_params",
]
