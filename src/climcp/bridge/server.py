"""Tool registry and the MCP server loop.

:class:`ToolRegistry` is built once at startup from a command tree and is
read-only afterwards; every call runs translate -> execute -> paginate with
per-call state only, so concurrent calls need no locking.

:func:`build_server` wires a registry into a low-level
:class:`mcp.server.Server`, and :func:`run_stdio` serves it over stdin/stdout.
While serving, stdout belongs to the protocol stream: diagnostics go through
:mod:`logging` to stderr.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any, Optional

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import BaseModel

from climcp import __version__
from climcp.bridge.executor import CommandExecutor
from climcp.bridge.paginator import paginate
from climcp.bridge.translator import translate_params
from climcp.models import (
    CommandNode,
    PaginationMetadata,
    ResponseConfig,
    ServeSettings,
    ToolDescriptor,
)
from climcp.tools.builder import build_tools

logger = logging.getLogger(__name__)


class ToolResponse(BaseModel):
    """Result of one tool call: the page of output plus its metadata."""

    text: str
    is_error: bool = False
    pagination: PaginationMetadata

    def to_call_result(self) -> types.CallToolResult:
        """Convert to the MCP ``CallToolResult`` wire shape."""
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=self.text)],
            isError=self.is_error,
            structuredContent={
                "pagination": self.pagination.model_dump(mode="json", exclude_none=True)
            },
        )


class ToolRegistry:
    """Read-only mapping of tool names to leaf commands.

    Args:
        tools: ``(descriptor, node)`` pairs, usually from
            :func:`~climcp.tools.builder.build_tools`.
        executor: Runs translated invocations.
        settings: Serve settings (default response limit).
        name: Name of the command tree the tools came from.
    """

    def __init__(
        self,
        tools: Sequence[tuple[ToolDescriptor, CommandNode]],
        executor: CommandExecutor,
        settings: Optional[ServeSettings] = None,
        name: str = "",
    ) -> None:
        self.name = name
        self.settings = settings or ServeSettings()
        self.executor = executor
        self._tools: dict[str, tuple[ToolDescriptor, CommandNode]] = {}
        for descriptor, node in tools:
            if descriptor.name in self._tools:
                logger.warning("Duplicate tool name %s; keeping the first", descriptor.name)
                continue
            self._tools[descriptor.name] = (descriptor, node)

    @classmethod
    def from_tree(
        cls,
        root: CommandNode,
        executor: CommandExecutor,
        settings: Optional[ServeSettings] = None,
    ) -> ToolRegistry:
        """Build a registry with one tool per runnable command under *root*."""
        settings = settings or ServeSettings()
        tools = build_tools(root, settings)
        logger.info("Registered %d tools from '%s'", len(tools), root.name)
        return cls(tools, executor, settings, name=root.name)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def descriptors(self) -> list[ToolDescriptor]:
        """All tool descriptors, in registration order."""
        return [descriptor for descriptor, _ in self._tools.values()]

    def get(self, name: str) -> Optional[ToolDescriptor]:
        entry = self._tools.get(name)
        return entry[0] if entry else None

    def mcp_tools(self) -> list[types.Tool]:
        """Tool definitions in MCP wire shape."""
        return [
            types.Tool(
                name=d.name,
                description=d.description,
                inputSchema=d.parameters,
                annotations=types.ToolAnnotations(destructiveHint=d.destructive),
            )
            for d in self.descriptors
        ]

    async def call(self, name: str, params: Optional[dict[str, Any]]) -> ToolResponse:
        """Run tool *name* with call *params*.

        Never raises for bad input: an unknown tool, a malformed call or a
        failing command all come back as an error response whose text is
        paginated like any other output.
        """
        entry = self._tools.get(name)
        if entry is None:
            text, pagination = paginate(
                f"unknown tool: {name}",
                ResponseConfig(limit=self.settings.default_limit),
            )
            return ToolResponse(text=text, is_error=True, pagination=pagination)

        descriptor, node = entry
        argv, config = translate_params(
            params if isinstance(params, dict) else None,
            node,
            default_limit=self.settings.default_limit,
        )
        logger.debug("Calling %s with argv %s", name, argv)
        result = await self.executor.execute(descriptor.path, argv)
        text, pagination = paginate(result.output, config)
        if result.failed:
            logger.info("Tool %s failed (exit code %s)", name, result.exit_code)
        return ToolResponse(text=text, is_error=result.failed, pagination=pagination)


def build_server(registry: ToolRegistry, name: Optional[str] = None) -> Server:
    """Create an MCP server exposing *registry*.

    Input validation is disabled: calls are translated best-effort, and a
    schema mismatch must not reject a call the command could still run.
    """
    server: Server = Server(name or registry.settings.server_name, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.mcp_tools()

    @server.call_tool(validate_input=False)
    async def call_tool(tool: str, arguments: dict[str, Any]) -> types.CallToolResult:
        response = await registry.call(tool, arguments)
        return response.to_call_result()

    return server


async def serve_stdio(registry: ToolRegistry, name: Optional[str] = None) -> None:
    """Serve *registry* over stdin/stdout until the client disconnects."""
    server = build_server(registry, name)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_stdio(registry: ToolRegistry, name: Optional[str] = None) -> None:
    """Blocking wrapper around :func:`serve_stdio`."""
    asyncio.run(serve_stdio(registry, name))
