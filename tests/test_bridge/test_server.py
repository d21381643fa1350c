"""Tests for the tool registry and the MCP server wiring."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest
from mcp import types
from mcp.shared.memory import create_connected_server_and_client_session

from climcp.bridge.executor import SubprocessExecutor
from climcp.bridge.server import ToolRegistry, ToolResponse, build_server
from climcp.models import CommandNode, ExecutionResult, ServeSettings


class RecordingExecutor:
    """Executor double that records invocations and replays a fixed result."""

    def __init__(self, result: ExecutionResult | None = None) -> None:
        self.result = result or ExecutionResult(output="ok\n")
        self.calls: list[tuple[tuple[str, ...], list[str]]] = []

    async def execute(self, path: Sequence[str], argv: Sequence[str]) -> ExecutionResult:
        self.calls.append((tuple(path), list(argv)))
        return self.result


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def registry(sample_tree: CommandNode, executor: RecordingExecutor) -> ToolRegistry:
    return ToolRegistry.from_tree(sample_tree, executor)


class TestToolRegistry:
    def test_one_tool_per_runnable_command(self, registry: ToolRegistry) -> None:
        assert [d.name for d in registry.descriptors] == [
            "glab_issue_list",
            "glab_issue_close",
            "glab_auth_status",
        ]
        assert len(registry) == 3
        assert "glab_issue_list" in registry
        assert "glab_issue" not in registry

    def test_name_from_root(self, registry: ToolRegistry) -> None:
        assert registry.name == "glab"

    def test_prefix_setting(self, sample_tree: CommandNode, executor) -> None:
        registry = ToolRegistry.from_tree(
            sample_tree, executor, ServeSettings(tool_prefix="gl")
        )
        assert registry.get("gl_issue_list") is not None
        assert registry.get("glab_issue_list") is None

    def test_duplicate_names_keep_first(self, registry: ToolRegistry, executor) -> None:
        first = registry.get("glab_issue_list")
        second = first.model_copy(update={"description": "duplicate"})
        node = CommandNode(name="list", runnable=True)
        merged = ToolRegistry([(first, node), (second, node)], executor)
        assert len(merged) == 1
        assert merged.get("glab_issue_list").description == first.description

    def test_mcp_tools(self, registry: ToolRegistry) -> None:
        tools = {tool.name: tool for tool in registry.mcp_tools()}
        assert tools["glab_issue_list"].annotations.destructiveHint is False
        assert tools["glab_issue_close"].annotations.destructiveHint is True
        schema = tools["glab_issue_list"].inputSchema
        assert set(schema["properties"]) == {"args", "flags", "limit", "offset"}


class TestRegistryCall:
    def test_translates_and_executes(self, registry: ToolRegistry, executor) -> None:
        response = asyncio.run(
            registry.call(
                "glab_issue_list",
                {"flags": {"per_page": 20, "repo": "a/b"}, "args": ["extra"]},
            )
        )
        assert executor.calls == [
            (("issue", "list"), ["--per-page", "20", "--repo", "a/b", "extra"])
        ]
        assert response.text == "ok\n"
        assert response.is_error is False
        assert response.pagination.total_size == 3
        assert response.pagination.truncated is False

    def test_failure_is_error_response(self, sample_tree: CommandNode) -> None:
        failing = RecordingExecutor(
            ExecutionResult(output="error: not found\n", failed=True, exit_code=1)
        )
        registry = ToolRegistry.from_tree(sample_tree, failing)
        response = asyncio.run(registry.call("glab_auth_status", {}))
        assert response.is_error is True
        assert response.text == "error: not found\n"

    def test_error_output_is_paginated(self, sample_tree: CommandNode) -> None:
        failing = RecordingExecutor(
            ExecutionResult(output="x" * 100 + "FATAL", failed=True, exit_code=2)
        )
        registry = ToolRegistry.from_tree(sample_tree, failing)
        response = asyncio.run(
            registry.call("glab_auth_status", {"limit": 5, "offset": -5})
        )
        assert response.text == "FATAL"
        assert response.pagination.truncated is True

    def test_unencodable_flag_value_is_error_response(
        self, sample_tree: CommandNode, echo_program
    ) -> None:
        registry = ToolRegistry.from_tree(sample_tree, SubprocessExecutor(echo_program))
        response = asyncio.run(
            registry.call("glab_issue_list", {"flags": {"assignee": "\ud800"}})
        )
        assert response.is_error is True
        assert response.text.startswith("failed to start")
        assert response.pagination.offset == 0

    def test_unknown_tool(self, registry: ToolRegistry, executor) -> None:
        response = asyncio.run(registry.call("glab_nope", {}))
        assert response.is_error is True
        assert response.text == "unknown tool: glab_nope"
        assert executor.calls == []

    def test_malformed_params(self, registry: ToolRegistry, executor) -> None:
        response = asyncio.run(registry.call("glab_issue_list", ["not", "an", "object"]))
        assert response.is_error is False
        assert executor.calls == [(("issue", "list"), [])]

    def test_default_limit_setting(self, sample_tree: CommandNode) -> None:
        executor = RecordingExecutor(ExecutionResult(output="abcdefghij"))
        registry = ToolRegistry.from_tree(
            sample_tree, executor, ServeSettings(default_limit=4)
        )
        response = asyncio.run(registry.call("glab_auth_status", None))
        assert response.text == "abcd"
        assert response.pagination.limit == 4


class TestToolResponse:
    def test_call_result_shape(self, registry: ToolRegistry) -> None:
        response = asyncio.run(registry.call("glab_issue_list", {"limit": 1}))
        result = response.to_call_result()
        assert isinstance(result, types.CallToolResult)
        assert result.isError is False
        assert result.content[0].type == "text"
        assert result.content[0].text == "o"
        pagination = result.structuredContent["pagination"]
        assert pagination["truncated"] is True
        assert pagination["navigation_hints"]["next_page"] == 1
        assert "usage_guide" in pagination

    def test_untruncated_omits_hints(self, registry: ToolRegistry) -> None:
        response = asyncio.run(registry.call("glab_issue_list", {}))
        pagination = response.to_call_result().structuredContent["pagination"]
        assert "navigation_hints" not in pagination
        assert "usage_guide" not in pagination

    def test_model_is_serialisable(self) -> None:
        response = ToolResponse.model_validate(
            {
                "text": "",
                "pagination": {
                    "total_size": 0,
                    "limit": 10,
                    "offset": 0,
                    "actual_start": 0,
                    "actual_end": 0,
                    "actual_size": 0,
                    "truncated": False,
                },
            }
        )
        assert response.model_dump()["is_error"] is False


class TestServer:
    """End-to-end through an in-memory MCP client session."""

    def test_list_and_call(self, registry: ToolRegistry, executor) -> None:
        server = build_server(registry)

        async def run():
            async with create_connected_server_and_client_session(server) as client:
                listed = await client.list_tools()
                called = await client.call_tool(
                    "glab_issue_close", {"args": ["42"], "flags": {"comment": "done"}}
                )
                return listed, called

        listed, called = asyncio.run(run())
        assert [tool.name for tool in listed.tools] == [
            "glab_issue_list",
            "glab_issue_close",
            "glab_auth_status",
        ]
        assert called.isError is False
        assert called.content[0].text == "ok\n"
        assert called.structuredContent["pagination"]["total_size"] == 3
        assert executor.calls == [(("issue", "close"), ["--comment", "done", "42"])]

    def test_unknown_tool_is_error_result(self, registry: ToolRegistry) -> None:
        server = build_server(registry)

        async def run():
            async with create_connected_server_and_client_session(server) as client:
                return await client.call_tool("missing", {})

        result = asyncio.run(run())
        assert result.isError is True
        assert result.content[0].text == "unknown tool: missing"

    def test_server_name(self, registry: ToolRegistry) -> None:
        assert build_server(registry).name == "climcp"
        assert build_server(registry, name="tracker").name == "tracker"
