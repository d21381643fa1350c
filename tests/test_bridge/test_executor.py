"""Tests for the subprocess and in-process command executors."""

from __future__ import annotations

import asyncio
import sys

import pytest

from climcp.bridge.executor import (
    InProcessExecutor,
    SubprocessExecutor,
    resolve_self_command,
)


def _python(script: str) -> list[str]:
    return [sys.executable, "-c", script]


class TestSubprocessExecutor:
    def test_path_then_argv(self, echo_program: list[str]) -> None:
        executor = SubprocessExecutor(echo_program)
        result = asyncio.run(executor.execute(["issue", "list"], ["--label", "bug"]))
        assert result.output.splitlines() == ["issue", "list", "--label", "bug"]
        assert result.failed is False
        assert result.exit_code == 0

    def test_nonzero_exit_is_failure_with_output(self, echo_program: list[str]) -> None:
        executor = SubprocessExecutor(echo_program)
        result = asyncio.run(executor.execute(["boom"], ["exit=3"]))
        assert result.failed is True
        assert result.exit_code == 3
        assert "boom" in result.output

    def test_stderr_is_merged(self) -> None:
        executor = SubprocessExecutor(
            _python("import sys; print('out', flush=True); print('err', file=sys.stderr)")
        )
        result = asyncio.run(executor.execute([], []))
        assert "out" in result.output
        assert "err" in result.output

    def test_start_failure(self) -> None:
        executor = SubprocessExecutor(["climcp-no-such-program-xyz"])
        result = asyncio.run(executor.execute(["a"], []))
        assert result.failed is True
        assert result.exit_code is None
        assert result.output.startswith("failed to start climcp-no-such-program-xyz")

    @pytest.mark.parametrize("arg", ["a\x00b", "\ud800"], ids=["nul-byte", "lone-surrogate"])
    def test_unencodable_argument_is_start_failure(self, echo_program, arg: str) -> None:
        executor = SubprocessExecutor(echo_program)
        result = asyncio.run(executor.execute([], [arg]))
        assert result.failed is True
        assert result.exit_code is None
        assert result.output.startswith("failed to start")

    def test_timeout_kills_child(self) -> None:
        executor = SubprocessExecutor(
            _python("import time; print('started', flush=True); time.sleep(30)"),
            timeout=2.0,
        )
        result = asyncio.run(executor.execute([], []))
        assert result.failed is True
        assert "started" in result.output
        assert result.output.endswith("command timed out after 2s and was killed")

    def test_extra_env(self) -> None:
        executor = SubprocessExecutor(
            _python("import os; print(os.environ['CLIMCP_TEST_VALUE'])"),
            env={"CLIMCP_TEST_VALUE": "from-env"},
        )
        result = asyncio.run(executor.execute([], []))
        assert result.output.strip() == "from-env"

    def test_stdin_is_closed(self) -> None:
        executor = SubprocessExecutor(_python("import sys; print(repr(sys.stdin.read()))"))
        result = asyncio.run(executor.execute([], []))
        assert result.output.strip() == "''"

    def test_invalid_utf8_replaced(self) -> None:
        executor = SubprocessExecutor(
            _python("import sys; sys.stdout.buffer.write(b'ok \\xff')")
        )
        result = asyncio.run(executor.execute([], []))
        assert result.output == "ok \ufffd"

    def test_cancellation_propagates(self) -> None:
        executor = SubprocessExecutor(_python("import time; time.sleep(30)"))

        async def run() -> None:
            task = asyncio.create_task(executor.execute([], []))
            await asyncio.sleep(0.5)
            task.cancel()
            await task

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(run())

    def test_concurrent_calls_are_independent(self, echo_program: list[str]) -> None:
        executor = SubprocessExecutor(echo_program)

        async def run():
            return await asyncio.gather(
                executor.execute(["one"], []),
                executor.execute(["two"], ["exit=2"]),
            )

        first, second = asyncio.run(run())
        assert first.output.strip() == "one"
        assert not first.failed
        assert second.exit_code == 2


class TestInProcessExecutor:
    def test_runs_command(self, sample_app) -> None:
        executor = InProcessExecutor(sample_app, prog_name="tracker")
        result = asyncio.run(
            executor.execute(["issue", "list"], ["--label", "bug", "--label", "ui"])
        )
        assert result.failed is False
        assert result.output.strip() == "state=open labels=bug,ui per_page=30 mine=False"

    def test_failure_keeps_output(self, sample_app) -> None:
        executor = InProcessExecutor(sample_app, prog_name="tracker")
        result = asyncio.run(executor.execute(["issue", "fail"], []))
        assert result.failed is True
        assert result.exit_code == 3
        assert "something went wrong" in result.output

    def test_usage_error(self, sample_app) -> None:
        executor = InProcessExecutor(sample_app, prog_name="tracker")
        result = asyncio.run(executor.execute(["issue", "close"], []))
        assert result.failed is True
        assert result.exit_code == 2
        assert "ISSUE_ID" in result.output


class TestResolveSelfCommand:
    def test_returns_argv_prefix(self) -> None:
        command = resolve_self_command()
        assert isinstance(command, list)
        assert command
        assert all(isinstance(part, str) for part in command)

    def test_module_run(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class Spec:
            name = "mycli.__main__"

        class Main:
            __spec__ = Spec()

        monkeypatch.setitem(sys.modules, "__main__", Main())
        assert resolve_self_command() == [sys.executable, "-m", "mycli"]

    def test_script_run(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        class Main:
            __spec__ = None

        script = tmp_path / "tool.py"
        script.write_text("")
        monkeypatch.setitem(sys.modules, "__main__", Main())
        monkeypatch.setattr(sys, "argv", [str(script)])
        assert resolve_self_command() == [sys.executable, str(script.resolve())]
