"""Run a translated command invocation and capture its combined output.

Two executors share one coroutine interface,
``await executor.execute(path, argv) -> ExecutionResult``:

* :class:`SubprocessExecutor` -- re-executes a program (by default the
  running program itself) as ``<program> <path...> <argv...>`` with stdout
  and stderr merged into one pipe. Each call gets a fresh process, so
  commands that keep global state cannot leak it between calls.
* :class:`InProcessExecutor` -- invokes a Click command in this process with
  its output captured. Faster, but only safe for commands without ambient
  global state.

Output is returned for failures as well as successes: the command's own
error text is what the caller needs to see.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import subprocess
import sys
import threading
import traceback
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional, Protocol

import click
from click.testing import CliRunner

from climcp.models import ExecutionResult

logger = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024


class CommandExecutor(Protocol):
    """Anything that can run a command path with arguments."""

    async def execute(
        self, path: Sequence[str], argv: Sequence[str]
    ) -> ExecutionResult:  # pragma: no cover - protocol
        ...


def resolve_self_command() -> list[str]:
    """Return the argv prefix that re-executes the running program.

    ``python -m pkg`` runs become ``[python, "-m", "pkg"]``; scripts ending in
    ``.py`` run through the current interpreter; console scripts resolve to
    their absolute path.
    """
    main_spec = getattr(sys.modules.get("__main__"), "__spec__", None)
    if main_spec is not None and main_spec.name:
        module = main_spec.name
        if module.endswith(".__main__"):
            module = module[: -len(".__main__")]
        return [sys.executable, "-m", module]

    argv0 = sys.argv[0] if sys.argv else ""
    if argv0 and argv0 != "-c":
        path = Path(argv0)
        if path.suffix == ".py":
            return [sys.executable, str(path.resolve())]
        found = shutil.which(argv0)
        if found:
            return [found]
        if path.exists():
            return [str(path.resolve())]
    return [sys.executable, "-m", "climcp"]


class SubprocessExecutor:
    """Execute commands as child processes.

    Args:
        program: Argv prefix of the program to run. Defaults to
            :func:`resolve_self_command`.
        timeout: Seconds before the child is killed and the call fails.
            ``None`` waits indefinitely.
        env: Extra environment variables for the child.
    """

    def __init__(
        self,
        program: Optional[Sequence[str]] = None,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.program = list(program) if program else resolve_self_command()
        self.timeout = timeout
        self._env = dict(env) if env else None

    async def execute(self, path: Sequence[str], argv: Sequence[str]) -> ExecutionResult:
        """Run ``program + path + argv`` and wait for it to exit.

        Cancelling the awaiting task kills the child before the cancellation
        propagates.
        """
        cmd = [*self.program, *path, *argv]
        logger.debug("Executing %s", shlex.join(cmd))

        env = None
        if self._env:
            env = {**os.environ, **self._env}

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=env,
            )
        except (OSError, ValueError) as exc:
            logger.warning("Failed to start %s: %s", cmd[0], exc)
            return ExecutionResult(output=f"failed to start {cmd[0]}: {exc}", failed=True)

        buffer = bytearray()
        try:
            exit_code = await asyncio.wait_for(_drain(proc, buffer), self.timeout)
        except asyncio.TimeoutError:
            await _kill(proc)
            logger.warning("Command timed out after %ss: %s", self.timeout, shlex.join(cmd))
            output = _decode(buffer)
            if output and not output.endswith("\n"):
                output += "\n"
            output += f"command timed out after {self.timeout:g}s and was killed"
            return ExecutionResult(output=output, failed=True, exit_code=proc.returncode)
        except asyncio.CancelledError:
            await _kill(proc)
            logger.info("Call cancelled; killed %s", shlex.join(cmd))
            raise

        logger.debug("Command exited with %s", exit_code)
        return ExecutionResult(
            output=_decode(buffer), failed=exit_code != 0, exit_code=exit_code
        )


async def _drain(proc: asyncio.subprocess.Process, buffer: bytearray) -> int:
    assert proc.stdout is not None
    while True:
        chunk = await proc.stdout.read(_READ_CHUNK)
        if not chunk:
            break
        buffer.extend(chunk)
    return await proc.wait()


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


class InProcessExecutor:
    """Execute commands by invoking a Click command in this process.

    Stream redirection is process-wide, so invocations are serialised on a
    lock and run in a worker thread to keep the event loop responsive.
    Cancellation cannot interrupt a running invocation.

    Args:
        command: The root Click command of the tree being served.
        prog_name: Program name shown in the command's own messages.
    """

    def __init__(self, command: click.Command, prog_name: Optional[str] = None) -> None:
        self._command = command
        self._prog_name = prog_name or command.name
        self._lock = threading.Lock()

    async def execute(self, path: Sequence[str], argv: Sequence[str]) -> ExecutionResult:
        return await asyncio.to_thread(self._invoke, [*path, *argv])

    def _invoke(self, args: list[str]) -> ExecutionResult:
        logger.debug("Invoking in-process: %s", shlex.join(args))
        runner = CliRunner()
        with self._lock:
            result = runner.invoke(
                self._command, args, prog_name=self._prog_name, catch_exceptions=True
            )

        output = result.output
        exc = result.exception
        if exc is not None and not isinstance(exc, SystemExit) and result.exc_info:
            output += "".join(traceback.format_exception(*result.exc_info))
        return ExecutionResult(
            output=output, failed=result.exit_code != 0, exit_code=result.exit_code
        )
