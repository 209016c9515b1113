import asyncio
import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Tuple

import psutil

from code_runner.services.commands import ExecutionCommand

# Captured output cap, per stream and per step
DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024
READ_CHUNK_BYTES = 64 * 1024
KILL_GRACE_SECONDS = 5.0


@dataclass
class ExecutionResult:
    """Raw outcome of running an ExecutionCommand."""

    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    error: Optional[str] = None
    exit_code: Optional[int] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def _decode(data: Optional[bytes]) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


def kill_process_tree(pid: int) -> None:
    """
    Forcibly kill a process, its process group and every descendant.

    Children are collected before the parent dies so re-parented
    grandchildren are not missed.
    """
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        procs = []

    # Steps run in their own session, so the group id equals the pid
    if hasattr(os, "killpg"):
        try:
            os.killpg(pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            pass

    for proc in procs:
        try:
            proc.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass


class CodeExecutor:
    """Runs synthesized commands as child processes under a wall-clock budget."""

    def __init__(self, logger: logging.Logger, max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES):
        self.logger = logger
        self.max_output_bytes = max_output_bytes

    async def run(self, command: ExecutionCommand, timeout: float) -> ExecutionResult:
        """
        Execute every step of `command` in order, stopping at the first failure.

        Args:
            command: steps to run, compile first
            timeout: seconds allowed for all steps together

        Returns:
            ExecutionResult with accumulated stdout/stderr
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        stdout: List[str] = []
        stderr: List[str] = []
        last = len(command.steps) - 1

        for index, argv in enumerate(command.steps):
            remaining = deadline - loop.time()
            if remaining <= 0:
                return ExecutionResult(timed_out=True)

            stdin_path = command.stdin_path if index == last else None
            try:
                if stdin_path is not None:
                    with open(stdin_path, "rb") as stdin:
                        process = await self._spawn(argv, command, stdin)
                else:
                    process = await self._spawn(argv, command, subprocess.DEVNULL)
            except OSError as e:
                self.logger.error("Could not start %s: %s", argv[0], e)
                return ExecutionResult(
                    stdout="".join(stdout),
                    stderr="".join(stderr),
                    error=str(e),
                )

            collector = asyncio.ensure_future(self._collect(process))
            try:
                done, _ = await asyncio.wait({collector}, timeout=remaining)
            except BaseException:
                # Cancelled from outside
                kill_process_tree(process.pid)
                collector.cancel()
                raise

            if not done:
                kill_process_tree(process.pid)
                await self._reap(collector)
                self.logger.error(
                    "Execution timed out after %s seconds for command: %s",
                    timeout,
                    command.render(),
                )
                return ExecutionResult(timed_out=True)

            out, err, overflowed = collector.result()
            stdout.append(_decode(out))
            stderr.append(_decode(err))

            if overflowed:
                self.logger.error(
                    "Output exceeded %d bytes for command: %s",
                    self.max_output_bytes,
                    command.render(index),
                )
                return ExecutionResult(
                    stdout="".join(stdout),
                    stderr="".join(stderr),
                    error=f"Output exceeded {self.max_output_bytes} bytes: {command.render(index)}",
                    exit_code=process.returncode,
                )

            if process.returncode != 0:
                return ExecutionResult(
                    stdout="".join(stdout),
                    stderr="".join(stderr),
                    error=(
                        f"Command failed with exit code {process.returncode}: "
                        f"{command.render(index)}"
                    ),
                    exit_code=process.returncode,
                )

        return ExecutionResult(
            stdout="".join(stdout),
            stderr="".join(stderr),
            exit_code=0,
        )

    async def _collect(self, process) -> Tuple[bytes, bytes, bool]:
        """
        Read both pipes to EOF, keeping at most `max_output_bytes` of each.

        Reading continues past the cap so the pipes always reach EOF and the
        process can be reaped; the tree is killed on the first overflow.
        """
        overflowed = False

        async def drain(stream, sink: bytearray) -> None:
            nonlocal overflowed
            while True:
                chunk = await stream.read(READ_CHUNK_BYTES)
                if not chunk:
                    return
                room = self.max_output_bytes - len(sink)
                if len(chunk) > room:
                    sink.extend(chunk[:max(room, 0)])
                    if not overflowed:
                        overflowed = True
                        kill_process_tree(process.pid)
                    continue
                sink.extend(chunk)

        out, err = bytearray(), bytearray()
        await asyncio.gather(drain(process.stdout, out), drain(process.stderr, err))
        await process.wait()
        return bytes(out), bytes(err), overflowed

    async def _reap(self, collector: asyncio.Future) -> None:
        """Wait for a killed step's pipes to close, giving up after KILL_GRACE_SECONDS."""
        done, _ = await asyncio.wait({collector}, timeout=KILL_GRACE_SECONDS)
        if not done:
            # A descendant escaped the kill and still holds a pipe open
            self.logger.warning("Abandoning pipes of a killed process")
            collector.cancel()

    async def _spawn(self, argv, command: ExecutionCommand, stdin):
        return await asyncio.create_subprocess_exec(
            *argv,
            stdin=stdin,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(command.cwd),
            start_new_session=True,
        )
