"""Run ``rclone bisync`` against a single target."""

import asyncio
import os
import signal
import sys
import time
from typing import List, Optional

from .errors import ConfigError, ErrorKind, RunResult
from .models import SyncTarget
from .parser import summarize_output
from ..utils.logging import get_logger


BISYNC_SUBCOMMAND = "bisync"
BISYNC_FLAGS = ("--verbose", "--resync")
READ_CHUNK_SIZE = 4096

IS_UNIX = sys.platform != "win32"


def build_command(executable_path: str, local_root: str, remote_address: str) -> List[str]:
    """Build the argv for one bisync invocation. Order and spelling are fixed."""
    return [executable_path, BISYNC_SUBCOMMAND, local_root, remote_address, *BISYNC_FLAGS]


def check_local_root(local_root: Optional[str]) -> str:
    """Return the local root if it names an existing directory.

    Raises:
        ConfigError: If the path is empty or not a directory
    """
    if not local_root or not os.path.isdir(local_root):
        raise ConfigError("local root unavailable")
    return local_root


class TargetRunner:
    """Invokes the external sync executable for one target at a time."""

    def __init__(self, timeout_seconds: Optional[float] = None):
        """Initialize the runner.

        Args:
            timeout_seconds: Kill the process after this many seconds; None waits forever
        """
        self.timeout_seconds = timeout_seconds
        self.logger = get_logger(self.__class__.__name__)

    async def run(self, executable_path: str, local_root: Optional[str], target: SyncTarget) -> RunResult:
        """Sync one target and summarise the result.

        Args:
            executable_path: Path of the rclone executable
            local_root: Local directory to synchronise
            target: Remote destination

        Returns:
            RunResult holding either the parsed summary or a TargetError
        """
        if not executable_path:
            return RunResult.failure(ErrorKind.CONFIG, "rclone executable path is not configured")

        try:
            local_root = check_local_root(local_root)
            remote_address = target.resolve_address()
        except ConfigError as e:
            return RunResult.failure(ErrorKind.CONFIG, str(e))

        command = build_command(executable_path, local_root, remote_address)
        self.logger.info("Starting rclone bisync", target=target.display_name, remote=remote_address)

        start_time = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=IS_UNIX,
            )
        except OSError as e:
            self.logger.error("Failed to start rclone", target=target.display_name, error=str(e))
            return RunResult.failure(ErrorKind.SPAWN, str(e))

        stdout = bytearray()
        stderr = bytearray()

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    self._drain(process.stdout, stdout, "stdout"),
                    self._drain(process.stderr, stderr, "stderr"),
                    process.wait(),
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            self.logger.error(
                "rclone timed out",
                target=target.display_name,
                timeout_seconds=self.timeout_seconds
            )
            return RunResult.failure(ErrorKind.TIMEOUT, f"timed out after {self.timeout_seconds:g}s")

        elapsed = time.monotonic() - start_time
        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")
        exit_code = process.returncode

        if exit_code != 0:
            self.logger.warning(
                "rclone exited with an error",
                target=target.display_name,
                exit_code=exit_code,
                duration=f"{elapsed:.2f}s"
            )
            return RunResult.failure(ErrorKind.PROCESS, stderr_text.strip() or stdout_text.strip(), exit_code=exit_code)

        summary = summarize_output(f"{stdout_text}\n{stderr_text}", elapsed)
        self.logger.info(
            "rclone bisync completed",
            target=target.display_name,
            summary=summary,
            duration=f"{elapsed:.2f}s"
        )
        return RunResult.success(summary)

    async def _drain(self, stream: Optional[asyncio.StreamReader], buffer: bytearray, label: str) -> None:
        """Append everything read from ``stream`` to ``buffer`` until EOF."""
        if stream is None:
            return
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            self.logger.debug(f"rclone {label}", text=chunk.decode("utf-8", errors="replace").rstrip())

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill the process together with any children it started."""
        if process.returncode is not None:
            return
        try:
            if IS_UNIX:
                os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            return
        await process.wait()
