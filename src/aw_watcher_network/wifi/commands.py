"""Async wrapper for running platform network utilities."""

import asyncio
import logging
from dataclasses import dataclass

from aw_watcher_network.wifi.base import ScanError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured output of one external command."""

    args: tuple[str, ...]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(args: list[str], timeout: float | None = None) -> CommandResult:
    """Run a command and capture its output.

    Raises ScanError if the binary is missing, cannot be started, or exceeds
    ``timeout``. A non-zero exit status is logged and returned, not raised:
    the output may still be usable.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise ScanError(f"Command not found: {args[0]}") from e
    except OSError as e:
        raise ScanError(f"Could not run {args[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise ScanError(f"{args[0]} timed out after {timeout:g}s") from e

    result = CommandResult(
        args=tuple(args),
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        returncode=proc.returncode or 0,
    )
    if not result.ok:
        logger.warning(
            "%s exited with status %d: %s",
            " ".join(args),
            result.returncode,
            result.stderr.strip()[:200],
        )
    return result
