"""External command execution for git operations.

Every git invocation goes through run_command(), which passes arguments as a
discrete argv list (never through a shell), runs in the caller's working
directory, and enforces an optional deadline. Failures are returned as a
StepOutcome rather than raised.
"""
from __future__ import annotations
import asyncio
import logging
import shlex
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Outcome of a single external command."""
    command: list[str] = field(default_factory=list)
    succeeded: bool = False
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    exit_code: int | None = None
    timed_out: bool = False

    @property
    def command_line(self) -> str:
        """Command rendered for display only."""
        return shlex.join(self.command) if self.command else ""


async def run_command(
    argv: list[str],
    cwd: str,
    timeout: float | None = None
) -> StepOutcome:
    """Run a command to completion and capture its output.

    Args:
        argv: Program and arguments
        cwd: Working directory for the process
        timeout: Seconds to wait before killing the process (None waits forever)

    Returns:
        StepOutcome describing the run. A process that cannot be started
        (missing directory, missing executable) or that exceeds the deadline
        is reported as a failed outcome with no exit code.
    """
    command = list(argv)
    logger.debug(f"Running {shlex.join(command)} in {cwd}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.debug(f"Could not start {command[0]}: {e}")
        return StepOutcome(command=command, succeeded=False, error=str(e))

    try:
        stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning(f"Command timed out after {timeout}s: {shlex.join(command)}")
        return StepOutcome(
            command=command,
            succeeded=False,
            error=f"Command timed out after {timeout:g}s: {shlex.join(command)}",
            timed_out=True,
        )

    stdout = _decode(stdout_b)
    stderr = _decode(stderr_b)

    if proc.returncode != 0:
        return StepOutcome(
            command=command,
            succeeded=False,
            stdout=stdout,
            stderr=stderr,
            error=f"Command failed: {shlex.join(command)}\n{stderr}".rstrip("\n"),
            exit_code=proc.returncode,
        )

    return StepOutcome(
        command=command,
        succeeded=True,
        stdout=stdout,
        stderr=stderr,
        exit_code=proc.returncode,
    )


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")
