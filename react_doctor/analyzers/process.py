"""Async subprocess runner and bounded retry wrapper for external analyzers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TypeVar

from react_doctor.constants import SUBPROCESS_TIMEOUT_SECONDS

logger = logging.getLogger("react_doctor.analyzers.process")

T = TypeVar("T")


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    async def __call__(
        self, args: list[str], cwd: Path, env: Mapping[str, str] | None = None
    ) -> CommandResult: ...


async def run_command(
    args: list[str],
    cwd: Path,
    timeout: float = SUBPROCESS_TIMEOUT_SECONDS,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Spawn ``args`` in ``cwd`` and wait for it; never goes through a shell.

    ``env`` replaces the inherited environment when given.

    Raises:
        OSError: the executable could not be launched.
        TimeoutError: the process outlived ``timeout`` and was killed.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=str(cwd),
        env=dict(env) if env is not None else None,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise TimeoutError(f"{args[0]} timed out after {timeout:.0f}s") from None
    return CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    backoff: float,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` up to ``attempts`` times.

    Waits ``backoff * attempt`` seconds between tries and re-raises the last
    failure once the ceiling is reached.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            if attempt == attempts:
                raise
            logger.debug("Retry %d/%d for %s (%s)", attempt, attempts - 1, label, e)
            await sleep(backoff * attempt)
    raise AssertionError("unreachable")
