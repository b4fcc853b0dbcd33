"""Base class for adapters that read the operating system's package database."""

from __future__ import annotations

import asyncio
import logging
from abc import abstractmethod
from dataclasses import dataclass
from pathlib import Path

from breadscan.core.exceptions import SourceError
from breadscan.resolution.base import AbstractEcosystem, ScanResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Exit status and decoded output of a finished command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(*args: str, cwd: Path | str | None = None) -> CommandResult:
    """
    Run a command to completion without a shell.

    Raises:
        OSError: If the executable cannot be started.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    return CommandResult(
        args=tuple(args),
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


class SystemEcosystem(AbstractEcosystem):
    """
    Adapter whose references are the packages installed on this machine.

    There is no scan root: :meth:`scan` ignores its argument. Failing to list
    the installed packages at all is fatal for the source, while failing to
    look up one package only drops that package.
    """

    async def run(self, *args: str, cwd: Path | str | None = None) -> CommandResult:
        """Run a package manager command."""
        logger.debug(f"Running {' '.join(args)}")
        return await run_command(*args, cwd=cwd)

    async def list_output(self, *args: str) -> str:
        """Stdout of a listing command; any failure is a SourceError."""
        try:
            result = await self.run(*args)
        except OSError as e:
            raise SourceError(f"Could not run {args[0]}: {e}", {"command": list(args)}) from e
        if not result.ok:
            raise SourceError(
                f"{' '.join(args)} exited with status {result.returncode}: {result.stderr.strip()}",
                {"command": list(args)},
            )
        return result.stdout

    async def scan(self, root: Path | None = None) -> ScanResult:
        return await self.list_packages()

    @abstractmethod
    async def list_packages(self) -> ScanResult:
        """One reference per explicitly installed package."""
        ...
