"""Source formatting through an external formatter process."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol


class FormatError(RuntimeError):
    """Raised when generated source cannot be formatted."""


class SourceFormatter(Protocol):
    """Formats generated source text for presentation.

    Implementations report every failure as ``FormatError``; callers treat it
    as non-fatal and keep the unformatted source.
    """

    async def format(self, source: str, *, parser: str) -> str:
        """Return ``source`` formatted with the given style parser."""
        ...


@dataclass(frozen=True)
class PrettierFormatter:
    """Format TypeScript through the ``prettier`` command line tool."""

    executable: str = "prettier"
    print_width: int = 80
    tab_width: int = 2

    async def format(self, source: str, *, parser: str = "typescript") -> str:
        """Pipe ``source`` through prettier and return its output.

        Args:
            source (str): Source text to format.
            parser (str): Prettier parser name.

        Returns:
            str: Formatted source text.

        Raises:
            FormatError: If prettier cannot run, exits non-zero or prints
                output that is not UTF-8.
        """
        command = [
            self.executable,
            "--parser",
            parser,
            "--print-width",
            str(self.print_width),
            "--tab-width",
            str(self.tab_width),
        ]
        command_desc = " ".join(command)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise FormatError(f"Failed to execute {command_desc}: {exc}") from exc

        try:
            stdout, stderr = await process.communicate(source.encode("utf-8"))
        except OSError as exc:
            raise FormatError(f"Failed to communicate with {command_desc}: {exc}") from exc
        if process.returncode != 0:
            error_text = stderr.decode("utf-8", errors="replace").strip()
            raise FormatError(f"{command_desc} failed: {error_text or process.returncode}")
        try:
            return stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError(f"{command_desc} produced non UTF-8 output: {exc}") from exc
