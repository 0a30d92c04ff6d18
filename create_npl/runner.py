"""Child-process execution with the terminal's own streams.

Package managers print progress and sometimes ask questions, so commands run
with stdin/stdout/stderr inherited from the invoking terminal rather than
captured.  Commands run one at a time; each ``run`` call returns only after
the process exits.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Protocol, Sequence

from .errors import CommandFailure, LaunchFailure
from .utils import console


class CommandRunner(Protocol):
    """What the orchestrator needs from a command runner."""

    async def run(self, command: str, args: Sequence[str], cwd: str | Path) -> None:
        ...


class SubprocessRunner:
    """Runs commands as real child processes."""

    async def run(self, command: str, args: Sequence[str], cwd: str | Path) -> None:
        """Run ``command *args`` in *cwd* and wait for it to exit.

        Raises:
            LaunchFailure: If the executable cannot be found or started.
            CommandFailure: If the process exits with a non-zero status.
        """
        console.print(f"[dim]$ {' '.join([command, *args])}[/dim]")

        # Resolve through PATH so Windows .cmd shims (npm.cmd, npx.cmd) work.
        executable = shutil.which(command) or command

        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *args,
                cwd=str(cwd),
                stdin=None,
                stdout=None,
                stderr=None,
            )
        except OSError as exc:
            raise LaunchFailure(command, exc) from exc

        returncode = await process.wait()
        if returncode != 0:
            raise CommandFailure(command, args, returncode)
