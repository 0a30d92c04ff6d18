"""Failure taxonomy for a scaffolding run.

Every error raised by a scaffolding step derives from ``ScaffoldError`` and
carries the ``step`` label shown to the operator.  All of them are fatal: the
orchestrator turns the first one it sees into the ``ABORTED`` state.
"""

from __future__ import annotations

from typing import Sequence


class ScaffoldError(Exception):
    """Base class for every fatal scaffolding failure."""

    step: str = "scaffold"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        if step is not None:
            self.step = step
        self.message = message
        super().__init__(message)


class ValidationFailure(ScaffoldError):
    """A required input is missing or invalid.  Raised before any filesystem change."""

    step = "validate"


class DirectoryConflict(ScaffoldError):
    """The target directory exists, is not empty, and overwrite was declined."""

    step = "prepare directory"

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(
            f"Directory {path} already exists and is not empty. Use --force to overwrite."
        )


class IOFailure(ScaffoldError):
    """A copy, read or write on the local filesystem failed."""

    step = "filesystem"


class FetchFailure(ScaffoldError):
    """The interface document could not be downloaded."""

    step = "fetch OpenAPI document"

    def __init__(self, url: str, cause: object) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to download {url}: {cause}")


class CommandFailure(ScaffoldError):
    """A child process exited with a non-zero status."""

    step = "run command"

    def __init__(self, command: str, args: Sequence[str], exit_code: int) -> None:
        self.command = command
        self.args_list = list(args)
        self.exit_code = exit_code
        rendered = " ".join([command, *self.args_list])
        super().__init__(f"Command '{rendered}' failed with exit code {exit_code}")


class LaunchFailure(ScaffoldError):
    """A child process could not be started at all."""

    step = "run command"

    def __init__(self, command: str, cause: object) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Could not launch '{command}': {cause}")
