"""Unit tests for the subprocess command runner (create_npl.runner).

Tests run the current Python interpreter as the child process so they do not
depend on npm being installed.
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from create_npl.errors import CommandFailure, LaunchFailure
from create_npl.runner import SubprocessRunner

pytestmark = pytest.mark.unit


class TestSubprocessRunner:
    async def test_zero_exit_succeeds(self, tmp_path: Path):
        await SubprocessRunner().run(sys.executable, ["-c", "pass"], tmp_path)

    async def test_runs_in_cwd(self, tmp_path: Path):
        script = "import pathlib; pathlib.Path('marker.txt').write_text('ok')"
        await SubprocessRunner().run(sys.executable, ["-c", script], tmp_path)
        assert (tmp_path / "marker.txt").read_text() == "ok"

    async def test_non_zero_exit(self, tmp_path: Path):
        with pytest.raises(CommandFailure) as excinfo:
            await SubprocessRunner().run(sys.executable, ["-c", "import sys; sys.exit(3)"], tmp_path)

        assert excinfo.value.exit_code == 3
        assert excinfo.value.command == sys.executable
        assert excinfo.value.args_list == ["-c", "import sys; sys.exit(3)"]

    async def test_missing_executable(self, tmp_path: Path):
        with pytest.raises(LaunchFailure) as excinfo:
            await SubprocessRunner().run("nonexistent-binary-12345-xyz", [], tmp_path)
        assert excinfo.value.command == "nonexistent-binary-12345-xyz"

    async def test_streams_are_inherited(self, tmp_path: Path):
        process = AsyncMock()
        process.wait = AsyncMock(return_value=0)

        with patch("asyncio.create_subprocess_exec", return_value=process) as create:
            await SubprocessRunner().run("npm", ["install"], tmp_path)

        kwargs = create.call_args.kwargs
        assert kwargs["stdout"] is None
        assert kwargs["stderr"] is None
        assert kwargs["stdin"] is None
        assert kwargs["cwd"] == str(tmp_path)
        assert create.call_args.args[1:] == ("install",)
