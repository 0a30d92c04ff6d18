"""Shared pytest fixtures for the create-npl test suite.

Provides reusable fixtures for:
- A small template tree with the three templated files
- A canned OpenAPI document served through ``httpx.MockTransport``
- A recording command runner that never spawns processes
- Scripted confirm functions standing in for the interactive prompt
- Settings files with placeholder or real values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Sequence

import httpx
import pytest

from create_npl.config import Config
from create_npl.errors import CommandFailure
from create_npl.fetcher import OpenApiFetcher


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------

TEMPLATE_FILES: dict[str, str] = {
    "package.json": '{\n  "name": "{{name}}",\n  "scripts": {"generate-client": "openapi-ts -i openapi/{{package}}-openapi.json"}\n}\n',
    ".env": "VITE_NPL_TENANT={{tenant}}\nVITE_NPL_APP={{app}}\nVITE_API_BASE_URL=https://engine-{{tenant}}-{{app}}.{{domain}}\n",
    "index.html": "<html><head><title>{{name}}</title></head><body data-package=\"{{package}}\"></body></html>\n",
    "src/main.tsx": "const style = {{ color: 'red' }}\n",
    "src/services/BaseService.ts": "export class BaseService {}\n",
}


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A minimal create-mode template tree (``app/``) under a templates root."""
    root = tmp_path / "templates"
    app = root / "app"
    for rel, content in TEMPLATE_FILES.items():
        path = app / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    setup = root / "setup"
    for rel in ("package.json", "index.html", "src/main.ts"):
        path = setup / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{{name}}\n", encoding="utf-8")
    return root


@pytest.fixture
def config(template_dir: Path) -> Config:
    """Config pointing at the temporary template tree."""
    return Config(template_dir=template_dir, cloud_domain="example.cloud")


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Directory under which projects are created."""
    path = tmp_path / "work"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# OpenAPI document / fetcher
# ---------------------------------------------------------------------------

@pytest.fixture
def openapi_document() -> dict[str, Any]:
    return {
        "openapi": "3.0.1",
        "info": {"title": "iou", "version": "1.0"},
        "paths": {"/npl/iou/Iou/": {"get": {"operationId": "getIouList"}}},
    }


class RecordingFetcher(OpenApiFetcher):
    """``OpenApiFetcher`` backed by ``httpx.MockTransport`` that records URLs."""

    def __init__(self, document: Any = None, status_code: int = 200) -> None:
        self.requested: list[str] = []
        self.document = document
        self.status_code = status_code
        super().__init__(transport=httpx.MockTransport(self._handle))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(str(request.url))
        if self.status_code >= 400:
            return httpx.Response(self.status_code, text="nope")
        return httpx.Response(self.status_code, json=self.document)


@pytest.fixture
def make_fetcher(openapi_document: dict[str, Any]) -> Callable[..., RecordingFetcher]:
    """Factory for recording fetchers; defaults to serving ``openapi_document``."""

    def factory(status_code: int = 200, document: Any = None) -> RecordingFetcher:
        return RecordingFetcher(document if document is not None else openapi_document, status_code)

    return factory


# ---------------------------------------------------------------------------
# Command runner
# ---------------------------------------------------------------------------

class RecordingRunner:
    """Command runner that records invocations instead of spawning processes."""

    def __init__(self, fail_on: str | None = None, exit_code: int = 1) -> None:
        self.calls: list[tuple[str, list[str], Path]] = []
        self.fail_on = fail_on
        self.exit_code = exit_code

    async def run(self, command: str, args: Sequence[str], cwd: str | Path) -> None:
        self.calls.append((command, list(args), Path(cwd)))
        if self.fail_on is not None and self.fail_on in " ".join([command, *args]):
            raise CommandFailure(command, args, self.exit_code)

    @property
    def command_lines(self) -> list[str]:
        return [" ".join([command, *args]) for command, args, _ in self.calls]


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def make_runner() -> Callable[..., RecordingRunner]:
    """Factory for runners that fail on a matching command line."""
    return RecordingRunner


# ---------------------------------------------------------------------------
# Confirm functions
# ---------------------------------------------------------------------------

class ScriptedConfirm:
    """Answers prompts from a fixed list and records the questions asked."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[tuple[str, bool]] = []

    def __call__(self, question: str, default: bool) -> bool:
        self.questions.append((question, default))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {question}")
        return self.answers.pop(0)


@pytest.fixture
def scripted_confirm() -> Callable[..., ScriptedConfirm]:
    return ScriptedConfirm


# ---------------------------------------------------------------------------
# Settings files
# ---------------------------------------------------------------------------

REAL_SETTINGS = """export const NPL_TOKEN_ENDPOINT = "https://keycloak-acme-iou.example.cloud/realms/iou/protocol/openid-connect/token";
export const NPL_CLIENT_ID = "iou";
export const NPL_APPLICATION_URL = "https://engine-acme-iou.example.cloud";
export const NPL_SWAGGER_URL = "https://engine-acme-iou.example.cloud/npl/iou/-/openapi.json";
"""


@pytest.fixture
def real_settings(workdir: Path) -> Path:
    path = workdir / "frontend-config.ts"
    path.write_text(REAL_SETTINGS, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Map every file under *root* to its bytes, keyed by relative path."""
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, bytes]]:
    return snapshot_tree
