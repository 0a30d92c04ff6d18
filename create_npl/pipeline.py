"""create-npl scaffolding orchestrator.

Turns a bare directory into a working NPL frontend project through a fixed,
forward-only sequence of states:

INIT -> CONFIG_RESOLVED -> DIRECTORY_PREPARED -> MATERIALIZED
     -> DOCUMENT_FETCHED -> DEPENDENCIES_INSTALLED -> CLIENT_GENERATED
     -> BUILT -> DONE

Each non-terminal state has one transition.  A transition either names the
next state or reports the ``ScaffoldError`` that moves the run to
``ABORTED``.  Nothing is rolled back on abort: files written by earlier
steps stay on disk, and a re-run starts again from ``INIT``.

Two modes share the machine:

* ``create`` -- project named on the command line, identifiers substituted
  into the template, OpenAPI document fetched from the engine URL derived
  from tenant/app/package.
* ``setup`` -- identifiers come from a ``frontend-config.ts`` settings file,
  prompts can be answered automatically, and the project is built at the end.
"""

from __future__ import annotations

import os
import shutil
import time
import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from rich.panel import Panel

from .config import Config
from .errors import (
    CommandFailure,
    DirectoryConflict,
    IOFailure,
    LaunchFailure,
    ScaffoldError,
    ValidationFailure,
)
from .fetcher import OpenApiFetcher, openapi_path, openapi_url
from .prompts import DecisionGate, DecisionOutcome, GateName
from .runner import CommandRunner, SubprocessRunner
from .scaffolder import materialize, substitute
from .settings_file import NplSettings, write_settings_template
from .utils import (
    console,
    format_duration,
    is_non_empty_dir,
    print_error,
    print_info,
    print_step_header,
    print_success,
    print_warning,
)

REQUIRED_IDENTIFIERS: tuple[str, ...] = ("name", "tenant", "app", "package")

CREATE_TEMPLATED_FILES: tuple[str, ...] = ("package.json", ".env", "index.html")
SETUP_TEMPLATED_FILES: tuple[str, ...] = ("package.json", "index.html")

_PATH_SEPARATORS = {sep for sep in ("/", "\\", os.sep, os.altsep) if sep}


def _has_separator(name: str) -> bool:
    return any(sep in name for sep in _PATH_SEPARATORS)


# ---------------------------------------------------------------------------
# States and requests
# ---------------------------------------------------------------------------


class ScaffoldState(str, Enum):
    INIT = "init"
    CONFIG_RESOLVED = "config_resolved"
    DIRECTORY_PREPARED = "directory_prepared"
    MATERIALIZED = "materialized"
    DOCUMENT_FETCHED = "document_fetched"
    DEPENDENCIES_INSTALLED = "dependencies_installed"
    CLIENT_GENERATED = "client_generated"
    BUILT = "built"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (ScaffoldState.DONE, ScaffoldState.ABORTED)


class ScaffoldMode(str, Enum):
    CREATE = "create"
    SETUP = "setup"


class ScaffoldRequest(BaseModel):
    """Immutable input bundle for a single run."""

    model_config = ConfigDict(frozen=True)

    mode: ScaffoldMode = ScaffoldMode.CREATE
    target_path: Path
    template_source_path: Path
    substitutions: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    templated_files: tuple[str, ...] = CREATE_TEMPLATED_FILES
    force_overwrite: bool = False
    auto_mode: bool = False
    build: bool = False
    settings_path: Path | None = None

    @field_validator("substitutions")
    @classmethod
    def _freeze_substitutions(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @classmethod
    def for_create(
        cls,
        *,
        name: str | None,
        tenant: str | None,
        app: str | None,
        package: str | None,
        config: Config,
        parent_dir: str | Path | None = None,
        force: bool = False,
        auto: bool = False,
        build: bool = False,
    ) -> "ScaffoldRequest":
        """Build a ``create`` request; the project lives at ``<parent_dir>/<name>``.

        Missing identifiers are kept as empty strings so the orchestrator can
        reject them before touching the filesystem.
        """
        parent = Path(parent_dir or Path.cwd()).resolve()
        return cls(
            mode=ScaffoldMode.CREATE,
            target_path=(parent / (name or "")).resolve(),
            template_source_path=config.create_template_path.resolve(),
            substitutions={
                "name": name or "",
                "tenant": tenant or "",
                "app": app or "",
                "package": package or "",
                "domain": config.cloud_domain,
            },
            templated_files=CREATE_TEMPLATED_FILES,
            force_overwrite=force,
            auto_mode=auto,
            build=build,
        )

    @classmethod
    def for_setup(
        cls,
        *,
        settings_path: str | Path,
        directory: str | Path,
        config: Config,
        force: bool = False,
        auto: bool = False,
    ) -> "ScaffoldRequest":
        """Build a ``setup`` request driven by a settings file."""
        target = Path(directory).resolve()
        return cls(
            mode=ScaffoldMode.SETUP,
            target_path=target,
            template_source_path=config.setup_template_path.resolve(),
            substitutions={"name": target.name},
            templated_files=SETUP_TEMPLATED_FILES,
            force_overwrite=force,
            auto_mode=auto,
            build=True,
            settings_path=Path(settings_path).resolve(),
        )


@dataclass
class StepOutcome:
    """Result of one transition: the next state, or the error that aborted the run."""

    next_state: ScaffoldState
    error: ScaffoldError | None = None

    @property
    def aborted(self) -> bool:
        return self.next_state is ScaffoldState.ABORTED


class ScaffoldResult(BaseModel):
    """Summary of a finished run."""

    state: ScaffoldState
    project_path: Path
    history: list[ScaffoldState] = Field(default_factory=list)
    decisions: list[DecisionOutcome] = Field(default_factory=list)
    document_path: Path | None = None
    error: str | None = None
    failed_step: str | None = None
    duration: str = ""

    @property
    def success(self) -> bool:
        return self.state is ScaffoldState.DONE


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Drives one scaffolding run from ``INIT`` to ``DONE`` or ``ABORTED``.

    The gate, fetcher and runner are injectable so tests can script answers,
    serve canned documents and record commands without spawning processes.
    """

    _TRANSITIONS: dict[ScaffoldState, str] = {
        ScaffoldState.INIT: "_resolve_config",
        ScaffoldState.CONFIG_RESOLVED: "_prepare_directory",
        ScaffoldState.DIRECTORY_PREPARED: "_materialize",
        ScaffoldState.MATERIALIZED: "_fetch_document",
        ScaffoldState.DOCUMENT_FETCHED: "_install_dependencies",
        ScaffoldState.DEPENDENCIES_INSTALLED: "_generate_client",
        ScaffoldState.CLIENT_GENERATED: "_build",
        ScaffoldState.BUILT: "_finish",
    }

    def __init__(
        self,
        request: ScaffoldRequest,
        config: Config | None = None,
        *,
        gate: DecisionGate | None = None,
        fetcher: OpenApiFetcher | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.request = request
        self.config = config or Config()
        self.gate = gate or DecisionGate(request.auto_mode)
        self.fetcher = fetcher or OpenApiFetcher()
        self.runner: CommandRunner = runner or SubprocessRunner()

        self.state = ScaffoldState.INIT
        self.history: list[ScaffoldState] = [ScaffoldState.INIT]
        self.decisions: list[DecisionOutcome] = []
        self.settings: NplSettings | None = None
        self.document_path: Path | None = None
        self.error: ScaffoldError | None = None

    # ------------------------------------------------------------------
    # Driving the machine
    # ------------------------------------------------------------------

    async def advance(self) -> StepOutcome:
        """Apply the transition for the current state and move to its outcome."""
        if self.state.is_terminal:
            raise RuntimeError(f"Scaffold run already finished in state {self.state.value}")

        method = getattr(self, self._TRANSITIONS[self.state])
        try:
            outcome = StepOutcome(await method())
        except ScaffoldError as exc:
            outcome = StepOutcome(ScaffoldState.ABORTED, error=exc)

        self.state = outcome.next_state
        self.history.append(outcome.next_state)
        if outcome.error is not None:
            self.error = outcome.error
        return outcome

    async def run(self) -> ScaffoldResult:
        """Run every transition until ``DONE`` or ``ABORTED``."""
        start = time.monotonic()
        self._print_banner()

        while not self.state.is_terminal:
            try:
                outcome = await self.advance()
            except Exception as exc:
                tb = traceback.format_exc()
                console.print(f"[dim]{tb}[/dim]")
                self.error = ScaffoldError(str(exc) or type(exc).__name__, step=self.state.value)
                self.state = ScaffoldState.ABORTED
                self.history.append(ScaffoldState.ABORTED)
                break
            if outcome.error is not None:
                print_error(f"Failed to {outcome.error.step}: {outcome.error.message}")

        result = ScaffoldResult(
            state=self.state,
            project_path=self.request.target_path,
            history=list(self.history),
            decisions=list(self.decisions),
            document_path=self.document_path,
            error=self.error.message if self.error else None,
            failed_step=self.error.step if self.error else None,
            duration=format_duration(time.monotonic() - start),
        )
        self._print_final_summary(result)
        return result

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _resolve_config(self) -> ScaffoldState:
        """Validate inputs.  No filesystem change happens before this passes."""
        if self.request.mode is ScaffoldMode.SETUP:
            self.settings = self._resolve_settings()
            return ScaffoldState.CONFIG_RESOLVED

        missing = [
            key for key in REQUIRED_IDENTIFIERS
            if not self.request.substitutions.get(key, "").strip()
        ]
        if missing:
            raise ValidationFailure(f"Missing required value(s): {', '.join(missing)}")

        name = self.request.substitutions["name"]
        if name in (".", "..") or Path(name).is_absolute() or _has_separator(name):
            raise ValidationFailure(f"Project name must be a new directory name, got '{name}'")

        print_info(f"Creating new project in {self.request.target_path}")
        return ScaffoldState.CONFIG_RESOLVED

    def _resolve_settings(self) -> NplSettings:
        settings_path = self.request.settings_path
        if settings_path is None:
            raise ValidationFailure("A settings file path is required in setup mode")

        if settings_path.is_file():
            print_success(f"Found settings file at {settings_path}")
            return NplSettings.load(settings_path)

        print_warning(f"No settings file found at {settings_path}")
        outcome = self._decide(
            "createConfig",
            f"Would you like to create a template {settings_path.name}?",
            default=True,
        )
        if not outcome.value:
            raise ValidationFailure(f"{settings_path.name} is required")

        write_settings_template(settings_path)
        print_success(f"Created template settings file at {settings_path}")
        print_warning(f"Please update the values in {settings_path.name} before running the application")
        return NplSettings.load(settings_path)

    async def _prepare_directory(self) -> ScaffoldState:
        target = self.request.target_path
        occupied = target.is_file() or is_non_empty_dir(target)

        if occupied:
            if self.request.force_overwrite:
                print_warning(f"Directory {target} not empty. --force is set, removing...")
            else:
                outcome = self._decide(
                    "overwrite",
                    f"Directory {target} already exists. Overwrite?",
                    default=False,
                    auto_default=self.request.mode is ScaffoldMode.SETUP,
                )
                if not outcome.value:
                    raise DirectoryConflict(target)
            self._remove(target)

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(f"Cannot create {target}: {exc}", step="prepare directory") from exc

        return ScaffoldState.DIRECTORY_PREPARED

    async def _materialize(self) -> ScaffoldState:
        print_step_header("Copying template")
        target = self.request.target_path
        copied = await materialize(self.request.template_source_path, target)
        print_success(f"Copied {len(copied)} file(s) from {self.request.template_source_path}")

        await substitute(
            [target / rel for rel in self.request.templated_files],
            self.request.substitutions,
        )
        print_success(f"Populated {', '.join(self.request.templated_files)}")
        return ScaffoldState.MATERIALIZED

    async def _fetch_document(self) -> ScaffoldState:
        print_step_header("Downloading OpenAPI document")
        url, package = self._document_source()
        if url is None or package is None:
            print_warning("Skipping OpenAPI download (placeholder URLs detected)")
            return ScaffoldState.DOCUMENT_FETCHED

        destination = openapi_path(self.request.target_path, package)
        print_info(f"Downloading OpenAPI spec from {url}")
        self.document_path = await self.fetcher.download(url, destination)
        print_success(f"Saved {destination.relative_to(self.request.target_path)}")
        return ScaffoldState.DOCUMENT_FETCHED

    def _document_source(self) -> tuple[str | None, str | None]:
        """Return ``(url, package)`` of the document to fetch, or ``(None, None)``."""
        if self.request.mode is ScaffoldMode.CREATE:
            subs = self.request.substitutions
            url = openapi_url(subs["tenant"], subs["app"], subs["package"], self.config.cloud_domain)
            return url, subs["package"]

        settings = self.settings
        if settings is None or settings.has_placeholders or not settings.swagger_url:
            return None, None
        return settings.swagger_url, settings.package or "api"

    async def _install_dependencies(self) -> ScaffoldState:
        print_step_header("Installing dependencies")
        await self._run_step("install dependencies", self.config.package_manager, ["install"])
        return ScaffoldState.DEPENDENCIES_INSTALLED

    async def _generate_client(self) -> ScaffoldState:
        print_step_header("Generating API client")
        if self.request.mode is ScaffoldMode.CREATE:
            await self._run_step(
                "generate API client", self.config.package_manager, ["run", "generate-client"]
            )
            return ScaffoldState.CLIENT_GENERATED

        settings = self.settings
        if settings is None or settings.has_placeholders or not settings.swagger_url:
            print_warning("Skipping API generation (placeholder URLs detected)")
            return ScaffoldState.CLIENT_GENERATED

        outcome = self._decide(
            "generateClient", "Would you like to generate the API client now?", default=True
        )
        if not outcome.value:
            print_info("API client generation skipped")
            return ScaffoldState.CLIENT_GENERATED

        source = settings.swagger_url
        if self.document_path is not None:
            source = str(self.document_path.relative_to(self.request.target_path))
        await self._run_step(
            "generate API client",
            self.config.npx,
            [self.config.client_generator, "--input", source, "--output", self.config.client_output],
        )
        return ScaffoldState.CLIENT_GENERATED

    async def _build(self) -> ScaffoldState:
        if not self.request.build:
            return ScaffoldState.BUILT
        print_step_header("Building project")
        await self._run_step("build project", self.config.package_manager, ["run", "build"])
        return ScaffoldState.BUILT

    async def _finish(self) -> ScaffoldState:
        self._print_next_steps()
        return ScaffoldState.DONE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _decide(
        self,
        gate: GateName,
        question: str,
        default: bool,
        *,
        auto_default: bool | None = None,
    ) -> DecisionOutcome:
        outcome = self.gate.decide(gate, question, default, auto_default=auto_default)
        self.decisions.append(outcome)
        return outcome

    async def _run_step(self, step: str, command: str, args: list[str]) -> None:
        try:
            await self.runner.run(command, args, self.request.target_path)
        except (CommandFailure, LaunchFailure) as exc:
            exc.step = step
            raise

    @staticmethod
    def _remove(target: Path) -> None:
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise IOFailure(f"Cannot remove {target}: {exc}", step="prepare directory") from exc

    def _print_banner(self) -> None:
        mode = self.request.mode.value
        lines = [
            f"Mode    : {mode}",
            f"Project : {self.request.target_path}",
        ]
        if self.request.settings_path is not None:
            lines.append(f"Settings: {self.request.settings_path}")
        if self.request.auto_mode:
            lines.append("Auto    : yes")
        console.print(
            Panel(
                "\n".join(lines),
                title="[bold bright_cyan]NPL Frontend Setup[/bold bright_cyan]",
                border_style="bright_cyan",
            )
        )

    def _print_next_steps(self) -> None:
        relative = os.path.relpath(self.request.target_path, Path.cwd())
        steps: list[str] = []
        if self.settings is not None and self.settings.has_placeholders:
            steps.append(f"Update {self.request.settings_path.name} with your actual values")  # type: ignore[union-attr]
            steps.append(f"cd {relative}")
            steps.append(f"{self.config.package_manager} run generate-api")
        else:
            steps.append(f"cd {relative}")
        steps.append(f"{self.config.package_manager} run dev")

        console.print()
        console.print("Next steps:")
        for index, step in enumerate(steps, start=1):
            console.print(f"[cyan]  {index}. {step}[/cyan]")
        if self.request.mode is ScaffoldMode.SETUP:
            console.print(
                f"[dim]\nFor API regeneration: {self.config.package_manager} run generate-api[/dim]"
            )

    def _print_final_summary(self, result: ScaffoldResult) -> None:
        reached = self.history[-2] if result.state is ScaffoldState.ABORTED else result.state
        if result.success:
            border_style = "bold green"
            status_text = "[bold green]PROJECT CREATED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]SETUP ABORTED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration : {result.duration}",
            f"Reached  : {reached.value}",
            f"Project  : {result.project_path}",
        ]
        if result.failed_step:
            detail_lines.append(f"Failed   : {result.failed_step}")

        console.print()
        console.print(Panel("\n".join(detail_lines), border_style=border_style))
