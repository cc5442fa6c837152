"""create-better-next setup pipeline.

Bootstraps a Next.js application with Better Auth and Drizzle ORM:

    ScaffoldingBase            -- create-next-app
    InitializingUIToolkit      -- shadcn/ui init
    InstallingDependencies     -- auth, ORM, driver, env loader
    InstallingDevDependencies  -- migration CLI, script runner, types
    WritingEnvFile             -- .env with a fresh secret
    WritingAuthFiles           -- auth config, client, API route
    WritingDatabaseFiles       -- schema, connection, drizzle config
    GeneratingAuthSchema       -- Better Auth CLI (only with a database)
    CleaningDefaultAssets      -- empty public/
    ReplacingLandingPage       -- minimal app/page.tsx
    FinalizingPackageManager   -- pnpm approve-builds + install (pnpm only)

The run is planned up front as a list of steps (``plan_steps``) and then
executed strictly in order.  The first failing step aborts the run; nothing
is retried or rolled back.

Usage::

    python -m src.pipeline my-app --pnpm
    python -m src.pipeline .
"""

from __future__ import annotations

import asyncio
import shlex
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence, Union

from rich.markup import escape
from rich.panel import Panel

from src.config import BootstrapSettings, PackageManager, ProjectConfig
from src.prompts import ConfigError, RichPromptProvider, resolve_project_config
from src.scaffolder.cleanup import clean_directory
from src.scaffolder.env_gen import build_env_content
from src.scaffolder.templates import (
    AUTH_TEMPLATES,
    DATABASE_TEMPLATES,
    TemplateRenderer,
    get_template,
)
from src.utils import (
    ProcessError,
    console,
    format_duration,
    print_error,
    print_info,
    print_phase_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
    write_file,
)

# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


class SetupPhase(str, Enum):
    """States of a bootstrap run, in execution order."""

    RESOLVING_CONFIG = "resolving_config"
    SCAFFOLDING_BASE = "scaffolding_base"
    INITIALIZING_UI_TOOLKIT = "initializing_ui_toolkit"
    INSTALLING_DEPENDENCIES = "installing_dependencies"
    INSTALLING_DEV_DEPENDENCIES = "installing_dev_dependencies"
    WRITING_ENV_FILE = "writing_env_file"
    WRITING_AUTH_FILES = "writing_auth_files"
    WRITING_DATABASE_FILES = "writing_database_files"
    GENERATING_AUTH_SCHEMA = "generating_auth_schema"
    SKIPPING_AUTH_SCHEMA = "skipping_auth_schema"
    CLEANING_DEFAULT_ASSETS = "cleaning_default_assets"
    REPLACING_LANDING_PAGE = "replacing_landing_page"
    FINALIZING_PACKAGE_MANAGER = "finalizing_package_manager"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def description(self) -> str:
        return PHASE_DESCRIPTIONS[self]


PHASE_DESCRIPTIONS: dict[SetupPhase, str] = {
    SetupPhase.RESOLVING_CONFIG: "Collecting project details",
    SetupPhase.SCAFFOLDING_BASE: "Creating a new Next.js app",
    SetupPhase.INITIALIZING_UI_TOOLKIT: "Initializing shadcn/ui",
    SetupPhase.INSTALLING_DEPENDENCIES: "Installing additional dependencies",
    SetupPhase.INSTALLING_DEV_DEPENDENCIES: "Installing additional dev dependencies",
    SetupPhase.WRITING_ENV_FILE: "Creating .env file",
    SetupPhase.WRITING_AUTH_FILES: "Creating auth files",
    SetupPhase.WRITING_DATABASE_FILES: "Creating database files",
    SetupPhase.GENERATING_AUTH_SCHEMA: "Generating auth configuration",
    SetupPhase.SKIPPING_AUTH_SCHEMA: "Skipping auth configuration",
    SetupPhase.CLEANING_DEFAULT_ASSETS: "Cleaning up project",
    SetupPhase.REPLACING_LANDING_PAGE: "Replacing landing page",
    SetupPhase.FINALIZING_PACKAGE_MANAGER: "Finalizing setup for pnpm",
    SetupPhase.COMPLETE: "Project setup complete",
    SetupPhase.FAILED: "Project setup failed",
}


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunCommand:
    """Run a shell command in ``cwd``."""

    phase: SetupPhase
    command: str
    cwd: Path


@dataclass(frozen=True)
class WriteTemplate:
    """Render a template from ``TEMPLATE_SET`` into the project."""

    phase: SetupPhase
    template: str
    project_root: Path

    @property
    def destination(self) -> Path:
        return self.project_root / get_template(self.template).destination


@dataclass(frozen=True)
class WriteContent:
    """Write pre-rendered content to ``destination``."""

    phase: SetupPhase
    destination: Path
    content: str = field(repr=False)


@dataclass(frozen=True)
class CleanDirectory:
    """Empty ``directory``, keeping the names in ``keep``."""

    phase: SetupPhase
    directory: Path
    keep: tuple[str, ...] = (".gitkeep",)


@dataclass(frozen=True)
class Notice:
    """Tell the user something without changing anything."""

    phase: SetupPhase
    message: str


PipelineStep = Union[RunCommand, WriteTemplate, WriteContent, CleanDirectory, Notice]


# ---------------------------------------------------------------------------
# Exceptions & results
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Raised when a step fails; names the phase it failed in."""

    def __init__(self, phase: SetupPhase, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"{phase.description} failed: {cause}")


@dataclass
class PipelineResult:
    """What happened during a run."""

    success: bool = False
    phases_completed: list[SetupPhase] = field(default_factory=list)
    steps_run: list[PipelineStep] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failed_phase: SetupPhase | None = None
    error: str | None = None
    duration_seconds: float = 0.0


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


class CommandExecutor(Protocol):
    """Runs external commands for the pipeline."""

    async def run(self, command: str, cwd: Path) -> None:
        ...


class ShellExecutor:
    """Runs commands through the shell with the terminal attached."""

    async def run(self, command: str, cwd: Path) -> None:
        await run_command(command, cwd=cwd)


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def auth_schema_command(config: ProjectConfig, settings: BootstrapSettings, confirm: bool = True) -> str:
    """Better Auth CLI invocation that writes the auth tables schema."""
    flags = "-y " if confirm else ""
    return f"{config.runner} @better-auth/cli generate {flags}--output {settings.auth_schema_output}"


def plan_steps(
    config: ProjectConfig,
    settings: BootstrapSettings | None = None,
    renderer: TemplateRenderer | None = None,
) -> list[PipelineStep]:
    """Build the ordered step list for one run.

    Every path is derived from ``config.project_path`` / ``config.base_dir``;
    nothing is resolved again later.
    """
    settings = settings or BootstrapSettings()
    renderer = renderer or TemplateRenderer()
    root = config.project_path
    pm = config.package_manager.value
    runner = config.runner
    verb = config.install_verb

    steps: list[PipelineStep] = [
        RunCommand(
            SetupPhase.SCAFFOLDING_BASE,
            f"{runner} create-next-app@{settings.next_version} {shlex.quote(config.scaffold_target)} --yes",
            config.base_dir,
        ),
        RunCommand(
            SetupPhase.INITIALIZING_UI_TOOLKIT,
            f"{runner} shadcn@latest init -y -b {settings.ui_base_color}",
            root,
        ),
        RunCommand(
            SetupPhase.INSTALLING_DEPENDENCIES,
            f"{pm} {verb} {' '.join(settings.dependencies)}",
            root,
        ),
        RunCommand(
            SetupPhase.INSTALLING_DEV_DEPENDENCIES,
            f"{pm} {verb} -D {' '.join(settings.dev_dependencies)}",
            root,
        ),
        WriteContent(
            SetupPhase.WRITING_ENV_FILE,
            root / get_template("env").destination,
            build_env_content(config.database, settings.app_url, renderer),
        ),
    ]
    steps += [WriteTemplate(SetupPhase.WRITING_AUTH_FILES, name, root) for name in AUTH_TEMPLATES]
    steps += [WriteTemplate(SetupPhase.WRITING_DATABASE_FILES, name, root) for name in DATABASE_TEMPLATES]

    if config.has_database:
        steps.append(
            RunCommand(SetupPhase.GENERATING_AUTH_SCHEMA, auth_schema_command(config, settings), root)
        )
    else:
        steps.append(
            Notice(
                SetupPhase.SKIPPING_AUTH_SCHEMA,
                "Skipping generation of auth configuration. You can run it later with "
                f"`{auth_schema_command(config, settings, confirm=False)}`",
            )
        )

    steps += [
        CleanDirectory(
            SetupPhase.CLEANING_DEFAULT_ASSETS,
            root / settings.public_dir,
            tuple(settings.public_keep),
        ),
        WriteTemplate(SetupPhase.REPLACING_LANDING_PAGE, "landing-page", root),
    ]

    if config.package_manager is PackageManager.PNPM:
        steps += [
            RunCommand(SetupPhase.FINALIZING_PACKAGE_MANAGER, "pnpm approve-builds", root),
            RunCommand(SetupPhase.FINALIZING_PACKAGE_MANAGER, "pnpm install", root),
        ]

    return steps


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class SetupPipeline:
    """Executes the planned steps for a single project.

    Attributes:
        config: The resolved project configuration.
        settings: Tool tunables (versions, dependency lists).
        executor: Runs external commands.
        state: The phase currently executing, ``COMPLETE`` or ``FAILED``.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: BootstrapSettings | None = None,
        executor: CommandExecutor | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or BootstrapSettings()
        self.executor = executor or ShellExecutor()
        self.renderer = renderer or TemplateRenderer()
        self.state = SetupPhase.RESOLVING_CONFIG

    async def run(self) -> PipelineResult:
        """Run every step in order and report the outcome.

        Returns:
            A ``PipelineResult``; ``success`` is ``False`` if any step failed,
            in which case no later step was started.
        """
        started = time.monotonic()
        result = PipelineResult()
        steps = plan_steps(self.config, self.settings, self.renderer)

        console.print(
            Panel(
                f"[bold bright_cyan]create-better-next[/bold bright_cyan]\n"
                f"Project         : {escape(self.config.project_name)}\n"
                f"Location        : {escape(str(self.config.project_path))}\n"
                f"Package manager : {self.config.package_manager.value}",
                title="[bold]Setup Start[/bold]",
                border_style="bright_cyan",
            )
        )

        try:
            for step in steps:
                if step.phase is not self.state:
                    if self.state is not SetupPhase.RESOLVING_CONFIG:
                        result.phases_completed.append(self.state)
                    self.state = step.phase
                    print_phase_header(step.phase.description)
                await self._execute(step, result)
                result.steps_run.append(step)
            result.phases_completed.append(self.state)
        except (ProcessError, OSError) as exc:
            error = PipelineError(self.state, exc)
            result.failed_phase = self.state
            result.error = str(error)
            result.duration_seconds = time.monotonic() - started
            self.state = SetupPhase.FAILED
            print_error(f"An error occurred: {error}")
            return result

        self.state = SetupPhase.COMPLETE
        result.success = True
        result.duration_seconds = time.monotonic() - started
        self._print_final_summary(result)
        return result

    async def _execute(self, step: PipelineStep, result: PipelineResult) -> None:
        if isinstance(step, RunCommand):
            await self.executor.run(step.command, step.cwd)
        elif isinstance(step, WriteTemplate):
            await self.renderer.render_to_file(
                step.template, step.project_root, {"app_url": self.settings.app_url}
            )
        elif isinstance(step, WriteContent):
            await asyncio.to_thread(write_file, step.destination, step.content)
        elif isinstance(step, CleanDirectory):
            cleanup = await asyncio.to_thread(clean_directory, step.directory, step.keep)
            if cleanup.warning:
                print_warning(cleanup.warning)
                result.warnings.append(cleanup.warning)
            elif cleanup.removed:
                print_info(f"Removed default files from {step.directory.name} directory.")
        elif isinstance(step, Notice):
            print_info(step.message)
            result.notices.append(step.message)
        else:
            raise TypeError(f"Unknown pipeline step: {step!r}")

    def _print_final_summary(self, result: PipelineResult) -> None:
        pm = self.config.package_manager.value
        next_step = f"{pm} run dev"
        if not self.config.uses_current_dir:
            next_step = f"cd {shlex.quote(self.config.project_name)} && {next_step}"

        print_summary_table(
            {
                "Project": self.config.project_name,
                "Location": str(self.config.project_path),
                "Package manager": pm,
                "Database": (
                    "configured" if self.config.has_database else "local default (schema not generated)"
                ),
                "Duration": format_duration(result.duration_seconds),
                "Next step": next_step,
            },
            title="Setup Results",
        )
        print_success("Project setup complete!")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``create-better-next`` / ``python -m src.pipeline``."""
    args = list(sys.argv[1:] if argv is None else argv)

    try:
        config = resolve_project_config(args, RichPromptProvider())
    except ConfigError as exc:
        print_error(str(exc))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print_error("Aborted.")
        sys.exit(1)

    pipeline = SetupPipeline(config, BootstrapSettings.from_env())
    try:
        result = asyncio.run(pipeline.run())
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(1)

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
