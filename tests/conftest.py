"""Shared pytest fixtures for the create-better-next test suite.

Provides reusable fixtures for:
- Scripted answers in place of the terminal prompt
- A command executor that records invocations instead of spawning processes
- Ready-made project configurations
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.config import BootstrapSettings, DatabaseConfig, PackageManager, ProjectConfig


# ---------------------------------------------------------------------------
# Prompt provider
# ---------------------------------------------------------------------------


class ScriptedPrompts:
    """PromptProvider that replays canned answers in order.

    Every question asked is recorded in ``questions``.  Running out of
    answers fails the test instead of blocking on stdin.
    """

    def __init__(self, answers: list[str] | None = None, choice: str = "pnpm") -> None:
        self.answers = list(answers or [])
        self.choice = choice
        self.questions: list[str] = []
        self.choices_offered: list[list[str]] = []

    def ask(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            raise AssertionError(f"Unexpected question: {question}")
        return self.answers.pop(0)

    def choose(self, question: str, choices: list[str], default: str) -> str:
        self.questions.append(question)
        self.choices_offered.append(list(choices))
        return self.choice


@pytest.fixture
def scripted_prompts():
    """Factory for ``ScriptedPrompts``."""
    return ScriptedPrompts


# ---------------------------------------------------------------------------
# Command executor
# ---------------------------------------------------------------------------


class RecordingExecutor:
    """CommandExecutor that records ``(command, cwd)`` pairs.

    Commands containing ``fail_on`` raise ``ProcessError`` with exit code 1,
    after being recorded.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, Path]] = []

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]

    async def run(self, command: str, cwd: Path) -> None:
        from src.utils import ProcessError

        self.calls.append((command, cwd))
        if self.fail_on is not None and self.fail_on in command:
            raise ProcessError(command, exit_code=1)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def failing_executor():
    """Factory: ``failing_executor("npm install")`` fails on that command."""
    return RecordingExecutor


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> BootstrapSettings:
    return BootstrapSettings()


@pytest.fixture
def npm_config(tmp_path: Path) -> ProjectConfig:
    """npm project in a subdirectory, no database."""
    return ProjectConfig.create("my-app", PackageManager.NPM, tmp_path)


@pytest.fixture
def pnpm_db_config(tmp_path: Path) -> ProjectConfig:
    """pnpm project in a subdirectory with a local database."""
    return ProjectConfig.create(
        "my-app",
        PackageManager.PNPM,
        tmp_path,
        DatabaseConfig(password="s3cret"),
    )


@pytest.fixture
def current_dir_config(tmp_path: Path) -> ProjectConfig:
    """npm project created in the current directory, no database."""
    return ProjectConfig.create(".", PackageManager.NPM, tmp_path)
