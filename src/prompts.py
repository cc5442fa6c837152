"""Interactive collection of the answers that shape a bootstrap run.

``resolve_project_config`` turns command-line arguments plus answers from a
``PromptProvider`` into an immutable :class:`~src.config.ProjectConfig`.
The terminal is only touched through the provider, so the resolver can be
driven by scripted answers.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Protocol, Sequence

from rich.prompt import Prompt

from src.config import DatabaseConfig, PackageManager, ProjectConfig
from src.utils import console, print_warning

PACKAGE_MANAGER_CHOICES: list[str] = [PackageManager.PNPM.value, PackageManager.NPM.value]

YES_ANSWERS = frozenset({"y", "yes"})
NO_ANSWERS = frozenset({"", "n", "no"})

# (field, question, default) in the order they are asked.
DATABASE_QUESTIONS: list[tuple[str, str, str]] = [
    ("host", "Database host?", "localhost"),
    ("port", "Database port?", "5432"),
    ("user", "Database user?", "postgres"),
    ("password", "Database password?", "postgres"),
    ("name", "Database name?", "postgres"),
]


class ConfigError(Exception):
    """Raised when required input is missing; nothing has been changed yet."""


class PromptProvider(Protocol):
    """Source of answers to interactive questions."""

    def ask(self, question: str) -> str:
        """Ask a free-text question and return the raw answer."""
        ...

    def choose(self, question: str, choices: list[str], default: str) -> str:
        """Ask the user to pick one of *choices*."""
        ...


class RichPromptProvider:
    """Asks questions on the terminal using ``rich.prompt``."""

    def ask(self, question: str) -> str:
        return Prompt.ask(question, default="", show_default=False, console=console)

    def choose(self, question: str, choices: list[str], default: str) -> str:
        return Prompt.ask(question, choices=choices, default=default, console=console)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def build_arg_parser() -> argparse.ArgumentParser:
    # No -h/--help: every argument that does not start with "--" is a
    # candidate project name, so "-h" would be taken as one.
    parser = argparse.ArgumentParser(
        prog="create-better-next",
        description="Create a Next.js app with Better Auth and Drizzle ORM wired in",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--pnpm", action="store_true", help="Use pnpm")
    parser.add_argument("--npm", action="store_true", help="Use npm")
    return parser


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse *argv*, ignoring any flag the tool does not know about.

    The project name is the first argument that does not start with
    ``--``.  Single-dash arguments such as ``-app`` therefore count as a
    name, not a flag.
    """
    argv = list(argv)
    args, _unknown = build_arg_parser().parse_known_args(argv)
    args.project_name = next((arg for arg in argv if not arg.startswith("--")), None)
    return args


# ---------------------------------------------------------------------------
# Individual questions
# ---------------------------------------------------------------------------


def ask_project_name(prompts: PromptProvider) -> str:
    name = prompts.ask("What is your project named?").strip()
    if not name:
        raise ConfigError("Please provide a project name.")
    return name


def ask_has_database(prompts: PromptProvider) -> bool:
    """Ask whether PostgreSQL is available locally.

    ``y``/``yes`` mean yes; ``n``/``no`` or an empty answer mean no.  Anything
    else is rejected and the question is asked again.
    """
    while True:
        answer = prompts.ask("Do you have PostgreSQL installed locally? (y/n)").strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print_warning(f"Please answer 'y' or 'n' (got {answer!r}).")


def ask_database_config(prompts: PromptProvider) -> DatabaseConfig:
    values: dict[str, str] = {}
    for field_name, question, default in DATABASE_QUESTIONS:
        answer = prompts.ask(f"{question} (default: {default})")
        values[field_name] = answer or default
    return DatabaseConfig(**values)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def resolve_project_config(
    argv: Sequence[str],
    prompts: PromptProvider,
    cwd: str | Path | None = None,
) -> ProjectConfig:
    """Collect every answer needed for a run.

    Args:
        argv: Command-line arguments (without the program name).
        prompts: Where interactive answers come from.
        cwd: Directory the project is resolved against.  Defaults to the
            current working directory.

    Returns:
        The frozen configuration for this run.

    Raises:
        ConfigError: If no project name was given.
    """
    args = parse_args(argv)

    # A blank name on the command line counts as no name at all.
    project_name = (args.project_name or "").strip() or ask_project_name(prompts)

    if args.pnpm:
        package_manager = PackageManager.PNPM
    elif args.npm:
        package_manager = PackageManager.NPM
    else:
        choice = prompts.choose(
            "Which package manager would you like to use?",
            PACKAGE_MANAGER_CHOICES,
            PACKAGE_MANAGER_CHOICES[0],
        )
        package_manager = PackageManager(choice)

    database = ask_database_config(prompts) if ask_has_database(prompts) else None

    base_dir = Path(cwd) if cwd is not None else Path.cwd()
    return ProjectConfig.create(project_name, package_manager, base_dir, database)
