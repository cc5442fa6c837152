"""create-better-next configuration.

Typed configuration for the bootstrap pipeline.  ``BootstrapSettings`` holds
the tool's own tunables (tool versions, dependency lists, defaults) and
``ProjectConfig`` is the immutable record describing a single run, built once
by :func:`src.prompts.resolve_project_config` and read by every pipeline step.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CURRENT_DIR_NAMES: frozenset[str] = frozenset({".", "./"})


class PackageManager(str, Enum):
    """Supported Node package managers."""

    PNPM = "pnpm"
    NPM = "npm"

    @property
    def runner(self) -> str:
        """Command used to execute a package without installing it."""
        return "pnpm dlx" if self is PackageManager.PNPM else "npx"

    @property
    def install_verb(self) -> str:
        return "add" if self is PackageManager.PNPM else "install"


class DatabaseConfig(BaseModel):
    """Connection parameters for a local PostgreSQL server."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="localhost")
    port: str = Field(default="5432")
    user: str = Field(default="postgres")
    password: str = Field(default="postgres")
    name: str = Field(default="postgres")


class BootstrapSettings(BaseModel):
    """Tunables for the generated stack.

    The defaults reproduce the stock setup; a handful can be overridden from
    the environment via :meth:`from_env`.
    """

    next_version: str = Field(default="canary", description="create-next-app dist-tag")
    ui_base_color: str = Field(default="neutral", description="shadcn/ui base color preset")
    app_url: str = Field(default="http://localhost:3000")
    dependencies: list[str] = Field(
        default_factory=lambda: ["better-auth", "drizzle-orm", "pg", "dotenv"]
    )
    dev_dependencies: list[str] = Field(
        default_factory=lambda: ["drizzle-kit", "tsx", "@types/pg"]
    )
    auth_schema_output: str = Field(default="./lib/schema-auth.ts")
    public_dir: str = Field(default="public")
    public_keep: list[str] = Field(default_factory=lambda: [".gitkeep"])

    @classmethod
    def from_env(cls) -> "BootstrapSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            CBN_NEXT_VERSION, CBN_UI_BASE_COLOR, CBN_APP_URL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CBN_NEXT_VERSION"):
            kwargs["next_version"] = os.environ["CBN_NEXT_VERSION"]
        if os.environ.get("CBN_UI_BASE_COLOR"):
            kwargs["ui_base_color"] = os.environ["CBN_UI_BASE_COLOR"]
        if os.environ.get("CBN_APP_URL"):
            kwargs["app_url"] = os.environ["CBN_APP_URL"]
        return cls(**kwargs)


class ProjectConfig(BaseModel):
    """Everything the pipeline needs to know about the project being created.

    ``base_dir`` is the directory the tool was started from and
    ``project_path`` the absolute directory the project lives in.  Both are
    resolved once, when the record is created.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str
    package_manager: PackageManager
    base_dir: Path
    project_path: Path
    has_database: bool = False
    database: DatabaseConfig | None = None

    @field_validator("project_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("project name must not be empty")
        return value

    @model_validator(mode="after")
    def _database_matches_flag(self) -> "ProjectConfig":
        if self.has_database and self.database is None:
            raise ValueError("database parameters are required when has_database is set")
        if not self.has_database and self.database is not None:
            raise ValueError("database parameters given but has_database is false")
        return self

    @classmethod
    def create(
        cls,
        project_name: str,
        package_manager: PackageManager | str,
        base_dir: Path,
        database: DatabaseConfig | None = None,
    ) -> "ProjectConfig":
        """Build a config, deriving ``project_path`` from the project name."""
        base = Path(base_dir).resolve()
        if project_name in CURRENT_DIR_NAMES:
            project_path = base
        else:
            project_path = (base / project_name).resolve()
        return cls(
            project_name=project_name,
            package_manager=PackageManager(package_manager),
            base_dir=base,
            project_path=project_path,
            has_database=database is not None,
            database=database,
        )

    # ------------------------------------------------------------------
    # Derived values (read-only properties)
    # ------------------------------------------------------------------

    @property
    def uses_current_dir(self) -> bool:
        return self.project_name in CURRENT_DIR_NAMES

    @property
    def scaffold_target(self) -> str:
        """Directory argument handed to ``create-next-app``."""
        return "." if self.uses_current_dir else self.project_name

    @property
    def runner(self) -> str:
        return self.package_manager.runner

    @property
    def install_verb(self) -> str:
        return self.package_manager.install_verb
