"""Jinja2 template rendering for the generated project files.

``TEMPLATE_SET`` is the fixed table of every file the pipeline materializes,
keyed by logical identifier.  Each entry names the Jinja2 source under
``src/scaffolder/templates/`` and the destination relative to the project
root.  The ``TemplateRenderer`` turns an identifier plus a context into text
or into a file on disk.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from src.utils import write_file


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# Template table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateSpec:
    """A single generated file."""

    name: str
    source: str
    destination: str


def _table(*specs: TemplateSpec) -> Mapping[str, TemplateSpec]:
    return MappingProxyType({spec.name: spec for spec in specs})


TEMPLATE_SET: Mapping[str, TemplateSpec] = _table(
    TemplateSpec("env", "env.j2", ".env"),
    TemplateSpec("auth-config", "lib/auth.ts.j2", "lib/auth.ts"),
    TemplateSpec("auth-client", "lib/auth-client.ts.j2", "lib/auth-client.ts"),
    TemplateSpec("api-route", "app/api/auth/route.ts.j2", "app/api/auth/[...all]/route.ts"),
    TemplateSpec("db-schema", "lib/schema.ts.j2", "lib/schema.ts"),
    TemplateSpec("db-connection", "lib/db.ts.j2", "lib/db.ts"),
    TemplateSpec("db-migration-config", "drizzle.config.ts.j2", "drizzle.config.ts"),
    TemplateSpec("landing-page", "app/page.tsx.j2", "app/page.tsx"),
)

AUTH_TEMPLATES: tuple[str, ...] = ("auth-config", "auth-client", "api-route")
DATABASE_TEMPLATES: tuple[str, ...] = ("db-schema", "db-connection", "db-migration-config")


def get_template(name: str) -> TemplateSpec:
    """Look up a template by logical identifier.

    Raises:
        KeyError: If *name* is not part of ``TEMPLATE_SET``.
    """
    try:
        return TEMPLATE_SET[name]
    except KeyError:
        raise KeyError(f"Unknown template: {name!r}") from None


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the generated-file templates.

    Templates are looked up by logical identifier through ``TEMPLATE_SET``.
    Undefined context variables raise instead of rendering as empty strings,
    so a missing secret can never produce a silently broken ``.env``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, name: str, context: dict[str, Any] | None = None) -> str:
        """Render the template registered under *name*.

        Args:
            name: Logical identifier (e.g. ``"auth-client"``).
            context: Variables available inside the template.

        Returns:
            The rendered content.
        """
        spec = get_template(name)
        template = self.env.get_template(spec.source)
        return template.render(**(context or {}))

    async def render_to_file(
        self,
        name: str,
        project_root: str | Path,
        context: dict[str, Any] | None = None,
    ) -> Path:
        """Render *name* and write it to its destination under *project_root*.

        Parent directories are created and an existing file is overwritten.
        Returns the written path.
        """
        content = self.render(name, context)
        out = Path(project_root) / get_template(name).destination
        return await asyncio.to_thread(write_file, out, content)

    def list_templates(self) -> list[str]:
        """Return every ``.j2`` source path under the template directory."""
        if not self.template_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in self.template_dir.rglob("*.j2")
        )
