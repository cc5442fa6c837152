"""File generation for the bootstrapped project.

Quick usage::

    from src.scaffolder import TemplateRenderer, build_env_content

    renderer = TemplateRenderer()
    await renderer.render_to_file("auth-client", project_root, {"app_url": url})
    env_text = build_env_content(database=None)
"""

from src.scaffolder.cleanup import CleanupResult, clean_directory
from src.scaffolder.env_gen import build_database_url, build_env_content, generate_secret
from src.scaffolder.templates import TEMPLATE_SET, TemplateRenderer, TemplateSpec, get_template

__all__ = [
    "TEMPLATE_SET",
    "CleanupResult",
    "TemplateRenderer",
    "TemplateSpec",
    "build_database_url",
    "build_env_content",
    "clean_directory",
    "generate_secret",
    "get_template",
]
