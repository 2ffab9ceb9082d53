"""Jinja2 rendering of generated project files.

Every non-manifest artifact is a ``.j2`` file under
``frameforge/scaffolder/templates/``, addressed by its path relative to that
directory (``"web/BasePage.ts.j2"``).  :func:`build_context` flattens a frozen
:class:`ProjectConfig` into the variables those templates see.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from frameforge.model.models import FEATURE_DESCRIPTIONS, FeatureKey, ProjectConfig

TEMPLATE_ROOT = Path(__file__).parent / "templates"

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


class TemplateRenderer:
    """Loads and renders artifact templates.

    Undefined variables raise :class:`jinja2.UndefinedError`, so a template
    that references something the context lacks fails its own task rather than
    writing a half-empty file.  Output is never HTML-escaped; the artifacts are
    TypeScript, shell, YAML and Markdown.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else TEMPLATE_ROOT
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(
            slugify=slugify,
            pascal_case=pascal_case,
            snake_case=snake_case,
            camel_case=camel_case,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render the template at *template_path* with *context*.

        Raises:
            jinja2.TemplateNotFound: If no such template exists.
            jinja2.UndefinedError: If the template uses a missing variable.
        """
        return self.env.get_template(template_path).render(context)

    def has_template(self, template_path: str) -> bool:
        try:
            self.env.loader.get_source(self.env, template_path)
        except TemplateNotFound:
            return False
        return True

    def list_templates(self, prefix: str = "") -> list[str]:
        """Sorted ``.j2`` paths, optionally only those under directory *prefix*."""
        names = self.env.list_templates(extensions=["j2"])
        if not prefix:
            return names
        folder = prefix.rstrip("/") + "/"
        return [name for name in names if name.startswith(folder)]


def build_context(config: ProjectConfig) -> dict[str, Any]:
    """Template variables for *config*.

    ``features`` maps each flag's underscored field name to its value;
    ``enabled_features`` lists display names of the enabled flags in
    declaration order (used by the README and getting-started guide).
    """
    return {
        "project_name": config.project_name,
        "automation_type": config.automation_type.value,
        "template": config.template.value,
        "features": {key.field_name: config.features[key] for key in FeatureKey},
        "enabled_features": [FEATURE_DESCRIPTIONS[key] for key in config.features.enabled()],
        "base_url": config.base_url,
        "api_url": config.api_url,
        "environments": list(config.environments),
        "mobile": config.mobile,
        "api": config.api,
        "browsers": list(config.integrations.browsers),
        "reporters": list(config.integrations.reporters),
        "has_browser": config.has_browser,
    }


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def _words(value: str) -> list[str]:
    return _WORD_RE.findall(value)


def slugify(value: str) -> str:
    """``"My Suite!"`` -> ``"my-suite"``, ``"iPhone 14"`` -> ``"iphone-14"``"""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def snake_case(value: str) -> str:
    """``"MySuite"`` -> ``"my_suite"``"""
    return "_".join(word.lower() for word in _words(value))


def pascal_case(value: str) -> str:
    """``"my-suite"`` -> ``"MySuite"``"""
    return "".join(word.capitalize() for word in _words(value))


def camel_case(value: str) -> str:
    """``"my_suite"`` -> ``"mySuite"``"""
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]
