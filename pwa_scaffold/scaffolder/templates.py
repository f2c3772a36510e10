"""Jinja2 template rendering for the generated project files.

Provides the ``TemplateRenderer`` class, which maps a fixed catalog of
``TemplateId`` values to ``.j2`` files shipped in
``pwa_scaffold/scaffolder/templates/`` and renders them with a context derived
from the ``AnswerModel``.  Rendering is pure: the same id and answers always
produce byte-identical text, and nothing is written to disk here.
"""

from __future__ import annotations

import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..answers import AnswerModel
from ..errors import UnknownTemplateError

# ---------------------------------------------------------------------------
# Template catalog
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateId(str, Enum):
    """Every template the scaffolder knows how to render."""

    NEXT_CONFIG = "next_config"
    LANG_LAYOUT = "lang_layout"
    ROOT_LAYOUT = "root_layout"
    ROOT_PAGE = "root_page"
    I18N_CONFIG = "i18n_config"
    GET_DICTIONARY = "get_dictionary"
    DICTIONARY = "dictionary"
    MIDDLEWARE = "middleware"
    THEME_PROVIDER = "theme_provider"
    SERVICE_WORKER_REGISTRATION = "service_worker_registration"
    MANIFEST = "manifest"
    SERVICE_WORKER = "service_worker"


# Template id -> file under the template directory
TEMPLATE_FILES: dict[TemplateId, str] = {
    TemplateId.NEXT_CONFIG: "next.config.mjs.j2",
    TemplateId.LANG_LAYOUT: "app/lang_layout.tsx.j2",
    TemplateId.ROOT_LAYOUT: "app/root_layout.tsx.j2",
    TemplateId.ROOT_PAGE: "app/root_page.tsx.j2",
    TemplateId.I18N_CONFIG: "i18n-config.ts.j2",
    TemplateId.GET_DICTIONARY: "lib/get-dictionary.ts.j2",
    TemplateId.DICTIONARY: "dictionaries/dictionary.json.j2",
    TemplateId.MIDDLEWARE: "middleware.ts.j2",
    TemplateId.THEME_PROVIDER: "components/theme-provider.tsx.j2",
    TemplateId.SERVICE_WORKER_REGISTRATION: "components/service-worker-registration.tsx.j2",
    TemplateId.MANIFEST: "public/manifest.json.j2",
    TemplateId.SERVICE_WORKER: "public/service-worker.js.j2",
}

THEME_COLOR = "#000000"
BACKGROUND_COLOR = "#ffffff"

MANIFEST_ICONS: list[dict[str, str]] = [
    {"src": "/icon-192x192.png", "sizes": "192x192", "type": "image/png"},
    {"src": "/icon-512x512.png", "sizes": "512x512", "type": "image/png"},
]


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the scaffolder's Jinja2 templates.

    The environment uses ``StrictUndefined`` so a template referring to a
    context key that does not exist fails loudly instead of rendering an
    empty string into a generated source file.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["js_string"] = _js_string_filter
        self.env.filters["json_pretty"] = _json_pretty_filter

    def render(self, template_id: TemplateId | str, answers: AnswerModel) -> str:
        """Render one catalog template for *answers*.

        Args:
            template_id: A ``TemplateId`` or its string value.
            answers: The resolved user answers.

        Returns:
            The rendered text payload.

        Raises:
            UnknownTemplateError: If *template_id* is not in the catalog.
        """
        template = self.env.get_template(template_path(template_id))
        return template.render(**build_context(answers))


def template_path(template_id: TemplateId | str) -> str:
    """Return the ``.j2`` path for *template_id* relative to the template directory."""
    try:
        key = TemplateId(template_id)
    except ValueError:
        raise UnknownTemplateError(f"Unknown template id: {template_id!r}") from None
    return TEMPLATE_FILES[key]


def build_context(answers: AnswerModel) -> dict[str, Any]:
    """Build the Jinja2 template context from the answers."""
    locales = list(answers.locales)
    precache_urls = ["/", "/manifest.json"]
    if answers.use_i18n:
        precache_urls.extend(f"/{locale}" for locale in locales)

    return {
        "project_name": answers.project_name,
        "short_name": answers.short_name,
        "description": answers.description,
        "use_i18n": answers.use_i18n,
        "default_locale": answers.default_locale,
        "locales": locales,
        "package_name": answers.package_name,
        "cache_name": answers.cache_name,
        "precache_urls": precache_urls,
        "theme_color": THEME_COLOR,
        "background_color": BACKGROUND_COLOR,
        "manifest": {
            "name": answers.project_name,
            "short_name": answers.short_name,
            "description": answers.description,
            "start_url": "/",
            "display": "standalone",
            "background_color": BACKGROUND_COLOR,
            "theme_color": THEME_COLOR,
            "icons": MANIFEST_ICONS,
        },
    }


@lru_cache(maxsize=1)
def default_renderer() -> TemplateRenderer:
    """Process-wide renderer over the bundled templates."""
    return TemplateRenderer()


def render(template_id: TemplateId | str, answers: AnswerModel) -> str:
    """Render *template_id* with the bundled templates."""
    return default_renderer().render(template_id, answers)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _js_string_filter(value: Any) -> str:
    """Quote a value as a JavaScript/TypeScript string or array literal."""
    return json.dumps(value, ensure_ascii=False)


def _json_pretty_filter(value: Any) -> str:
    """Serialise a value as indented JSON."""
    return json.dumps(value, indent=2, ensure_ascii=False)
