"""The fixed step catalog that customizes a Next.js skeleton into a PWA.

``build_catalog`` is a pure function of the answers: the internationalization
flag decides which steps exist at all, rather than steps being executed and
then skipped.  The catalog is validated against two ordering rules before it
is returned:

1. A directory must be created (or belong to the generated skeleton) before
   anything is written or moved beneath it.
2. A legacy entry point is moved or deleted before its locale-segmented
   replacement is written, so the tree never holds two candidate entry
   points at once.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Optional

from ..answers import AnswerModel
from .json_merge import MergeStrategy
from .steps import (
    BaseStep,
    DeleteFile,
    EnsureDirectory,
    MergeJsonFile,
    MoveFile,
    WriteFile,
)
from .templates import TemplateId, TemplateRenderer, default_renderer

# Directories the skeleton generator is guaranteed to create.
SKELETON_DIRECTORIES: frozenset[str] = frozenset({".", "src", "src/app"})

# Entries that must exist before the catalog runs, on a first run and on re-runs alike.
SKELETON_REQUIRED: tuple[str, ...] = ("package.json", "tsconfig.json", "src/app")

LOCALE_SEGMENT = "[lang]"

DEPENDENCIES: dict[str, str] = {
    "@headlessui/react": "^1.7.17",
    "@heroicons/react": "^2.0.18",
    "framer-motion": "^10.16.4",
    "tailwind-merge": "^1.14.0",
    "next-themes": "^0.3.0",
}

# Only needed by the locale-negotiation middleware.
I18N_DEPENDENCIES: dict[str, str] = {
    "@formatjs/intl-localematcher": "^0.5.4",
    "negotiator": "^0.6.3",
}

I18N_DEV_DEPENDENCIES: dict[str, str] = {
    "@types/negotiator": "^0.6.3",
}

SCRIPTS: dict[str, str] = {
    "dev": "next dev",
    "build": "tsc --noEmit && next build",
    "start": "next start",
    "lint": "next lint",
}

TSCONFIG_PATHS: dict[str, list[str]] = {
    "@/*": ["./src/*"],
    "public/*": ["./public/*"],
}


class CatalogOrderError(ValueError):
    """Raised when a catalog violates the ordering rules (a programming error)."""


def build_catalog(
    answers: AnswerModel,
    renderer: Optional[TemplateRenderer] = None,
) -> list[BaseStep]:
    """Return the ordered mutation steps for *answers*.

    Template payloads are rendered here, so the returned steps are plain data
    and the engine never needs the renderer.
    """
    renderer = renderer or default_renderer()
    specs: list[tuple[type[BaseStep], dict[str, Any]]] = []

    def write(step_id: str, path: str, template_id: TemplateId) -> None:
        add(
            WriteFile,
            step_id,
            path=path,
            template_id=template_id,
            content=renderer.render(template_id, answers),
        )

    def add(cls: type[BaseStep], step_id: str, **fields: Any) -> None:
        specs.append((cls, {"step_id": step_id, **fields}))

    # -- Package and framework configuration --------------------------------
    add(
        MergeJsonFile,
        "package-json-dependencies",
        path="package.json",
        fragment=dependency_fragment(answers),
        strategy=MergeStrategy.DEEP_MERGE,
    )
    add(
        MergeJsonFile,
        "package-json-scripts",
        path="package.json",
        fragment={"name": answers.package_name, "scripts": SCRIPTS},
        strategy=MergeStrategy.SHALLOW_OVERLAY,
    )
    add(
        MergeJsonFile,
        "tsconfig-paths",
        path="tsconfig.json",
        fragment={"compilerOptions": {"paths": TSCONFIG_PATHS}},
        strategy=MergeStrategy.DEEP_MERGE,
    )
    write("next-config", "next.config.mjs", TemplateId.NEXT_CONFIG)

    # -- App entry points ---------------------------------------------------
    if answers.use_i18n:
        lang_dir = f"src/app/{LOCALE_SEGMENT}"
        add(EnsureDirectory, "lang-directory", path=lang_dir)
        add(MoveFile, "move-page", source="src/app/page.tsx", target=f"{lang_dir}/page.tsx")
        add(DeleteFile, "delete-root-layout", path="src/app/layout.tsx")
        write("lang-layout", f"{lang_dir}/layout.tsx", TemplateId.LANG_LAYOUT)
    else:
        write("root-layout", "src/app/layout.tsx", TemplateId.ROOT_LAYOUT)
        write("root-page", "src/app/page.tsx", TemplateId.ROOT_PAGE)

    write("i18n-config", "src/i18n-config.ts", TemplateId.I18N_CONFIG)

    # -- Locale negotiation and dictionaries --------------------------------
    if answers.use_i18n:
        add(EnsureDirectory, "lib-directory", path="src/lib")
        write("get-dictionary", "src/lib/get-dictionary.ts", TemplateId.GET_DICTIONARY)
        add(EnsureDirectory, "dictionaries-directory", path="src/dictionaries")
        for locale in answers.locales:
            write(f"dictionary-{locale}", f"src/dictionaries/{locale}.json", TemplateId.DICTIONARY)
        write("middleware", "src/middleware.ts", TemplateId.MIDDLEWARE)

    # -- Shared UI components -----------------------------------------------
    add(EnsureDirectory, "components-directory", path="src/components/ui")
    write(
        "theme-provider",
        "src/components/ui/theme-provider.tsx",
        TemplateId.THEME_PROVIDER,
    )
    write(
        "service-worker-registration",
        "src/components/ui/service-worker-registration.tsx",
        TemplateId.SERVICE_WORKER_REGISTRATION,
    )

    # -- Installability and offline support ---------------------------------
    add(EnsureDirectory, "public-directory", path="public")
    write("manifest", "public/manifest.json", TemplateId.MANIFEST)
    write("service-worker", "public/service-worker.js", TemplateId.SERVICE_WORKER)

    catalog = [cls(ordinal=ordinal, **fields) for ordinal, (cls, fields) in enumerate(specs)]
    validate_order(catalog)
    return catalog


def dependency_fragment(answers: AnswerModel) -> dict[str, dict[str, str]]:
    """The ``package.json`` dependency fragment for *answers*."""
    if not answers.use_i18n:
        return {"dependencies": dict(DEPENDENCIES)}
    return {
        "dependencies": {**DEPENDENCIES, **I18N_DEPENDENCIES},
        "devDependencies": dict(I18N_DEV_DEPENDENCIES),
    }


def validate_order(
    steps: list[BaseStep],
    skeleton_directories: frozenset[str] = SKELETON_DIRECTORIES,
) -> None:
    """Check the ordering rules described in the module docstring.

    Raises:
        CatalogOrderError: On the first violation, or on duplicate step ids.
    """
    seen_ids: set[str] = set()
    for step in steps:
        if step.step_id in seen_ids:
            raise CatalogOrderError(f"duplicate step id {step.step_id!r}")
        seen_ids.add(step.step_id)

    directories = set(skeleton_directories)
    for index, step in enumerate(steps):
        if isinstance(step, EnsureDirectory):
            path = PurePosixPath(step.path)
            directories.add(str(path))
            directories.update(str(parent) for parent in path.parents)
            continue

        for produced in step.produced_paths():
            parent = str(PurePosixPath(produced).parent)
            if parent not in directories:
                raise CatalogOrderError(
                    f"step {step.step_id!r} writes {produced} before {parent}/ is created"
                )

        if isinstance(step, WriteFile):
            name = PurePosixPath(step.path).name
            for later in steps[index + 1:]:
                removes_same_name = any(
                    PurePosixPath(removed).name == name and removed != step.path
                    for removed in later.removed_paths()
                )
                if removes_same_name and _is_locale_segmented(step.path):
                    raise CatalogOrderError(
                        f"step {step.step_id!r} writes {step.path} before legacy "
                        f"entry point is removed by {later.step_id!r}"
                    )


def _is_locale_segmented(path: str) -> bool:
    return LOCALE_SEGMENT in PurePosixPath(path).parts
