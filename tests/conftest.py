"""Shared pytest fixtures for the pwa-scaffold test suite.

Provides reusable fixtures for:
- A fake Next.js skeleton tree shaped like create-next-app output
- Resolved answers for the single-locale and i18n flows
- Tree snapshots for before/after comparisons
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pwa_scaffold.answers import AnswerModel, resolve

# ---------------------------------------------------------------------------
# Skeleton
# ---------------------------------------------------------------------------

SKELETON_PACKAGE_JSON = {
    "name": "demo",
    "version": "0.1.0",
    "private": True,
    "scripts": {
        "dev": "next dev --turbopack",
        "build": "next build",
        "start": "next start",
        "lint": "next lint",
    },
    "dependencies": {
        "react": "19.0.0",
        "react-dom": "19.0.0",
        "next": "15.1.0",
    },
    "devDependencies": {
        "typescript": "^5",
        "tailwindcss": "^3.4.1",
    },
}

SKELETON_TSCONFIG = {
    "compilerOptions": {
        "target": "ES2017",
        "strict": True,
        "jsx": "preserve",
        "plugins": [{"name": "next"}],
        "paths": {"@/*": ["./src/*"]},
    },
    "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx"],
    "exclude": ["node_modules"],
}

SKELETON_PAGE = 'export default function Home() {\n  return <main>Hello</main>;\n}\n'
SKELETON_LAYOUT = (
    'import "./globals.css";\n\n'
    "export default function RootLayout({ children }: { children: React.ReactNode }) {\n"
    '  return <html lang="en"><body>{children}</body></html>;\n'
    "}\n"
)


def make_skeleton(root: Path) -> Path:
    """Write a minimal create-next-app style tree under *root*."""
    (root / "src" / "app").mkdir(parents=True)
    (root / "public").mkdir()
    (root / "package.json").write_text(json.dumps(SKELETON_PACKAGE_JSON, indent=2) + "\n")
    (root / "tsconfig.json").write_text(json.dumps(SKELETON_TSCONFIG, indent=2) + "\n")
    (root / "src" / "app" / "page.tsx").write_text(SKELETON_PAGE)
    (root / "src" / "app" / "layout.tsx").write_text(SKELETON_LAYOUT)
    (root / "src" / "app" / "globals.css").write_text("@tailwind base;\n")
    (root / "public" / "next.svg").write_text("<svg/>\n")
    return root


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under *root* (relative POSIX path) to its bytes."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def skeleton(tmp_path: Path) -> Path:
    """A fresh fake skeleton at ``<tmp>/demo``."""
    return make_skeleton(tmp_path / "demo")


@pytest.fixture
def skeleton_factory():
    """The ``make_skeleton`` helper, for tests that build the tree lazily."""
    return make_skeleton


@pytest.fixture
def tree_snapshot():
    """The ``snapshot`` helper."""
    return snapshot


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------


@pytest.fixture
def single_answers() -> AnswerModel:
    """Answers for the single-locale flow."""
    return resolve(
        {"projectName": "demo", "shortName": "demo", "description": "x", "useI18n": "n"}
    )


@pytest.fixture
def i18n_answers() -> AnswerModel:
    """Answers for the internationalized flow."""
    return resolve(
        {"projectName": "demo", "shortName": "demo", "description": "x", "useI18n": "y"}
    )
