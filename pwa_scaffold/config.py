"""PWA scaffolder configuration.

Centralised, typed runtime configuration. Settings use a Pydantic v2 model so
they are validated at construction time and can be read from environment
variables without boiler-plate. The interactive CLI takes no flags; anything
that needs tuning for CI or tests goes through ``Config.from_env``.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_GENERATOR_COMMAND: list[str] = [
    "npx",
    "create-next-app@latest",
    "{project_name}",
    "--typescript",
    "--eslint",
    "--tailwind",
    "--app",
    "--src-dir",
    "--import-alias",
    "@/*",
]

DEFAULT_INSTALL_COMMAND: list[str] = ["npm", "install"]

_TRUTHY = {"1", "true", "yes", "y", "on"}


class Config(BaseModel):
    """Global scaffolder configuration.

    Created once by the CLI entry point and passed to ``Pipeline``.
    """

    output_dir: Path = Field(
        default=Path("."),
        description="Parent directory in which the project directory is generated",
    )
    generator_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERATOR_COMMAND),
        description="Skeleton generator argv; '{project_name}' is substituted",
    )
    install_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INSTALL_COMMAND),
        description="Dependency installer argv, run inside the project root",
    )
    skip_install: bool = Field(default=False, description="Do not run the installer")
    reuse_existing_skeleton: bool = Field(
        default=True,
        description="Skip the generator when the project root already holds package.json",
    )

    def project_root(self, project_name: str) -> Path:
        """Absolute path of the project generated for *project_name*."""
        return (self.output_dir / project_name).resolve()

    def render_generator_command(self, project_name: str) -> list[str]:
        """Return the generator argv with the project name substituted."""
        return [arg.replace("{project_name}", project_name) for arg in self.generator_command]

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            PWA_OUTPUT_DIR, PWA_GENERATOR_COMMAND, PWA_INSTALL_COMMAND,
            PWA_SKIP_INSTALL, PWA_REUSE_SKELETON.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PWA_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["PWA_OUTPUT_DIR"])
        if os.environ.get("PWA_GENERATOR_COMMAND"):
            kwargs["generator_command"] = shlex.split(os.environ["PWA_GENERATOR_COMMAND"])
        if os.environ.get("PWA_INSTALL_COMMAND"):
            kwargs["install_command"] = shlex.split(os.environ["PWA_INSTALL_COMMAND"])
        if os.environ.get("PWA_SKIP_INSTALL"):
            kwargs["skip_install"] = os.environ["PWA_SKIP_INSTALL"].strip().lower() in _TRUTHY
        if os.environ.get("PWA_REUSE_SKELETON"):
            kwargs["reuse_existing_skeleton"] = (
                os.environ["PWA_REUSE_SKELETON"].strip().lower() in _TRUTHY
            )
        return cls(**kwargs)
