"""PWA scaffolder -- turns a generated Next.js skeleton into a customized PWA.

This package builds the ordered catalog of mutation steps for a set of user
answers and runs it against a project root.

Quick usage::

    from pwa_scaffold.answers import resolve
    from pwa_scaffold.scaffolder import MutationEngine, build_catalog

    answers = resolve({"projectName": "demo", "useI18n": "y"})
    engine = MutationEngine(build_catalog(answers))
    record = await engine.run("/tmp/demo")
    record.raise_for_failure()
"""

from pwa_scaffold.scaffolder.catalog import build_catalog, validate_order
from pwa_scaffold.scaffolder.engine import MutationEngine, PipelineRunRecord, StepResult
from pwa_scaffold.scaffolder.json_merge import MergeStrategy, merge
from pwa_scaffold.scaffolder.steps import (
    DeleteFile,
    EnsureDirectory,
    MergeJsonFile,
    MoveFile,
    StepOutcome,
    WriteFile,
)
from pwa_scaffold.scaffolder.templates import TemplateId, TemplateRenderer, render

__all__ = [
    "DeleteFile",
    "EnsureDirectory",
    "MergeJsonFile",
    "MergeStrategy",
    "MoveFile",
    "MutationEngine",
    "PipelineRunRecord",
    "StepOutcome",
    "StepResult",
    "TemplateId",
    "TemplateRenderer",
    "WriteFile",
    "build_catalog",
    "merge",
    "render",
    "validate_order",
]
