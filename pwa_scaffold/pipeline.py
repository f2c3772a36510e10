"""PWA scaffolder pipeline orchestrator.

Implements the three-stage flow:

Stage 1: GENERATE  -- Run the external skeleton generator (create-next-app).
Stage 2: CUSTOMIZE -- Run the mutation step catalog against the skeleton.
Stage 3: INSTALL   -- Run the external dependency installer.

Usage::

    pwa-scaffold
    python -m pwa_scaffold
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from .answers import QUESTIONS, AnswerModel, resolve
from .config import Config
from .errors import ExternalProcessError, ValidationError
from .gateway import ExternalProcessGateway
from .scaffolder.catalog import SKELETON_REQUIRED, build_catalog
from .scaffolder.engine import MutationEngine, PipelineRunRecord
from .scaffolder.steps import StepOutcome
from .scaffolder.templates import TemplateRenderer
from .utils import (
    STAGE_NAMES,
    console,
    format_duration,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Raised when a pipeline stage fails irrecoverably."""

    def __init__(self, stage: int, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage {stage} ({STAGE_NAMES.get(stage, '?')}): {message}")


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives skeleton generation, customization and installation.

    Attributes:
        config: Runtime configuration.
        gateway: Runs the external generator and installer.
        state: Dictionary that accumulates results from each stage.
    """

    def __init__(
        self,
        config: Config,
        gateway: Optional[ExternalProcessGateway] = None,
        renderer: Optional[TemplateRenderer] = None,
    ) -> None:
        self.config = config
        self.gateway = gateway or ExternalProcessGateway(config)
        self.renderer = renderer
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "stages_completed": [],
            "stages_failed": [],
            "success": False,
        }

    async def run(self, answers: AnswerModel) -> dict[str, Any]:
        """Execute all three stages for *answers*.

        Returns:
            The final state dictionary, including a top-level ``success``
            boolean and the serialised run record of the customize stage.
        """
        pipeline_start = time.monotonic()
        project_root = self.config.project_root(answers.project_name)
        self.state["project_root"] = str(project_root)

        console.print(
            Panel(
                f"[bold bright_cyan]PWA Scaffold[/bold bright_cyan]\n"
                f"Project : {escape(answers.project_name)}\n"
                f"Root    : {escape(str(project_root))}\n"
                f"i18n    : {'on (' + ', '.join(answers.locales) + ')' if answers.use_i18n else 'off'}",
                title="[bold]Pipeline Start[/bold]",
                border_style="bright_cyan",
            )
        )

        stages: list[tuple[int, Callable[[], Any]]] = [
            (1, lambda: self.stage1_generate(answers, project_root)),
            (2, lambda: self.stage2_customize(answers, project_root)),
            (3, lambda: self.stage3_install(project_root)),
        ]

        for stage, runner in stages:
            print_stage_header(stage, STAGE_NAMES[stage])
            stage_start = time.monotonic()
            try:
                result = await runner()
            except PipelineError as exc:
                print_error(f"  {exc}")
                self.state["stages_failed"].append(stage)
                self.state["error"] = str(exc)
                break
            self.state[f"stage{stage}_result"] = result
            self.state["stages_completed"].append(stage)
            console.print(
                f"  [dim]Stage {stage} completed in "
                f"{format_duration(time.monotonic() - stage_start)}[/dim]"
            )
        else:
            self.state["success"] = True

        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()
        self._print_final_summary(time.monotonic() - pipeline_start)
        return self.state

    # ------------------------------------------------------------------
    # Stage 1: GENERATE
    # ------------------------------------------------------------------

    async def stage1_generate(self, answers: AnswerModel, project_root: Path) -> dict[str, Any]:
        """Create the skeleton, or reuse one left by an earlier run."""
        reused = self.config.reuse_existing_skeleton and (project_root / "package.json").is_file()
        if reused:
            print_warning(f"  Reusing existing skeleton at {project_root}")
        else:
            console.print(f"  Generating skeleton [bold]{escape(answers.project_name)}[/bold]...")
            try:
                await self.gateway.generate_skeleton(answers.project_name)
            except ExternalProcessError as exc:
                raise PipelineError(1, f"Skeleton generator failed: {exc}") from exc

        missing = [entry for entry in SKELETON_REQUIRED if not (project_root / entry).exists()]
        if missing:
            raise PipelineError(
                1, f"Skeleton at {project_root} is missing: {', '.join(missing)}"
            )
        return {"reused": reused}

    # ------------------------------------------------------------------
    # Stage 2: CUSTOMIZE
    # ------------------------------------------------------------------

    async def stage2_customize(self, answers: AnswerModel, project_root: Path) -> dict[str, Any]:
        """Run the mutation catalog; halts at the first failed step."""
        catalog = build_catalog(answers, self.renderer)
        engine = MutationEngine(catalog)
        record = await engine.run(project_root)
        self.state["run_record"] = record.model_dump(mode="json")

        if not record.succeeded:
            raise PipelineError(2, _describe_failure(record))

        print_summary_table(
            {
                "Steps": str(len(record.results)),
                "Applied": str(record.count(StepOutcome.APPLIED)),
                "Already satisfied": str(record.count(StepOutcome.ALREADY_SATISFIED)),
            },
            title="Customization Results",
        )
        return {
            "applied": record.count(StepOutcome.APPLIED),
            "already_satisfied": record.count(StepOutcome.ALREADY_SATISFIED),
        }

    # ------------------------------------------------------------------
    # Stage 3: INSTALL
    # ------------------------------------------------------------------

    async def stage3_install(self, project_root: Path) -> dict[str, Any]:
        """Install dependencies.  A failure here does not undo stage 2."""
        if self.config.skip_install:
            print_warning("  Dependency installation skipped (PWA_SKIP_INSTALL).")
            return {"installed": False}
        try:
            await self.gateway.install(project_root)
        except ExternalProcessError as exc:
            raise PipelineError(
                3, f"Dependency installer failed: {exc}. Project files were customized; "
                "re-run the installer manually."
            ) from exc
        return {"installed": True}

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _print_final_summary(self, total_elapsed: float) -> None:
        """Print the final pipeline summary panel."""
        stages_ok = self.state.get("stages_completed", [])
        stages_fail = self.state.get("stages_failed", [])

        if self.state.get("success"):
            border_style = "bold green"
            status_text = "[bold green]SCAFFOLD SUCCEEDED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]SCAFFOLD FAILED[/bold red]"

        detail_lines = [
            status_text,
            "",
            f"Duration  : {format_duration(total_elapsed)}",
            f"Completed : {', '.join(str(s) for s in stages_ok) or 'none'}",
        ]
        if stages_fail:
            detail_lines.append(f"Failed    : {', '.join(str(s) for s in stages_fail)}")
            detail_lines.append("")
            detail_lines.append(
                "Steps already applied were kept; fix the cause and re-run to continue."
            )
        detail_lines.extend(["", f"Project   : {escape(self.state.get('project_root', ''))}"])

        console.print()
        console.print(
            Panel(
                "\n".join(detail_lines),
                title="[bold]Pipeline Complete[/bold]",
                border_style=border_style,
            )
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _describe_failure(record: PipelineRunRecord) -> str:
    failed = record.failed_step
    if failed is not None:
        return (
            f"step '{failed.step_id}' (#{failed.ordinal}, {failed.description}) failed "
            f"with {failed.error_type}: {failed.reason}"
        )
    return str(record.error)


def prompt_answers(ask: Callable[..., str] = Prompt.ask) -> dict[str, str]:
    """Ask every question interactively and return the raw answers."""
    return {
        question.name: ask(question.prompt, default=question.default, console=console)
        for question in QUESTIONS
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point for ``pwa-scaffold`` and ``python -m pwa_scaffold``."""
    config = Config.from_env()

    try:
        answers = resolve(prompt_answers())
    except ValidationError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print_error("Aborted.")
        sys.exit(1)

    pipeline = Pipeline(config)
    result = asyncio.run(pipeline.run(answers))

    if result.get("success"):
        print_success("Project setup complete!")
    else:
        print_error("Project setup failed.")
        sys.exit(1)


if __name__ == "__main__":
    main()
