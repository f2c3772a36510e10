"""Mutation pipeline engine.

Executes an ordered list of mutation steps against a project root, one step
at a time:

1. If the step's precondition says its effect is already present, record
   ``ALREADY_SATISFIED`` and move on.
2. Otherwise run the step's conflict check, then apply it and record
   ``APPLIED``.
3. The first step that raises a ``ScaffoldError`` or ``OSError`` is recorded
   as ``FAILED`` and execution halts.  Steps applied earlier stay applied;
   there is no rollback.  Because every step is idempotent, re-running the
   whole pipeline after fixing the cause is safe.
4. When every step succeeded, a final consistency check re-evaluates each
   step against disk and fails the run if any effect is missing.

The engine holds no state between runs and never changes the process
working directory.  Running two engines against the same root at the same
time is not supported; callers must ensure a single invocation.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr, computed_field
from rich.markup import escape

from ..errors import ConsistencyError, ScaffoldError, SourceMissingError
from ..utils import console
from .steps import BaseStep, StepOutcome

_OUTCOME_STYLE: dict[StepOutcome, tuple[str, str]] = {
    StepOutcome.APPLIED: ("green", "+"),
    StepOutcome.ALREADY_SATISFIED: ("dim", "="),
    StepOutcome.FAILED: ("bold red", "x"),
}


# ---------------------------------------------------------------------------
# Run record
# ---------------------------------------------------------------------------


class StepResult(BaseModel):
    """Outcome of one step in one run."""

    step_id: str
    ordinal: int
    kind: str
    description: str = ""
    outcome: StepOutcome
    reason: str = Field(default="", description="Failure reason, empty unless FAILED")
    error_type: Optional[str] = Field(default=None, description="Exception class name")


class PipelineRunRecord(BaseModel):
    """Ordered per-step outcomes of a single engine run.

    Used for reporting only; nothing here is persisted or read back.
    """

    project_root: str
    results: list[StepResult] = Field(default_factory=list)
    inconsistent_steps: list[str] = Field(default_factory=list)
    duration_seconds: float = Field(default=0.0, ge=0.0)

    _error: Optional[Exception] = PrivateAttr(default=None)

    @computed_field  # type: ignore[misc]
    @property
    def succeeded(self) -> bool:
        """True when no step failed and the consistency check passed."""
        return self._error is None and not self.failed_steps and not self.inconsistent_steps

    @property
    def failed_steps(self) -> list[StepResult]:
        return [r for r in self.results if r.outcome is StepOutcome.FAILED]

    @property
    def failed_step(self) -> Optional[StepResult]:
        """The step that halted the run, if any."""
        failed = self.failed_steps
        return failed[0] if failed else None

    @property
    def error(self) -> Optional[Exception]:
        """The exception that halted the run, if any."""
        return self._error

    def outcomes(self) -> list[tuple[str, StepOutcome]]:
        """``(step_id, outcome)`` pairs in execution order."""
        return [(r.step_id, r.outcome) for r in self.results]

    def count(self, outcome: StepOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    def raise_for_failure(self) -> None:
        """Re-raise the error that halted the run; no-op on success."""
        if self._error is not None:
            raise self._error


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class MutationEngine:
    """Runs mutation steps against a project root in catalog order.

    Attributes:
        steps: The steps to execute, already in execution order.
        echo: Print one console line per step outcome.
    """

    def __init__(self, steps: Sequence[BaseStep], *, echo: bool = True) -> None:
        self.steps = list(steps)
        self.echo = echo

    async def run(self, project_root: str | Path) -> PipelineRunRecord:
        """Execute every step in order against *project_root*.

        Raises:
            SourceMissingError: If *project_root* is not an existing directory.
                Step failures do not raise; they are recorded and halt the run.
        """
        root = Path(project_root).resolve()
        if not root.is_dir():
            raise SourceMissingError(f"project root {root} does not exist")

        start = time.monotonic()
        record = PipelineRunRecord(project_root=str(root))

        for step in self.steps:
            try:
                outcome = await asyncio.to_thread(self._execute, step, root)
            except (ScaffoldError, OSError) as exc:
                result = self._result(step, StepOutcome.FAILED, reason=str(exc), error=exc)
                record.results.append(result)
                record._error = exc
                self._echo(result)
                break
            result = self._result(step, outcome)
            record.results.append(result)
            self._echo(result)
        else:
            inconsistent = await asyncio.to_thread(self.verify, root)
            if inconsistent:
                record.inconsistent_steps = inconsistent
                record._error = ConsistencyError(
                    "effects missing after run for step(s): " + ", ".join(inconsistent)
                )

        record.duration_seconds = time.monotonic() - start
        return record

    def verify(self, project_root: str | Path) -> list[str]:
        """Return the ids of steps whose effect is not present under *project_root*."""
        root = Path(project_root).resolve()
        inconsistent: list[str] = []
        for step in self.steps:
            try:
                consistent = step.is_consistent(root)
            except (ScaffoldError, OSError):
                consistent = False
            if not consistent:
                inconsistent.append(step.step_id)
        return inconsistent

    # -- Internals -------------------------------------------------------

    @staticmethod
    def _execute(step: BaseStep, root: Path) -> StepOutcome:
        if step.is_satisfied(root):
            return StepOutcome.ALREADY_SATISFIED
        step.check_conflict(root)
        step.apply(root)
        return StepOutcome.APPLIED

    @staticmethod
    def _result(
        step: BaseStep,
        outcome: StepOutcome,
        *,
        reason: str = "",
        error: Optional[Exception] = None,
    ) -> StepResult:
        return StepResult(
            step_id=step.step_id,
            ordinal=step.ordinal,
            kind=getattr(step, "kind", type(step).__name__),
            description=step.describe(),
            outcome=outcome,
            reason=reason,
            error_type=type(error).__name__ if error is not None else None,
        )

    def _echo(self, result: StepResult) -> None:
        if not self.echo:
            return
        style, marker = _OUTCOME_STYLE[result.outcome]
        line = f"  [{style}]{marker}[/{style}] {escape(result.description)}"
        if result.outcome is StepOutcome.ALREADY_SATISFIED:
            line += " [dim](already satisfied)[/dim]"
        elif result.outcome is StepOutcome.FAILED:
            line += f"\n    [red]{escape(result.reason)}[/red]"
        console.print(line)
