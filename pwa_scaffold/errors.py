"""Exception hierarchy for the PWA scaffolder.

Every error raised on purpose by the scaffolder derives from ``ScaffoldError``
so the pipeline can tell an expected, reportable halt apart from a genuine
bug.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for all scaffolder errors."""


class ValidationError(ScaffoldError):
    """Raised when user answers cannot be turned into a valid ``AnswerModel``."""


class ConflictError(ScaffoldError):
    """Raised when on-disk state is ambiguous relative to the expected prior state.

    Conflicts are never auto-resolved.
    """


class SourceMissingError(ScaffoldError):
    """Raised when the file a step operates on is absent and nothing can be recovered."""


class MalformedJsonError(ScaffoldError):
    """Raised when a configuration file is not a valid top-level JSON object."""


class UnknownTemplateError(ScaffoldError):
    """Raised when a template id is not part of the template catalog."""


class ConsistencyError(ScaffoldError):
    """Raised when the final post-run check finds a step whose effect is missing."""


class ExternalProcessError(ScaffoldError):
    """Raised when an external tool (generator, installer) exits non-zero."""

    def __init__(self, command: list[str], returncode: int, detail: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.detail = detail
        message = f"`{' '.join(self.command)}` exited with status {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
