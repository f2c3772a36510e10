"""Mutation steps applied to a generated project tree.

Each step is a small, frozen Pydantic model describing one structural edit.
Every step knows three things about itself:

* ``is_satisfied(root)``: whether its effect is already present on disk, in
  which case executing it is a no-op.  This is what makes re-runs safe.
* ``check_conflict(root)``: whether applying it would destroy data that the
  scaffolder cannot prove it owns.  Conflicts raise ``ConflictError`` and are
  never resolved automatically.
* ``apply(root)``: perform the edit.

Paths are stored relative to the project root in POSIX form and resolved
against an explicitly passed root; nothing here depends on the process
working directory.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ..errors import ConflictError, SourceMissingError
from ..utils import write_text_atomic
from .json_merge import MergeStrategy, dump_json, merge, parse_json_object
from .templates import TemplateId


class StepOutcome(str, Enum):
    """Result of executing a single step."""

    APPLIED = "applied"
    ALREADY_SATISFIED = "already_satisfied"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _normalise_relative(value: str) -> str:
    """Validate a project-relative path and return it in POSIX form."""
    if not value or not value.strip():
        raise ValueError("path must not be empty")
    posix = PurePosixPath(value.replace("\\", "/"))
    if posix.is_absolute() or Path(value).is_absolute():
        raise ValueError(f"path must be relative to the project root: {value!r}")
    if ".." in posix.parts:
        raise ValueError(f"path must not escape the project root: {value!r}")
    normalised = str(posix)
    if normalised == ".":
        raise ValueError("path must name an entry below the project root")
    return normalised


RelativePath = Annotated[str, AfterValidator(_normalise_relative)]


def _resolve(root: Path, relative: str) -> Path:
    return root.joinpath(*PurePosixPath(relative).parts)


def _exists(path: Path) -> bool:
    """Like ``Path.exists`` but also true for dangling symlinks."""
    return os.path.lexists(path)


# ---------------------------------------------------------------------------
# Step variants
# ---------------------------------------------------------------------------


class BaseStep(BaseModel):
    """Fields and behaviour shared by every step variant."""

    model_config = ConfigDict(frozen=True)

    step_id: str = Field(..., min_length=1, description="Stable identifier used in reports")
    ordinal: int = Field(default=0, ge=0, description="Position in the catalog")

    def describe(self) -> str:
        raise NotImplementedError

    def is_satisfied(self, root: Path) -> bool:
        raise NotImplementedError

    def check_conflict(self, root: Path) -> None:
        """Raise ``ConflictError`` if applying the step would destroy unowned data."""

    def apply(self, root: Path) -> None:
        raise NotImplementedError

    def is_consistent(self, root: Path) -> bool:
        """Post-run check: is the step's effect present on disk?"""
        return self.is_satisfied(root)

    def produced_paths(self) -> list[str]:
        """Project-relative paths this step creates or writes."""
        return []

    def removed_paths(self) -> list[str]:
        """Project-relative paths this step removes."""
        return []


class EnsureDirectory(BaseStep):
    """Create a directory (and its parents) if it does not exist yet."""

    kind: Literal["ensure_directory"] = "ensure_directory"
    path: RelativePath

    def describe(self) -> str:
        return f"ensure directory {self.path}/"

    def is_satisfied(self, root: Path) -> bool:
        return _resolve(root, self.path).is_dir()

    def check_conflict(self, root: Path) -> None:
        target = _resolve(root, self.path)
        if _exists(target) and not target.is_dir():
            raise ConflictError(f"{self.path} exists but is not a directory")

    def apply(self, root: Path) -> None:
        _resolve(root, self.path).mkdir(parents=True, exist_ok=True)

    def produced_paths(self) -> list[str]:
        return [self.path]


class MoveFile(BaseStep):
    """Move a file from *source* to *target*.

    A move that already happened (source gone, target present) is satisfied.
    When both exist with identical bytes the redundant source is removed;
    when they differ the step refuses to guess which copy is authoritative.
    """

    kind: Literal["move_file"] = "move_file"
    source: RelativePath
    target: RelativePath

    def describe(self) -> str:
        return f"move {self.source} -> {self.target}"

    def is_satisfied(self, root: Path) -> bool:
        source = _resolve(root, self.source)
        target = _resolve(root, self.target)
        return not _exists(source) and target.is_file()

    def check_conflict(self, root: Path) -> None:
        source = _resolve(root, self.source)
        target = _resolve(root, self.target)
        if _exists(source) and not source.is_file():
            raise ConflictError(f"{self.source} exists but is not a regular file")
        if _exists(target) and not target.is_file():
            raise ConflictError(f"{self.target} exists but is not a regular file")
        if source.is_file() and target.is_file():
            if source.read_bytes() != target.read_bytes():
                raise ConflictError(
                    f"both {self.source} and {self.target} exist with different content; "
                    "refusing to overwrite either"
                )

    def apply(self, root: Path) -> None:
        source = _resolve(root, self.source)
        target = _resolve(root, self.target)
        if not _exists(source):
            raise SourceMissingError(
                f"cannot move {self.source}: neither it nor {self.target} exists"
            )
        if target.is_file():
            # check_conflict already established that the bytes are identical.
            source.unlink()
            return
        if not target.parent.is_dir():
            raise SourceMissingError(
                f"cannot move {self.source}: directory {target.parent.relative_to(root)} does not exist"
            )
        source.rename(target)

    def produced_paths(self) -> list[str]:
        return [self.target]

    def removed_paths(self) -> list[str]:
        return [self.source]


class DeleteFile(BaseStep):
    """Delete a file; deleting an absent file is a no-op."""

    kind: Literal["delete_file"] = "delete_file"
    path: RelativePath

    def describe(self) -> str:
        return f"delete {self.path}"

    def is_satisfied(self, root: Path) -> bool:
        return not _exists(_resolve(root, self.path))

    def check_conflict(self, root: Path) -> None:
        target = _resolve(root, self.path)
        if target.is_dir() and not target.is_symlink():
            raise ConflictError(f"{self.path} is a directory; only files are deleted")

    def apply(self, root: Path) -> None:
        _resolve(root, self.path).unlink(missing_ok=True)

    def removed_paths(self) -> list[str]:
        return [self.path]


class WriteFile(BaseStep):
    """Write a rendered template to *path*, overwriting whatever is there.

    The content is a pure function of the template id and the answers, so
    re-running produces byte-identical output; the step is never skipped.
    """

    kind: Literal["write_file"] = "write_file"
    path: RelativePath
    template_id: TemplateId
    content: str

    def describe(self) -> str:
        return f"write {self.path} ({self.template_id.value})"

    def is_satisfied(self, root: Path) -> bool:
        return False

    def check_conflict(self, root: Path) -> None:
        target = _resolve(root, self.path)
        if target.is_dir():
            raise ConflictError(f"{self.path} is a directory; cannot write a file there")

    def apply(self, root: Path) -> None:
        target = _resolve(root, self.path)
        if not target.parent.is_dir():
            raise SourceMissingError(
                f"cannot write {self.path}: parent directory does not exist"
            )
        write_text_atomic(target, self.content)

    def is_consistent(self, root: Path) -> bool:
        target = _resolve(root, self.path)
        return target.is_file() and target.read_bytes() == self.content.encode("utf-8")

    def produced_paths(self) -> list[str]:
        return [self.path]


class MergeJsonFile(BaseStep):
    """Merge a JSON fragment into an existing JSON config file."""

    kind: Literal["merge_json_file"] = "merge_json_file"
    path: RelativePath
    fragment: dict[str, Any]
    strategy: MergeStrategy = MergeStrategy.DEEP_MERGE

    def describe(self) -> str:
        keys = ", ".join(self.fragment) or "nothing"
        return f"merge {keys} into {self.path} ({self.strategy.value})"

    def _load(self, root: Path) -> dict[str, Any]:
        target = _resolve(root, self.path)
        if not target.is_file():
            raise SourceMissingError(f"cannot merge into {self.path}: file does not exist")
        return parse_json_object(target.read_bytes(), self.path)

    def is_satisfied(self, root: Path) -> bool:
        if not _resolve(root, self.path).is_file():
            return False
        document = self._load(root)
        return merge(document, self.fragment, self.strategy) == document

    def apply(self, root: Path) -> None:
        document = self._load(root)
        merged = merge(document, self.fragment, self.strategy)
        write_text_atomic(_resolve(root, self.path), dump_json(merged))


MutationStep = Annotated[
    Union[EnsureDirectory, MoveFile, DeleteFile, WriteFile, MergeJsonFile],
    Field(discriminator="kind"),
]
