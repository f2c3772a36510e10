"""User answers for the scaffolder.

``resolve`` turns the raw strings collected by the CLI prompts into a frozen
``AnswerModel`` with every default applied.  The model is built once per
process and never mutated; the step catalog and the template renderer both
read from it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .utils import slugify

SUPPORTED_LOCALES: tuple[str, ...] = ("en", "es")
FALLBACK_LOCALE = "en"

YES_ANSWERS: frozenset[str] = frozenset({"y", "yes", "true", "1"})


class Question(BaseModel):
    """A single prompt shown to the user."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Key in the raw answer mapping")
    prompt: str = Field(..., description="Text shown to the user")
    default: str = Field(..., description="Value substituted for an empty answer")


QUESTIONS: tuple[Question, ...] = (
    Question(name="projectName", prompt="What is your project name?", default="my-pwa-project"),
    Question(name="shortName", prompt="What is your project short name?", default="my-pwa"),
    Question(
        name="description",
        prompt="Describe your project",
        default="Generated with Leobard's PWA generator",
    ),
    Question(
        name="useI18n",
        prompt="Do you want to use internationalization? (y/n)",
        default="n",
    ),
)

QUESTIONS_BY_NAME: dict[str, Question] = {q.name: q for q in QUESTIONS}


class AnswerModel(BaseModel):
    """Validated, immutable record of the user's choices."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., min_length=1)
    short_name: str = Field(..., min_length=1)
    description: str = Field(default="")
    use_i18n: bool = Field(default=False)
    default_locale: str = Field(default=FALLBACK_LOCALE)

    @computed_field  # type: ignore[misc]
    @property
    def locales(self) -> tuple[str, ...]:
        """Ordered locales the generated project serves."""
        if self.use_i18n:
            return SUPPORTED_LOCALES
        return (FALLBACK_LOCALE,)

    @model_validator(mode="after")
    def _default_locale_is_served(self) -> "AnswerModel":
        if self.default_locale not in self.locales:
            raise ValueError(
                f"default_locale {self.default_locale!r} is not one of {list(self.locales)}"
            )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def package_name(self) -> str:
        """npm-safe package name derived from the project name."""
        return slugify(self.project_name) or "app"

    @computed_field  # type: ignore[misc]
    @property
    def cache_name(self) -> str:
        """Service-worker cache name, versioned so a bump evicts old caches."""
        return f"{slugify(self.short_name) or 'app'}-cache-v1"


def resolve(raw_answers: Mapping[str, Optional[str]]) -> AnswerModel:
    """Build an ``AnswerModel`` from raw prompt answers.

    Empty or missing answers take the question's default.  Unknown keys are
    ignored.  The default locale is always ``en``, the first locale served
    in both the single-locale and the internationalized layout.

    Raises:
        ValidationError: If the project name is unusable as a directory name,
            or the answers cannot form a valid model for any other reason.
    """

    def _answer(name: str) -> str:
        value = raw_answers.get(name)
        if value is None or not value.strip():
            return QUESTIONS_BY_NAME[name].default
        return value.strip()

    project_name = _answer("projectName")
    _check_directory_name(project_name)

    use_i18n = _answer("useI18n").lower() in YES_ANSWERS

    try:
        return AnswerModel(
            project_name=project_name,
            short_name=_answer("shortName"),
            description=_answer("description"),
            use_i18n=use_i18n,
            default_locale=FALLBACK_LOCALE,
        )
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid answers: {exc}") from exc


def _check_directory_name(project_name: str) -> None:
    """The project name becomes a directory under the output dir; keep it there."""
    if not project_name:
        raise ValidationError("Project name must not be empty")
    if project_name in (".", ".."):
        raise ValidationError(f"Project name {project_name!r} is not a valid directory name")
    if "/" in project_name or "\\" in project_name:
        raise ValidationError(
            f"Project name {project_name!r} must not contain path separators"
        )
