"""Unit tests for answer resolution (pwa_scaffold.answers).

Tests cover:
- Defaults for empty and missing answers
- Yes/no parsing of the i18n flag
- Derived locales, package name and cache name
- The default locale invariant
- Rejection of unusable project names
- Immutability
"""

from __future__ import annotations

import pydantic
import pytest

from pwa_scaffold.answers import QUESTIONS, AnswerModel, resolve
from pwa_scaffold.errors import ValidationError

pytestmark = pytest.mark.unit


class TestDefaults:
    def test_empty_mapping_uses_every_default(self):
        answers = resolve({})
        assert answers.project_name == "my-pwa-project"
        assert answers.short_name == "my-pwa"
        assert answers.description == "Generated with Leobard's PWA generator"
        assert answers.use_i18n is False
        assert answers.default_locale == "en"

    def test_blank_answers_take_defaults(self):
        answers = resolve({"projectName": "   ", "shortName": "", "description": None})
        assert answers.project_name == "my-pwa-project"
        assert answers.short_name == "my-pwa"
        assert answers.description == "Generated with Leobard's PWA generator"

    def test_values_are_stripped(self):
        answers = resolve({"projectName": "  demo  ", "shortName": " d "})
        assert answers.project_name == "demo"
        assert answers.short_name == "d"

    def test_unknown_keys_ignored(self):
        answers = resolve({"projectName": "demo", "favouriteColour": "blue"})
        assert answers.project_name == "demo"

    def test_question_catalog_order(self):
        assert [q.name for q in QUESTIONS] == [
            "projectName",
            "shortName",
            "description",
            "useI18n",
        ]


class TestI18nFlag:
    @pytest.mark.parametrize("raw", ["y", "Y", "yes", "true", "1"])
    def test_truthy_answers(self, raw):
        assert resolve({"useI18n": raw}).use_i18n is True

    @pytest.mark.parametrize("raw", ["n", "no", "false", "0", "maybe"])
    def test_falsy_answers(self, raw):
        assert resolve({"useI18n": raw}).use_i18n is False

    def test_locales_with_i18n(self):
        answers = resolve({"useI18n": "y"})
        assert answers.locales == ("en", "es")
        assert answers.default_locale == "en"

    def test_locales_without_i18n(self):
        answers = resolve({"useI18n": "n"})
        assert answers.locales == ("en",)

    def test_default_locale_always_in_locales(self):
        for raw in ({"useI18n": "y"}, {"useI18n": "n"}, {"useI18n": "n", "defaultLocale": "es"}):
            answers = resolve(raw)
            assert answers.default_locale in answers.locales


class TestDefaultLocale:
    def test_single_locale_is_english(self):
        answers = resolve({"useI18n": "n", "defaultLocale": "es"})
        assert answers.default_locale == "en"
        assert answers.locales == ("en",)

    def test_stray_locale_answer_ignored(self):
        answers = resolve({"useI18n": "y", "defaultLocale": "es"})
        assert answers.default_locale == "en"
        assert answers.locales == ("en", "es")

    def test_model_accepts_spanish_default_with_i18n(self):
        answers = AnswerModel(project_name="x", short_name="x", use_i18n=True, default_locale="es")
        assert answers.locales == ("en", "es")

    @pytest.mark.parametrize(
        "use_i18n,locale",
        [(True, "fr"), (False, "fr"), (False, "es")],
    )
    def test_model_rejects_default_outside_locales(self, use_i18n, locale):
        with pytest.raises(pydantic.ValidationError, match="default_locale"):
            AnswerModel(
                project_name="x", short_name="x", use_i18n=use_i18n, default_locale=locale
            )


class TestDerivedFields:
    def test_package_name_is_slug(self):
        assert resolve({"projectName": "My PWA Project"}).package_name == "my-pwa-project"

    def test_cache_name_from_short_name(self):
        assert resolve({"shortName": "La Linea"}).cache_name == "la-linea-cache-v1"

    def test_derived_fields_in_dump(self):
        dumped = resolve({"projectName": "demo"}).model_dump()
        assert dumped["locales"] == ("en",)
        assert dumped["package_name"] == "demo"


class TestValidation:
    @pytest.mark.parametrize("name", ["..", ".", "a/b", "a\\b", "../escape"])
    def test_unsafe_project_names_rejected(self, name):
        with pytest.raises(ValidationError):
            resolve({"projectName": name})

    def test_validation_error_is_scaffold_error(self):
        from pwa_scaffold.errors import ScaffoldError

        with pytest.raises(ScaffoldError):
            resolve({"projectName": ".."})


class TestImmutability:
    def test_model_is_frozen(self):
        answers = resolve({})
        with pytest.raises(pydantic.ValidationError):
            answers.project_name = "other"

    def test_direct_construction_requires_project_name(self):
        with pytest.raises(pydantic.ValidationError):
            AnswerModel(project_name="", short_name="x")
