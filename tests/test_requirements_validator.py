"""
Tests for the Requirements Validator and project data checks.
"""

from unittest.mock import Mock

import pytest

from intake.core.complexity import TIER_ALIASES
from intake.core.question_flow import QuestionFlowResolver
from intake.core.requirements_validator import (
    RequirementsValidator,
    check_project_data,
    is_missing,
    missing_field_report,
    validate_requirements,
)
from intake.core.schema_loader import SchemaLoader, SchemaUnavailable


QUESTIONS = [
    {"id": "project.name", "question": "Project name?"},
    {"id": "privacy.pii", "question": "Handles PII?", "type": "boolean"},
    {"id": "privacy.regulations", "question": "Regulations?", "type": "multiselect"},
    {"id": "ops.monitoring", "question": "Monitoring?"},
]

FIELD_METADATA = {
    "project.name": {"complexity_levels": ["base", "enterprise"]},
    "privacy.pii": {"complexity_levels": ["enterprise"]},
    "privacy.regulations": {"complexity_levels": ["enterprise"]},
    "ops.monitoring": {"complexity_levels": ["minimal"]},
}

TIER_LABELS = ["base"] + list(TIER_ALIASES)


@pytest.fixture
def snapshot(make_snapshot):
    return make_snapshot(QUESTIONS, FIELD_METADATA)


@pytest.fixture
def validator(snapshot):
    return RequirementsValidator(QuestionFlowResolver(SchemaLoader.from_snapshot(snapshot)))


class TestIsMissing:

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [False, 0, [], "x", True, " "])
    def test_present(self, value):
        assert not is_missing(value)


class TestValidate:

    def test_complete_answers_valid(self, validator):
        report = validator.validate({
            "project.name": "Portal",
            "privacy.pii": True,
            "privacy.regulations": ["gdpr"],
        }, "enterprise")

        assert report.valid
        assert report.errors == ()
        assert report.missing_fields == ()

    def test_missing_fields_in_resolver_order(self, validator):
        report = validator.validate({"privacy.regulations": ["gdpr"]}, "enterprise")

        assert not report.valid
        assert report.missing_fields == ("project.name", "privacy.pii")
        assert report.errors == (
            "Missing required field: project.name - Project name?",
            "Missing required field: privacy.pii - Handles PII?",
        )

    def test_false_and_empty_list_are_present(self, validator):
        report = validator.validate({
            "project.name": "Portal",
            "privacy.pii": False,
            "privacy.regulations": [],
        }, "enterprise")

        assert report.valid

    def test_none_and_empty_string_are_missing(self, validator):
        report = validator.validate({"project.name": "", "privacy.pii": None}, "enterprise")

        assert report.missing_fields == ("project.name", "privacy.pii", "privacy.regulations")

    def test_answers_none_treated_as_empty(self, validator):
        report = validator.validate(None, "base")

        assert report.missing_fields == ("project.name",)

    def test_unknown_tier_uses_base_requirements(self, validator):
        assert validator.validate({}, "galactic") == validator.validate({}, "base")

    def test_extra_answers_ignored(self, validator):
        report = validator.validate({"project.name": "Portal", "other": "x"}, "base")

        assert report.valid

    def test_required_fields_mapping(self, validator):
        assert validator.required_fields("enterprise") == {
            "project.name": "Project name?",
            "privacy.pii": "Handles PII?",
            "privacy.regulations": "Regulations?",
        }

    def test_complete_for_every_tier(self, validator, snapshot):
        # Answering everything the resolver returns always validates
        for tier in TIER_LABELS:
            answers = {field_id: "x" for field_id in validator.required_fields(tier)}
            assert validator.validate(answers, tier).valid

    @pytest.mark.parametrize("tier", TIER_LABELS)
    def test_dropping_one_field_reports_exactly_that_field(self, validator, tier):
        complete = {field_id: "x" for field_id in validator.required_fields(tier)}

        for field_id in complete:
            answers = {k: v for k, v in complete.items() if k != field_id}
            report = validator.validate(answers, tier)

            assert not report.valid
            assert report.missing_fields == (field_id,)

    def test_pure_function_matches_class(self, validator, snapshot):
        answers = {"privacy.pii": True}

        assert validate_requirements(snapshot, answers, "enterprise") == \
            validator.validate(answers, "enterprise")


class TestSchemaFailure:

    def test_schema_unavailable_becomes_report(self):
        loader = Mock()
        loader.load.side_effect = SchemaUnavailable("file not found")
        validator = RequirementsValidator(QuestionFlowResolver(loader))

        report = validator.validate({"project.name": "Portal"}, "base")

        assert not report.valid
        assert report.missing_fields == ()
        assert len(report.errors) == 1
        assert report.errors[0].startswith("Validation failed: ")
        assert "file not found" in report.errors[0]

    def test_missing_directory(self, tmp_path):
        resolver = QuestionFlowResolver(SchemaLoader(tmp_path / "missing"))

        report = RequirementsValidator(resolver).validate({}, "base")

        assert not report.valid

    def test_requires_resolver(self):
        with pytest.raises(TypeError):
            RequirementsValidator(object())


class TestMissingFieldReport:

    def test_report_follows_mapping_order(self):
        report = missing_field_report({"b": "B?", "a": "A?"}, {})

        assert report.missing_fields == ("b", "a")
        assert report.to_dict() == {
            "valid": False,
            "errors": ["Missing required field: b - B?", "Missing required field: a - A?"],
            "missing_fields": ["b", "a"],
        }


class TestShippedScenario:

    def test_base_tier_missing_summary(self, shipped_loader):
        validator = RequirementsValidator(QuestionFlowResolver(shipped_loader))

        report = validator.validate({"doc.version": "1.0", "project.name": "Portal"}, "base")

        assert not report.valid
        assert list(report.missing_fields) == ["summary.problem", "summary.solution"]

    @pytest.mark.parametrize("tier", TIER_LABELS)
    def test_each_required_field_is_reported_when_dropped(self, shipped_loader, tier):
        validator = RequirementsValidator(QuestionFlowResolver(shipped_loader))
        complete = {field_id: "x" for field_id in validator.required_fields(tier)}

        assert complete
        for field_id in complete:
            answers = dict(complete)
            del answers[field_id]
            report = validator.validate(answers, tier)

            assert not report.valid, field_id
            assert report.missing_fields == (field_id,)


class TestCheckProjectData:

    def test_not_a_mapping(self):
        report = check_project_data(["project.name"])

        assert not report.valid
        assert report.errors == ("project_data must be a valid object",)

    def test_valid_data(self):
        report = check_project_data({
            "project.name": "Portal",
            "doc.version": "1.0",
            "doc.created_date": "2025-10-08",
            "project.launch_date": "2026-01-15T09:30:00Z",
        })

        assert report.valid
        assert report.missing_fields == ()

    def test_invalid_date(self):
        report = check_project_data({"doc.created_date": "2025-02-30"})

        assert not report.valid
        assert report.errors == ("doc.created_date: Day must be between 01 and 28 for 2025-02, got 30",)

    def test_absent_or_empty_dates_skipped(self):
        assert check_project_data({"doc.created_date": "", "project.end_date": None}).valid

    def test_blank_project_name(self):
        report = check_project_data({"project.name": "   "})

        assert report.errors == ("project.name must be a non-empty string",)

    @pytest.mark.parametrize("version", ["", 1, None])
    def test_bad_doc_version(self, version):
        report = check_project_data({"doc.version": version})

        assert report.errors == ("doc.version must be a non-empty string",)

    def test_all_errors_reported(self):
        report = check_project_data({
            "doc.created_date": "yesterday",
            "project.name": "",
            "doc.version": "",
        })

        assert len(report.errors) == 3
