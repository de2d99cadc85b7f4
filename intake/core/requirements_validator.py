"""
Requirements Validator - Required-field completeness per tier

Responsibilities:
- Derive the required field set for a tier from the resolver
- Report every required field that has no usable answer
- Check project data shape (dates, name, version) before generation

Design principles:
- Never raises for a tier or an answer set
- Schema failures become a failed report, not an exception, so callers
  running validation in a loop can render every outcome the same way
- Presence only: answer types are not coerced or checked here
"""

import logging
from typing import Any, Dict, Optional

from intake.contracts import AnswerMap, SchemaSnapshot
from intake.core.question_flow import resolve_questions
from intake.core.schema_loader import SchemaUnavailable
from intake.results import ValidationReport
from intake.utils.date_validation import validate_date_fields

logger = logging.getLogger(__name__)


# Answer fields that, when present, must hold ISO-8601 dates
DATE_FIELDS = (
    "doc.created_date",
    "doc.updated_date",
    "doc.modified_date",
    "project.start_date",
    "project.end_date",
    "project.launch_date",
    "implementation.start_date",
    "implementation.end_date",
    "implementation.deadline",
    "milestone.target_date",
    "milestone.deadline",
    "review.due_date",
    "review.scheduled_date",
)


def is_missing(value: Any) -> bool:
    """
    True if an answer value counts as unanswered.

    Only None and the empty string are missing. False, 0 and [] are
    deliberate answers.
    """
    return value is None or (isinstance(value, str) and value == "")


def missing_field_report(required_fields: Dict[str, str], answers: Optional[AnswerMap]) -> ValidationReport:
    """
    Compare answers against a required-field mapping (id -> prompt).

    Errors and missing ids follow the mapping's order.
    """
    answers = answers or {}
    errors = []
    missing_fields = []

    for field_id, prompt in required_fields.items():
        if is_missing(answers.get(field_id)):
            missing_fields.append(field_id)
            errors.append(f"Missing required field: {field_id} - {prompt}")

    return ValidationReport(
        valid=not missing_fields,
        errors=tuple(errors),
        missing_fields=tuple(missing_fields),
    )


def validate_requirements(
    snapshot: SchemaSnapshot,
    answers: Optional[AnswerMap],
    tier: Optional[str],
) -> ValidationReport:
    """Snapshot form of RequirementsValidator.validate()."""
    required = {q.id: q.prompt for q in resolve_questions(snapshot, tier)}
    return missing_field_report(required, answers)


class RequirementsValidator:
    """
    Validates answer sets against the required fields of a tier.

    Every question the resolver returns for the tier (no tag filter) is
    required.
    """

    def __init__(self, resolver):
        """
        Args:
            resolver: QuestionFlowResolver or compatible object

        Raises:
            TypeError: If resolver has no callable resolve()
        """
        if not callable(getattr(resolver, "resolve", None)):
            raise TypeError("resolver must have callable resolve() method")

        self.resolver = resolver
        logger.info("Requirements Validator initialized")

    def required_fields(self, tier: Optional[str]) -> Dict[str, str]:
        """
        Legacy flattened requirement list: question id -> prompt.

        Raises:
            SchemaUnavailable: If the schema cannot be loaded
        """
        return {q.id: q.prompt for q in self.resolver.resolve(tier)}

    def validate(self, answers: Optional[AnswerMap], tier: Optional[str]) -> ValidationReport:
        """
        Report unanswered required fields for tier.

        Args:
            answers: Question id -> answer value (None treated as empty)
            tier: Any tier label

        Returns:
            ValidationReport. On schema failure: valid=False with a single
            descriptive error and no missing fields.
        """
        try:
            required = self.required_fields(tier)
        except SchemaUnavailable as e:
            logger.warning(f"Validation could not load schema: {e}")
            return ValidationReport(
                valid=False,
                errors=(f"Validation failed: {e}",),
                missing_fields=(),
            )

        report = missing_field_report(required, answers)

        logger.info(
            f"Validated answers for tier {tier!r}: "
            f"{len(required) - len(report.missing_fields)}/{len(required)} required fields present"
        )
        return report


def check_project_data(answers: Any) -> ValidationReport:
    """
    Shape checks run before a document is generated.

    Rules:
    - answers must be a mapping
    - known date fields, when given, must be valid ISO-8601
    - project.name, when given, must be a non-empty string
    - doc.version, when given, must be a non-empty string

    Returns:
        ValidationReport (missing_fields always empty)
    """
    if not isinstance(answers, dict):
        return ValidationReport(valid=False, errors=("project_data must be a valid object",))

    errors = list(validate_date_fields(answers, DATE_FIELDS))

    if "project.name" in answers:
        name = answers["project.name"]
        if not isinstance(name, str) or not name.strip():
            errors.append("project.name must be a non-empty string")

    if "doc.version" in answers:
        version = answers["doc.version"]
        if not isinstance(version, str) or not version:
            errors.append("doc.version must be a non-empty string")

    return ValidationReport(valid=not errors, errors=tuple(errors))
