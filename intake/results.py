"""
Result types returned by the intake engine.

These are the ONLY return types handed back to hosts by the resolver,
trigger engine and requirements validator. All are frozen; collections
are tuples so a result can be shared without copying.
"""

from dataclasses import dataclass
from typing import Tuple

from intake.contracts import Question


@dataclass(frozen=True)
class QuestionFlow:
    """
    Resolved question set plus the parameters that produced it.

    Returned by: QuestionFlowResolver.build_flow

    Attributes:
        questions: Applicable questions, questionnaire order
        tier: Tier label as requested by the caller
        canonical_tier: Tier after alias normalization
        tags: Tag filters applied (empty tuple = none)
    """
    questions: Tuple[Question, ...]
    tier: str
    canonical_tier: str
    tags: Tuple[str, ...] = ()

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "metadata": {
                "complexity": self.tier,
                "canonical_complexity": self.canonical_tier,
                "tags": list(self.tags),
                "total_questions": self.total_questions,
            },
        }


@dataclass(frozen=True)
class TriggerResult:
    """
    Outcome of one trigger pass over an answer set.

    Returned by: TriggerEngine.apply_triggers

    Attributes:
        questions: Newly triggered questions, unique by id, first-seen order
        fired_triggers: 'questionId:value' labels, in answer order
    """
    questions: Tuple[Question, ...] = ()
    fired_triggers: Tuple[str, ...] = ()

    @property
    def question_ids(self) -> Tuple[str, ...]:
        return tuple(q.id for q in self.questions)

    def to_dict(self) -> dict:
        return {
            "newly_triggered_questions": [q.to_dict() for q in self.questions],
            "fired_triggers": list(self.fired_triggers),
        }


@dataclass(frozen=True)
class ValidationReport:
    """
    Completeness report for an answer set.

    Returned by: RequirementsValidator.validate, check_project_data

    Attributes:
        valid: True iff missing_fields is empty and no other error was found
        errors: Human-readable messages, one per problem
        missing_fields: Ids of required questions left unanswered,
            resolver order
    """
    valid: bool
    errors: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "missing_fields": list(self.missing_fields),
        }
