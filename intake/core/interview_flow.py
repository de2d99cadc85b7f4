"""
Interview Flow - Host-side question loop over the intake engine (Functional Core)

Responsibilities:
- Build the initial question set for a tier and tag selection
- Merge answer batches and expand triggers to a fixed point
- Pick the next question (skip_if evaluated here, at answer time)
- Validate the collected answers before a document is generated

Design principles:
- State in, state out: InterviewState is frozen, every call returns a new one
- Engine modules are cached (stateless), interview state never is
- Trigger expansion contract: the trigger engine runs one pass per call,
  so commit_answers() re-invokes it until a pass adds no question id the
  state does not already hold. Active ids only grow and are bounded by the
  schema size, so trigger cycles terminate.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from intake.contracts import AnswerMap, Question
from intake.core.complexity import normalize_tier
from intake.core.requirements_validator import is_missing
from intake.core.rules_engine import evaluate_skip
from intake.results import ValidationReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterviewState:
    """
    Snapshot of one interview.

    Attributes:
        tier: Tier label as requested
        tags: Tag filters used for the initial question set
        answers: Committed answers (fresh dict per state, never shared)
        active_question_ids: Initial questions followed by triggered ones,
            in the order they became active
        fired_triggers: Every trigger label fired so far, first-fired order
    """
    tier: str
    tags: Tuple[str, ...] = ()
    answers: Dict[str, Any] = field(default_factory=dict)
    active_question_ids: Tuple[str, ...] = ()
    fired_triggers: Tuple[str, ...] = ()

    @property
    def canonical_tier(self) -> str:
        return normalize_tier(self.tier)

    def to_json(self) -> dict:
        return {
            "tier": self.tier,
            "canonical_tier": self.canonical_tier,
            "tags": list(self.tags),
            "answers": dict(self.answers),
            "active_question_ids": list(self.active_question_ids),
            "fired_triggers": list(self.fired_triggers),
        }


class InterviewFlow:
    """
    Orchestrates resolver, trigger engine and validator for one host.

    Thin orchestration layer: selection, expansion and validation rules
    live in the engine modules.
    """

    def __init__(self, resolver, trigger_engine, validator):
        """
        Args:
            resolver: QuestionFlowResolver (stateless, safe to cache)
            trigger_engine: TriggerEngine (stateless, safe to cache)
            validator: RequirementsValidator (stateless, safe to cache)

        Raises:
            TypeError: If any module lacks its required method
        """
        self._validate_modules(resolver, trigger_engine, validator)

        self.resolver = resolver
        self.trigger_engine = trigger_engine
        self.validator = validator

        logger.info("Interview Flow initialized")

    def _validate_modules(self, resolver, trigger_engine, validator):
        """Validate module interfaces"""
        if not callable(getattr(resolver, "resolve", None)):
            raise TypeError("resolver must have callable resolve() method")

        if not callable(getattr(resolver, "snapshot", None)):
            raise TypeError("resolver must have callable snapshot() method")

        if not callable(getattr(trigger_engine, "apply_triggers", None)):
            raise TypeError("trigger_engine must have callable apply_triggers() method")

        if not callable(getattr(validator, "validate", None)):
            raise TypeError("validator must have callable validate() method")

    # =========================================================================
    # Public API
    # =========================================================================

    def start(self, tier: str, tags: Optional[Iterable[str]] = None) -> InterviewState:
        """
        Initial state for a tier and optional tag filters.

        Raises:
            SchemaUnavailable: If the schema cannot be loaded
        """
        tag_tuple = tuple(tags) if tags else ()
        questions = self.resolver.resolve(tier, tag_tuple)

        logger.info(
            f"Interview started: tier {tier!r} -> '{normalize_tier(tier)}', "
            f"{len(questions)} initial questions"
        )

        return InterviewState(
            tier=tier,
            tags=tag_tuple,
            answers={},
            active_question_ids=tuple(q.id for q in questions),
        )

    def commit_answers(self, state: InterviewState, batch: AnswerMap) -> InterviewState:
        """
        Merge a batch of answers and expand triggers to a fixed point.

        Args:
            state: Current interview state
            batch: Question id -> answer value (later values win)

        Returns:
            New InterviewState; the input state is left untouched

        Raises:
            SchemaUnavailable: If the schema cannot be loaded
        """
        answers = dict(state.answers)
        answers.update(batch)

        active_ids = list(state.active_question_ids)
        known_ids = set(active_ids)
        fired = list(state.fired_triggers)

        while True:
            result = self.trigger_engine.apply_triggers(answers)

            for label in result.fired_triggers:
                if label not in fired:
                    fired.append(label)

            new_ids = [q.id for q in result.questions if q.id not in known_ids]
            if not new_ids:
                break

            logger.info(f"Triggered questions activated: {', '.join(new_ids)}")
            active_ids.extend(new_ids)
            known_ids.update(new_ids)

        return replace(
            state,
            answers=answers,
            active_question_ids=tuple(active_ids),
            fired_triggers=tuple(fired),
        )

    def active_questions(self, state: InterviewState) -> List[Question]:
        """Active questions in activation order (ids missing from the schema dropped)."""
        snapshot = self.resolver.snapshot()
        questions = []
        for q_id in state.active_question_ids:
            question = snapshot.get_question(q_id)
            if question is not None:
                questions.append(question)
        return questions

    def pending_questions(self, state: InterviewState) -> List[Question]:
        """Active questions still unanswered and not skipped by skip_if."""
        pending = []
        for question in self.active_questions(state):
            if not is_missing(state.answers.get(question.id)):
                continue
            if evaluate_skip(question, state.answers):
                logger.debug(f"Question '{question.id}' skipped by skip_if")
                continue
            pending.append(question)
        return pending

    def next_question(self, state: InterviewState) -> Optional[Question]:
        """Next question to ask, or None when nothing is pending."""
        pending = self.pending_questions(state)
        return pending[0] if pending else None

    def is_complete(self, state: InterviewState) -> bool:
        return not self.pending_questions(state)

    def validate(self, state: InterviewState) -> ValidationReport:
        """Required-field report for the state's tier."""
        return self.validator.validate(state.answers, state.tier)
