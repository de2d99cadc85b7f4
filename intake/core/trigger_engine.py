"""
Trigger Engine - Follow-up question expansion from given answers

Responsibilities:
- Derive a trigger key from each answer value
- Fire the matching trigger rule and record 'questionId:key'
- Collect target questions, de-duplicated in first-seen order

Design principles:
- Single pass: triggers of triggered questions are NOT followed here.
  Hosts reach a complete question set by re-invoking apply_triggers()
  after every new batch of answers until a call adds no question they do
  not already hold (see InterviewFlow.commit_answers)
- Unknown answer ids and unknown target ids are ignored, never errors
- Answers are read, never modified
"""

import logging
from typing import Any, List, Optional

from intake.contracts import AnswerMap, Question, SchemaSnapshot
from intake.results import TriggerResult

logger = logging.getLogger(__name__)


def trigger_key_for(question: Question, value: Any) -> Optional[str]:
    """
    Trigger key for an answer value.

    Rules:
    - bool -> 'true' / 'false'
    - str -> the string itself (empty string -> no key)
    - list -> first element, in list order, that the question has a rule for
    - anything else -> no key

    Returns:
        Key string, or None when nothing can fire
    """
    # bool before anything numeric: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, str):
        return value or None

    if isinstance(value, list):
        for option in value:
            if isinstance(option, str) and option and option in question.triggers:
                return option
        return None

    return None


def apply_triggers(snapshot: SchemaSnapshot, answers: AnswerMap) -> TriggerResult:
    """
    One trigger pass over an answer set.

    Args:
        snapshot: Schema snapshot
        answers: Question id -> answer value

    Returns:
        TriggerResult with newly triggered questions (unique by id, rule
        order within answer order) and fired trigger labels (answer order)
    """
    fired_triggers: List[str] = []
    target_ids: List[str] = []
    seen_ids = set()

    for question_id, value in answers.items():
        question = snapshot.get_question(question_id)
        if question is None:
            logger.debug(f"Answer for unknown question '{question_id}' ignored")
            continue

        if not question.triggers:
            continue

        key = trigger_key_for(question, value)
        if key is None or key not in question.triggers:
            continue

        fired_triggers.append(f"{question_id}:{key}")

        for target_id in question.triggers[key]:
            if target_id not in seen_ids:
                seen_ids.add(target_id)
                target_ids.append(target_id)

    questions = []
    for target_id in target_ids:
        target = snapshot.get_question(target_id)
        if target is None:
            logger.debug(f"Trigger target '{target_id}' not in schema, dropped")
            continue
        questions.append(target)

    return TriggerResult(questions=tuple(questions), fired_triggers=tuple(fired_triggers))


class TriggerEngine:
    """
    Loader-backed trigger engine.

    Stateless: every call reads the snapshot from the loader.
    """

    def __init__(self, schema_loader):
        """
        Args:
            schema_loader: SchemaLoader or compatible object

        Raises:
            TypeError: If schema_loader has no callable load()
        """
        if not callable(getattr(schema_loader, "load", None)):
            raise TypeError("schema_loader must have callable load() method")

        self.schema_loader = schema_loader
        logger.info("Trigger Engine initialized")

    def apply_triggers(self, answers: AnswerMap) -> TriggerResult:
        """
        See apply_triggers().

        Raises:
            SchemaUnavailable: If the loader cannot produce a snapshot
        """
        result = apply_triggers(self.schema_loader.load(), answers)
        if result.fired_triggers:
            logger.info(f"Fired triggers: {', '.join(result.fired_triggers)}")
        return result
