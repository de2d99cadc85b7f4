"""
Rules Engine - skip_if evaluation at answer time

Responsibilities:
- Evaluate a question's skip_if condition against committed answers
- Support the JSON expression DSL and the legacy string conditions

The question flow resolver never evaluates skip_if. Hosts call
evaluate_skip() when choosing the next question to ask.

Supported JSON operators: eq, neq, has, not, and, or
Supported legacy forms: 'a == "x"', 'a != 1', 'a && b', 'a || b', 'a'

Design principles:
- Pure: answers are read, never modified
- Fail open: an expression that cannot be evaluated never hides a question
"""

import logging
from typing import Any, Iterable, List

from intake.contracts import AnswerMap, Question

logger = logging.getLogger(__name__)


def evaluate_skip(question: Question, answers: AnswerMap) -> bool:
    """
    True if the question should be skipped given the answers.

    Questions without skip_if are never skipped. Evaluation errors are
    logged and the question is shown.
    """
    if not question.skip_if:
        return False

    try:
        return evaluate_expression(question.skip_if, answers)
    except (TypeError, ValueError, KeyError, IndexError) as e:
        logger.error(f"Error evaluating skip_if for question '{question.id}': {e}")
        return False


def filter_skipped(questions: Iterable[Question], answers: AnswerMap) -> List[Question]:
    """Questions whose skip_if does not hold."""
    return [q for q in questions if not evaluate_skip(q, answers)]


def evaluate_expression(expression: Any, answers: AnswerMap) -> bool:
    """
    Evaluate a JSON or legacy string expression.

    Args:
        expression: dict expression, legacy condition string, or other
        answers: Current answer map

    Returns:
        bool: Evaluation result (unknown shapes evaluate to False)
    """
    if isinstance(expression, dict):
        return _evaluate_dsl(expression, answers)

    if isinstance(expression, str):
        return _evaluate_legacy(expression, answers)

    logger.warning(f"Unsupported skip_if expression type: {type(expression).__name__}")
    return False


def _evaluate_dsl(dsl: dict, answers: AnswerMap) -> bool:
    # Logical operators
    if "and" in dsl:
        return all(evaluate_expression(sub, answers) for sub in dsl["and"])

    if "or" in dsl:
        return any(evaluate_expression(sub, answers) for sub in dsl["or"])

    if "not" in dsl:
        return not evaluate_expression(dsl["not"], answers)

    # Comparison operators
    if "eq" in dsl:
        field, expected = dsl["eq"]
        return _values_equal(answers.get(field), expected)

    if "neq" in dsl:
        field, expected = dsl["neq"]
        return not _values_equal(answers.get(field), expected)

    # Collection operator
    if "has" in dsl:
        field, expected = dsl["has"]
        value = answers.get(field)
        if isinstance(value, list):
            return expected in value
        return False

    logger.warning(f"Unknown skip_if operator: {list(dsl.keys())}")
    return False


def _evaluate_legacy(condition: str, answers: AnswerMap) -> bool:
    """
    Legacy string conditions.

    '&&' binds before '||' is considered, matching the old parser: a
    condition containing '&&' is split on it first.
    """
    if "&&" in condition:
        return all(_evaluate_legacy(part.strip(), answers) for part in condition.split("&&"))

    if "||" in condition:
        return any(_evaluate_legacy(part.strip(), answers) for part in condition.split("||"))

    if "!=" in condition:
        field, raw = (part.strip() for part in condition.split("!=", 1))
        return not _values_equal(answers.get(field), parse_literal(raw))

    if "==" in condition:
        field, raw = (part.strip() for part in condition.split("==", 1))
        return _values_equal(answers.get(field), parse_literal(raw))

    # Bare field name: truthiness
    return bool(answers.get(condition.strip()))


def _values_equal(actual: Any, expected: Any) -> bool:
    """Strict equality: True == 1 is not a match."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    return actual == expected


def parse_literal(raw: str) -> Any:
    """
    Parse a literal from a legacy condition.

    Examples:
        >>> parse_literal('"cloud"')
        'cloud'
        >>> parse_literal('true')
        True
        >>> parse_literal('3')
        3
    """
    text = raw.strip()

    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]

    if text == "true":
        return True
    if text == "false":
        return False
    if text == "null":
        return None

    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text
