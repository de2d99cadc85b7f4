"""
Question Flow Resolver - Tier and tag based question selection

Responsibilities:
- Normalize the requested tier through the alias table
- Keep questions whose field metadata lists that tier (or that have none)
- Keep questions carrying skip_if (skipping is decided at answer time)
- Narrow to the requested tags when any are given

Design principles:
- Stateless: the schema snapshot comes from the loader on every call
- Deterministic: same snapshot, tier and tags give the same ordered list
- Never fails on tier: unknown labels fall back to the most restrictive tier
- Schema failures propagate (SchemaUnavailable) for the caller to handle
"""

import logging
from typing import Iterable, List, Optional

from intake.contracts import Question, SchemaSnapshot
from intake.core.complexity import normalize_tier
from intake.results import QuestionFlow

logger = logging.getLogger(__name__)


def resolve_questions(
    snapshot: SchemaSnapshot,
    tier: Optional[str],
    tags: Optional[Iterable[str]] = None,
) -> List[Question]:
    """
    Applicable questions for a tier and optional tag filter.

    Filtering, in order:
    1. Tier: keep if the question's field metadata includes the canonical
       tier; keep unconditionally when no metadata entry exists
    2. skip_if: always kept here
    3. Tags: with a non-empty tag set, keep questions sharing at least one
       tag; an empty or absent set filters nothing

    Args:
        snapshot: Schema snapshot
        tier: Any tier label (legacy aliases accepted)
        tags: Optional tag filters

    Returns:
        Questions in questionnaire order
    """
    canonical_tier = normalize_tier(tier)

    questions = [q for q in snapshot.questions if is_applicable_to_tier(snapshot, q, canonical_tier)]

    # Questions with skip_if stay in; the caller evaluates them against answers

    tag_filter = set(tags) if tags else set()
    if tag_filter:
        questions = filter_by_tags(questions, tag_filter)

    return questions


def is_applicable_to_tier(snapshot: SchemaSnapshot, question: Question, canonical_tier: str) -> bool:
    """
    Fail-open tier check.

    Questions predating field metadata have no entry and are visible at
    every tier.
    """
    metadata = snapshot.get_field_metadata(question.id)
    if metadata is None:
        return True
    return canonical_tier in metadata.complexity_levels


def filter_by_tags(questions: Iterable[Question], tags: Iterable[str]) -> List[Question]:
    """Questions whose tags intersect the filter; empty filter returns all."""
    wanted = set(tags)
    if not wanted:
        return list(questions)
    return [q for q in questions if wanted.intersection(q.tags)]


class QuestionFlowResolver:
    """
    Loader-backed resolver.

    Holds a schema loader (anything with a callable load() returning a
    SchemaSnapshot). Keeps no per-flow state.
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
        logger.info("Question Flow Resolver initialized")

    def resolve(self, tier: Optional[str], tags: Optional[Iterable[str]] = None) -> List[Question]:
        """
        Applicable questions for tier/tags. See resolve_questions().

        Raises:
            SchemaUnavailable: If the loader cannot produce a snapshot
        """
        snapshot = self.schema_loader.load()
        questions = resolve_questions(snapshot, tier, tags)
        logger.debug(f"Resolved {len(questions)} questions for tier {tier!r}")
        return questions

    def build_flow(self, tier: Optional[str], tags: Optional[Iterable[str]] = None) -> QuestionFlow:
        """Resolved questions plus the tier/tag metadata hosts display."""
        tag_tuple = tuple(tags) if tags else ()
        return QuestionFlow(
            questions=tuple(self.resolve(tier, tag_tuple)),
            tier=tier if isinstance(tier, str) else "",
            canonical_tier=normalize_tier(tier),
            tags=tag_tuple,
        )

    def snapshot(self) -> SchemaSnapshot:
        """Current schema snapshot (raises SchemaUnavailable)."""
        return self.schema_loader.load()
