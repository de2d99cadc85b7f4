"""
Semantic contracts for the Pre-TDD intake engine.

This module defines immutable data structures that serve as contracts
between modules. These are NOT validators - they define shape and
semantics without enforcing rules. Structural checks live in the
Schema Loader.

Design principles:
- Frozen dataclasses (immutable after creation)
- No validation logic (contracts, not validators)
- No dependencies on other modules
- Definition layer only (no enforcement)

Contents:
- Question: A single interview item from the questionnaire
- Questionnaire: Ordered question definitions plus declared stages/tiers
- FieldMetadata / TagInfo / TagSchema: Tag and per-field tier metadata
- SchemaSnapshot: The (Questionnaire, TagSchema) pair handed to the core

Usage:
    from intake.contracts import Question, SchemaSnapshot
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


# Answer values accepted by the core
AnswerValue = Union[bool, str, List[str], None]
AnswerMap = Dict[str, Any]


@dataclass(frozen=True)
class Question:
    """
    Immutable question definition.

    Attributes:
        id: Stable key (e.g. 'deployment.model'). Referenced by trigger
            targets, field metadata and validation.
        prompt: Question text shown to the user. Stored under the
            'question' key in the schema file.
        tags: Category labels. Order is kept only so the first tag can act
            as the primary tag for grouping; membership is what matters.
        stage: Interview stage the question belongs to ('core', 'review',
            'deep_dive').
        type: Answer type hint ('text', 'boolean', 'select', 'multiselect').
        triggers: Answer-value key -> tuple of question ids to surface when
            that value is given. Keys are strings: 'true'/'false' for
            booleans, the literal option otherwise.
        skip_if: Raw skip condition (JSON expression or legacy string).
            Not evaluated by the resolver.
        options: Fixed enumeration of selectable values, or None.
        hint, validation, examples, help: Passed through untouched.

    Note:
        triggers is a plain dict for lookup speed. Nothing in the engine
        mutates it; treat it as read-only.
    """
    id: str
    prompt: str
    tags: Tuple[str, ...] = ()
    stage: str = "core"
    type: str = "text"
    triggers: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    skip_if: Any = None
    options: Optional[Tuple[str, ...]] = None
    hint: Optional[str] = None
    validation: Optional[Dict[str, Any]] = None
    examples: Optional[Tuple[str, ...]] = None
    help: Optional[Dict[str, Any]] = None

    @property
    def primary_tag(self) -> Optional[str]:
        return self.tags[0] if self.tags else None

    def to_dict(self) -> dict:
        """
        Schema-shaped dict for hosts (JSON responses, display).

        Optional keys are only emitted when the question carries them.
        """
        data = {
            "id": self.id,
            "question": self.prompt,
            "stage": self.stage,
            "type": self.type,
            "tags": list(self.tags),
        }
        if self.triggers:
            data["triggers"] = {key: list(ids) for key, ids in self.triggers.items()}
        if self.skip_if is not None:
            data["skip_if"] = self.skip_if
        if self.options is not None:
            data["options"] = list(self.options)
        if self.hint is not None:
            data["hint"] = self.hint
        if self.validation is not None:
            data["validation"] = self.validation
        if self.examples is not None:
            data["examples"] = list(self.examples)
        if self.help is not None:
            data["help"] = self.help
        return data


@dataclass(frozen=True)
class Questionnaire:
    """
    Immutable questionnaire snapshot.

    Attributes:
        version: Schema version string (e.g. '2.0')
        stages: Declared stages, in interview order
        complexity_levels: Declared canonical tiers
        questions: Every question, in questionnaire order
    """
    version: str
    stages: Tuple[str, ...]
    complexity_levels: Tuple[str, ...]
    questions: Tuple[Question, ...]


@dataclass(frozen=True)
class FieldMetadata:
    """Per-question metadata from the tag schema."""
    tags: Tuple[str, ...] = ()
    related_fields: Tuple[str, ...] = ()
    complexity_levels: Tuple[str, ...] = ()
    weight: int = 1


@dataclass(frozen=True)
class TagInfo:
    label: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TagSchema:
    """
    Tag definitions plus the Field-Metadata table.

    A question id with no entry in field_metadata applies to every tier.
    """
    version: str
    tags: Dict[str, TagInfo] = field(default_factory=dict)
    field_metadata: Dict[str, FieldMetadata] = field(default_factory=dict)


@dataclass(frozen=True)
class SchemaSnapshot:
    """
    The read-only schema pair handed to every core operation.

    One snapshot is loaded per flow and may be shared between sessions.
    An id index is built once at construction.
    """
    questionnaire: Questionnaire
    tag_schema: TagSchema

    def __post_init__(self):
        index = {q.id: q for q in self.questionnaire.questions}
        object.__setattr__(self, "_index", index)

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self.questionnaire.questions

    def get_question(self, question_id: str) -> Optional[Question]:
        """Question for id, or None if the schema does not define it."""
        return self._index.get(question_id)

    def get_field_metadata(self, question_id: str) -> Optional[FieldMetadata]:
        return self.tag_schema.field_metadata.get(question_id)
