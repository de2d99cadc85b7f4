"""
Tag Router - Tag, stage and field-metadata lookups over the schema

Simple read-only helpers. Used by the complexity recommender (answered
weight), the hosts (tag listings, grouping) and the review screen.
"""

from typing import Dict, Iterable, List, Sequence

from intake.contracts import Question, TagSchema


def questions_by_tag(questions: Iterable[Question], tag: str) -> List[Question]:
    return [q for q in questions if tag in q.tags]


def questions_by_tags(questions: Iterable[Question], tags: Iterable[str]) -> List[Question]:
    """Questions carrying any of the given tags, original order kept."""
    wanted = set(tags)
    return [q for q in questions if wanted.intersection(q.tags)]


def questions_by_stage(questions: Iterable[Question], stage: str) -> List[Question]:
    return [q for q in questions if q.stage == stage]


def group_by_primary_tag(questions: Iterable[Question]) -> Dict[str, List[Question]]:
    """
    Group questions by their first tag.

    Questions without tags are grouped under 'untagged'. Group order
    follows first appearance.
    """
    groups: Dict[str, List[Question]] = {}
    for question in questions:
        key = question.primary_tag or "untagged"
        groups.setdefault(key, []).append(question)
    return groups


def get_related_fields(tag_schema: TagSchema, field_id: str) -> List[str]:
    metadata = tag_schema.field_metadata.get(field_id)
    return list(metadata.related_fields) if metadata else []


def get_field_weight(tag_schema: TagSchema, field_id: str) -> int:
    """Weight used in complexity scoring (1 when no metadata exists)."""
    metadata = tag_schema.field_metadata.get(field_id)
    return metadata.weight if metadata else 1


def calculate_answered_weight(tag_schema: TagSchema, answered_field_ids: Sequence[str]) -> int:
    return sum(get_field_weight(tag_schema, field_id) for field_id in answered_field_ids)


def available_tags(tag_schema: TagSchema) -> List[str]:
    return list(tag_schema.tags.keys())
