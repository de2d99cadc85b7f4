"""
Schema Consistency Validation Tests

Purpose: Ensure the shipped questionnaire and tag schema stay synchronized
- Pre-TDD_Client_Questionnaire_v2.0.json: questions, triggers, skip_if
- Universal_Tag_Schema_v1.1.json: tag definitions and per-field tiers

This test suite prevents schema drift and catches mismatches early.

Run with: pytest tests/test_schema_consistency.py -v
"""

import json
from pathlib import Path

from intake.core.complexity import CANONICAL_TIERS
from intake.core.schema_loader import QUESTIONNAIRE_FILENAME, TAG_SCHEMA_FILENAME, build_snapshot

SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

BASE_TIER_FIELDS = {"doc.version", "project.name", "summary.problem", "summary.solution"}


def skip_if_fields(expression):
    """Field ids referenced by a skip_if expression"""
    if isinstance(expression, dict):
        fields = set()
        for operator, operand in expression.items():
            if operator in ("and", "or"):
                for sub in operand:
                    fields |= skip_if_fields(sub)
            elif operator == "not":
                fields |= skip_if_fields(operand)
            else:
                fields.add(operand[0])
        return fields

    for separator in ("!=", "=="):
        if separator in expression:
            return {expression.split(separator, 1)[0].strip()}
    return {expression.strip()}


class TestSchemaConsistency:
    """Validates consistency between the two schema files"""

    @classmethod
    def setup_class(cls):
        """Load both schema files once"""
        with open(SCHEMA_DIR / QUESTIONNAIRE_FILENAME, 'r', encoding='utf-8') as f:
            cls.questionnaire = json.load(f)
        with open(SCHEMA_DIR / TAG_SCHEMA_FILENAME, 'r', encoding='utf-8') as f:
            cls.tag_schema = json.load(f)

        cls.questions = cls.questionnaire["questions"]
        cls.question_ids = {q["id"] for q in cls.questions}
        cls.field_metadata = cls.tag_schema["field_metadata"]

    def test_loader_accepts_schema(self):
        snapshot = build_snapshot(self.questionnaire, self.tag_schema)

        assert len(snapshot.questions) == len(self.questions)

    def test_declared_tiers_are_canonical(self):
        assert tuple(self.questionnaire["complexity_levels"]) == CANONICAL_TIERS

    def test_every_question_has_metadata(self):
        missing = self.question_ids - set(self.field_metadata)

        assert not missing, f"Questions without field metadata: {sorted(missing)}"

    def test_no_orphan_metadata(self):
        orphans = set(self.field_metadata) - self.question_ids

        assert not orphans, f"Field metadata for unknown questions: {sorted(orphans)}"

    def test_metadata_tiers_are_canonical(self):
        for field_id, meta in self.field_metadata.items():
            unknown = set(meta["complexity_levels"]) - set(CANONICAL_TIERS)
            assert not unknown, f"{field_id} lists unknown tiers {unknown}"

    def test_only_foundation_fields_in_base_tier(self):
        base_fields = {
            field_id for field_id, meta in self.field_metadata.items()
            if "base" in meta["complexity_levels"]
        }

        assert base_fields == BASE_TIER_FIELDS

    def test_tiers_are_cumulative(self):
        """A field listed for a tier is listed for every broader tier"""
        for field_id, meta in self.field_metadata.items():
            levels = meta["complexity_levels"]
            first = min(CANONICAL_TIERS.index(level) for level in levels)
            assert levels == list(CANONICAL_TIERS[first:]), field_id

    def test_question_tags_are_defined(self):
        defined = set(self.tag_schema["tags"])
        for question in self.questions:
            unknown = set(question["tags"]) - defined
            assert not unknown, f"{question['id']} uses undefined tags {unknown}"

    def test_metadata_tags_match_questions(self):
        for question in self.questions:
            assert self.field_metadata[question["id"]]["tags"] == question["tags"], question["id"]

    def test_related_fields_exist(self):
        for field_id, meta in self.field_metadata.items():
            unknown = set(meta.get("related_fields", [])) - self.question_ids
            assert not unknown, f"{field_id} relates to unknown fields {unknown}"

    def test_trigger_targets_exist(self):
        for question in self.questions:
            for key, targets in question.get("triggers", {}).items():
                unknown = set(targets) - self.question_ids
                assert not unknown, f"{question['id']}:{key} targets unknown questions {unknown}"

    def test_trigger_keys_are_answerable(self):
        """Trigger keys match an option, or 'true'/'false' for booleans"""
        for question in self.questions:
            triggers = question.get("triggers", {})
            if question["type"] == "boolean":
                allowed = {"true", "false"}
            else:
                allowed = set(question.get("options", []))
            for key in triggers:
                assert key in allowed, f"{question['id']} trigger key '{key}' cannot be answered"

    def test_skip_if_references_exist(self):
        for question in self.questions:
            if "skip_if" in question:
                unknown = skip_if_fields(question["skip_if"]) - self.question_ids
                assert not unknown, f"{question['id']} skip_if references {unknown}"

    def test_choice_questions_have_options(self):
        for question in self.questions:
            if question["type"] in ("select", "multiselect"):
                assert question.get("options"), question["id"]

    def test_question_stages_declared(self):
        stages = set(self.questionnaire["stages"])
        for question in self.questions:
            assert question["stage"] in stages, question["id"]
