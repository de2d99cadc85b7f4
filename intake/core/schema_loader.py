"""
Schema Loader - Reads the questionnaire and tag schema into a snapshot

Responsibilities:
- Load Pre-TDD questionnaire and Universal Tag Schema JSON files
- Validate top-level structure and question definitions
- Build the immutable SchemaSnapshot consumed by the core
- Cache the snapshot per loader instance

Design principles:
- Fail fast: every structural problem is collected and reported at once
- No hidden global state: callers hold a loader (or a snapshot) explicitly
- Every failure surfaces as SchemaUnavailable so callers can choose a
  fallback policy in one place
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from intake.contracts import (
    FieldMetadata,
    Question,
    Questionnaire,
    SchemaSnapshot,
    TagInfo,
    TagSchema,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_DIR = "schemas"
QUESTIONNAIRE_FILENAME = "Pre-TDD_Client_Questionnaire_v2.0.json"
TAG_SCHEMA_FILENAME = "Universal_Tag_Schema_v1.1.json"

QUESTIONNAIRE_REQUIRED_KEYS = ("version", "stages", "complexity_levels", "questions")
TAG_SCHEMA_REQUIRED_KEYS = ("version", "tags", "field_metadata")


class SchemaUnavailable(Exception):
    """The questionnaire or tag schema could not be produced."""


class SchemaLoader:
    """
    Loads and caches a SchemaSnapshot from a schema directory.

    The snapshot is read on first load() and reused afterwards. Call
    reload() to drop the cache.
    """

    def __init__(
        self,
        schema_dir: str = DEFAULT_SCHEMA_DIR,
        questionnaire_filename: str = QUESTIONNAIRE_FILENAME,
        tag_schema_filename: str = TAG_SCHEMA_FILENAME,
    ):
        """
        Args:
            schema_dir: Directory containing both schema files
            questionnaire_filename: Questionnaire file name inside schema_dir
            tag_schema_filename: Tag schema file name inside schema_dir

        Note:
            Nothing is read here. Files are opened on the first load().
        """
        self.schema_dir = Path(schema_dir)
        self.questionnaire_path = self.schema_dir / questionnaire_filename
        self.tag_schema_path = self.schema_dir / tag_schema_filename
        self._snapshot: Optional[SchemaSnapshot] = None
        self._pinned = False

    @classmethod
    def from_snapshot(cls, snapshot: SchemaSnapshot) -> "SchemaLoader":
        """Loader pre-seeded with an already-built snapshot (no file access)."""
        loader = cls()
        loader._snapshot = snapshot
        loader._pinned = True
        return loader

    def load(self) -> SchemaSnapshot:
        """
        Return the cached snapshot, reading the schema files if needed.

        Raises:
            SchemaUnavailable: If either file is missing, unreadable,
                not valid JSON, or structurally invalid
        """
        if self._snapshot is None:
            questionnaire_data = read_schema_file(self.questionnaire_path)
            tag_schema_data = read_schema_file(self.tag_schema_path)
            self._snapshot = build_snapshot(questionnaire_data, tag_schema_data)
            logger.info(
                f"Schema loaded from {self.schema_dir}: "
                f"{len(self._snapshot.questions)} questions, "
                f"{len(self._snapshot.tag_schema.field_metadata)} field metadata entries"
            )
        return self._snapshot

    def reload(self) -> SchemaSnapshot:
        """Drop the cached snapshot and read the files again."""
        if not self._pinned:
            self._snapshot = None
        return self.load()


# =============================================================================
# File access
# =============================================================================

def read_schema_file(path: Path) -> Dict[str, Any]:
    """
    Read one JSON schema document.

    Raises:
        SchemaUnavailable: Missing file, I/O error or invalid JSON
    """
    path = Path(path)
    if not path.exists():
        raise SchemaUnavailable(f"Failed to load schema from {path}: file not found")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SchemaUnavailable(f"Failed to load schema from {path}: {e}") from e

    if not isinstance(data, dict):
        raise SchemaUnavailable(f"Failed to load schema from {path}: top level must be an object")

    return data


# =============================================================================
# Snapshot construction
# =============================================================================

def build_snapshot(questionnaire_data: dict, tag_schema_data: dict) -> SchemaSnapshot:
    """
    Validate raw schema dicts and build a SchemaSnapshot.

    Checks:
    - Required top-level keys exist in both documents
    - Every question has a non-empty string 'id' and a 'question' text
    - Question ids are unique
    - tags is a list of non-empty strings
    - triggers maps string keys to lists of ids

    Raises:
        SchemaUnavailable: If validation fails (all errors reported)
    """
    errors = []

    errors.extend(_missing_keys(questionnaire_data, QUESTIONNAIRE_REQUIRED_KEYS, "Questionnaire"))
    errors.extend(_missing_keys(tag_schema_data, TAG_SCHEMA_REQUIRED_KEYS, "Tag schema"))
    if errors:
        _raise_invalid(errors)

    raw_questions = questionnaire_data["questions"]
    if not isinstance(raw_questions, list):
        _raise_invalid(["Questionnaire 'questions' must be a list"])

    questions = []
    seen_ids = set()

    for i, raw in enumerate(raw_questions):
        question_errors = _check_question(raw, i)
        if question_errors:
            errors.extend(question_errors)
            continue

        q_id = raw["id"]
        if q_id in seen_ids:
            errors.append(f"Duplicate question id '{q_id}'")
            continue
        seen_ids.add(q_id)

        questions.append(_build_question(raw))

    field_metadata = tag_schema_data["field_metadata"]
    if not isinstance(field_metadata, dict):
        errors.append("Tag schema 'field_metadata' must be an object")
    else:
        for field_id, meta in field_metadata.items():
            if not isinstance(meta, dict):
                errors.append(f"Field metadata for '{field_id}' must be an object")
            elif not isinstance(meta.get("complexity_levels", []), list):
                errors.append(f"Field metadata for '{field_id}' complexity_levels must be a list")
            elif not _is_weight(meta.get("weight", 1)):
                errors.append(f"Field metadata for '{field_id}' weight must be a non-negative integer")
    tags = tag_schema_data["tags"]
    if not isinstance(tags, dict):
        errors.append("Tag schema 'tags' must be an object")

    if errors:
        _raise_invalid(errors)

    questionnaire = Questionnaire(
        version=str(questionnaire_data["version"]),
        stages=tuple(questionnaire_data["stages"]),
        complexity_levels=tuple(questionnaire_data["complexity_levels"]),
        questions=tuple(questions),
    )

    tag_schema = TagSchema(
        version=str(tag_schema_data["version"]),
        tags={name: _build_tag_info(name, info) for name, info in tags.items()},
        field_metadata={
            field_id: _build_field_metadata(meta) for field_id, meta in field_metadata.items()
        },
    )

    return SchemaSnapshot(questionnaire=questionnaire, tag_schema=tag_schema)


def _missing_keys(data: dict, required: tuple, label: str) -> List[str]:
    return [f"{label} is missing required property: {key}" for key in required if key not in data]


def _raise_invalid(errors: List[str]):
    error_msg = "Schema validation failed:\n  - " + "\n  - ".join(errors)
    raise SchemaUnavailable(error_msg)


def _check_question(raw: Any, index: int) -> List[str]:
    """Structural problems with one raw question dict."""
    if not isinstance(raw, dict):
        return [f"Question at index {index} is not an object"]

    q_id = raw.get("id")
    if not isinstance(q_id, str) or not q_id:
        return [f"Question at index {index} missing 'id'"]

    errors = []

    if not isinstance(raw.get("question"), str):
        errors.append(f"Question '{q_id}' missing 'question' text")

    tags = raw.get("tags", [])
    if not isinstance(tags, list) or not all(isinstance(t, str) and t for t in tags):
        errors.append(f"Question '{q_id}' tags must be a list of non-empty strings")

    triggers = raw.get("triggers")
    if triggers is not None:
        if not isinstance(triggers, dict):
            errors.append(f"Question '{q_id}' triggers must be an object")
        else:
            for key, targets in triggers.items():
                if not isinstance(targets, list):
                    errors.append(f"Question '{q_id}' trigger '{key}' must list question ids")

    return errors


def _build_question(raw: dict) -> Question:
    triggers = {
        str(key): tuple(targets) for key, targets in (raw.get("triggers") or {}).items()
    }
    options = raw.get("options")
    examples = raw.get("examples")

    return Question(
        id=raw["id"],
        prompt=raw["question"],
        tags=tuple(raw.get("tags", [])),
        stage=raw.get("stage", "core"),
        type=raw.get("type", "text"),
        triggers=triggers,
        skip_if=raw.get("skip_if"),
        options=tuple(options) if options is not None else None,
        hint=raw.get("hint"),
        validation=raw.get("validation"),
        examples=tuple(examples) if examples is not None else None,
        help=raw.get("help"),
    )


def _build_tag_info(name: str, info: Any) -> TagInfo:
    if isinstance(info, dict):
        return TagInfo(label=info.get("label", name), description=info.get("description"))
    return TagInfo(label=str(info))


def _is_weight(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _build_field_metadata(meta: dict) -> FieldMetadata:
    return FieldMetadata(
        tags=tuple(meta.get("tags", [])),
        related_fields=tuple(meta.get("related_fields", [])),
        complexity_levels=tuple(meta.get("complexity_levels", [])),
        weight=meta.get("weight", 1),
    )
