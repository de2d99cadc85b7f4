"""
Shared fixtures: the shipped schema plus factories for small in-memory
and on-disk schemas.
"""

import json
from pathlib import Path

import pytest

from intake.core.schema_loader import (
    QUESTIONNAIRE_FILENAME,
    TAG_SCHEMA_FILENAME,
    SchemaLoader,
    build_snapshot,
)

PROJECT_ROOT = Path(__file__).parent.parent
SCHEMA_DIR = PROJECT_ROOT / "schemas"

ALL_TIERS = ["base", "minimal", "standard", "comprehensive", "enterprise"]


def questionnaire_doc(questions):
    return {
        "version": "test",
        "stages": ["core", "review", "deep_dive"],
        "complexity_levels": list(ALL_TIERS),
        "questions": questions,
    }


def tag_schema_doc(field_metadata, tags=None):
    return {
        "version": "test",
        "tags": tags or {},
        "field_metadata": field_metadata,
    }


@pytest.fixture(scope="session")
def schema_dir():
    return SCHEMA_DIR


@pytest.fixture
def shipped_loader():
    return SchemaLoader(SCHEMA_DIR)


@pytest.fixture
def shipped_snapshot(shipped_loader):
    return shipped_loader.load()


@pytest.fixture
def make_snapshot():
    """Build a SchemaSnapshot from raw question dicts and metadata dicts."""
    def _make(questions, field_metadata=None, tags=None):
        return build_snapshot(
            questionnaire_doc(questions),
            tag_schema_doc(field_metadata or {}, tags),
        )
    return _make


@pytest.fixture
def write_schema(tmp_path):
    """Write both schema documents into tmp_path and return the directory."""
    def _write(questionnaire, tag_schema):
        with open(tmp_path / QUESTIONNAIRE_FILENAME, "w", encoding="utf-8") as f:
            json.dump(questionnaire, f)
        with open(tmp_path / TAG_SCHEMA_FILENAME, "w", encoding="utf-8") as f:
            json.dump(tag_schema, f)
        return tmp_path
    return _write
