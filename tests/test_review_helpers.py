"""
Tests for the review screen helpers.
"""

from intake.utils.review_helpers import (
    OTHER_SECTION,
    build_document_preview,
    format_answer,
    group_answers_by_section,
    section_for_field,
)


FOUNDATION_ANSWERS = {
    "doc.version": "1.0",
    "project.name": "Portal",
    "summary.problem": "Manual onboarding is slow",
    "summary.solution": "Self-service portal",
}


class TestSections:

    def test_section_by_prefix(self):
        assert section_for_field("privacy.pii")["stage"] == 5
        assert section_for_field("deployment.model")["subsection"] == "3.5 Deployment Model"

    def test_unknown_prefix(self):
        assert section_for_field("custom.field") == OTHER_SECTION
        assert section_for_field("nodot") == OTHER_SECTION


class TestFormatAnswer:

    def test_values(self):
        assert format_answer(None) == "Not provided"
        assert format_answer(True) == "Yes"
        assert format_answer(False) == "No"
        assert format_answer(["gdpr", "ccpa"]) == "gdpr, ccpa"
        assert format_answer("Portal") == "Portal"
        assert format_answer(3) == "3"


class TestGroupAnswers:

    def test_sorted_by_stage(self):
        grouped = group_answers_by_section({
            "privacy.pii": True,
            "project.name": "Portal",
            "custom.note": "x",
            "architecture.style": "monolith",
        })

        assert [s["stage"] for s in grouped] == [0, 1, 3, 5]
        assert grouped[1]["answers"][0] == {
            "field_id": "project.name",
            "question": "project.name",
            "answer": "Portal",
            "display": "Portal",
            "subsection": "1.1 Document Information",
        }

    def test_question_text_from_snapshot(self, shipped_snapshot):
        grouped = group_answers_by_section({"privacy.pii": False}, shipped_snapshot)

        entry = grouped[0]["answers"][0]
        assert entry["question"].startswith("Will the system store or process")
        assert entry["display"] == "No"

    def test_same_section_keeps_answer_order(self):
        grouped = group_answers_by_section({"summary.problem": "p", "doc.version": "1.0"})

        assert len(grouped) == 1
        assert [a["field_id"] for a in grouped[0]["answers"]] == ["summary.problem", "doc.version"]


class TestDocumentPreview:

    def test_base_tier_stages(self):
        preview = build_document_preview(FOUNDATION_ANSWERS, "base")

        assert [s["stage"] for s in preview] == [1, 2]
        assert preview[0]["completeness"] == 100
        assert preview[0]["status"] == "complete"
        assert preview[1]["completeness"] == 0
        assert preview[1]["status"] == "minimal"

    def test_partial_stage(self):
        answers = dict(FOUNDATION_ANSWERS, **{"context.business_goals": "Grow"})

        stage_two = build_document_preview(answers, "base")[1]

        assert stage_two["completeness"] == 50
        assert stage_two["status"] == "partial"
        assert stage_two["answered"] == 1
        assert stage_two["total_required"] == 2

    def test_rounding(self):
        answers = {"doc.version": "1.0", "project.name": "Portal", "summary.problem": "p"}

        stage_one = build_document_preview(answers, "base")[0]

        assert stage_one["completeness"] == 75
        assert stage_one["status"] == "partial"

    def test_empty_values_not_counted(self):
        answers = {"doc.version": "", "project.name": None, "summary.problem": "p"}

        assert build_document_preview(answers, "base")[0]["completeness"] == 25

    def test_enterprise_includes_all_stages(self):
        preview = build_document_preview({}, "enterprise")

        assert [s["stage"] for s in preview] == list(range(1, 10))
        # Appendices have no required fields
        assert preview[-1]["completeness"] == 100
        assert preview[-1]["status"] == "complete"

    def test_tier_alias_and_unknown(self):
        assert len(build_document_preview({}, "startup")) == 3
        assert len(build_document_preview({}, "whatever")) == 2
